"""Tests for slot and divider geometry."""
import math

import pytest

from thumbnail_composer.constants import MIN_SLOT_DIMENSION
from thumbnail_composer.layout import geometry as tc_geometry
from thumbnail_composer.layout.catalog import DEFAULT_CATALOG
from thumbnail_composer.layout.geometry import SlotRect, compute_geometry


def _assert_valid(slots: tuple[SlotRect, ...]) -> None:
    for slot in slots:
        assert slot.width >= MIN_SLOT_DIMENSION
        assert slot.height >= MIN_SLOT_DIMENSION
        assert slot.left >= 0
        assert slot.top >= 0
        assert all(isinstance(v, int) for v in (
            slot.width, slot.height, slot.left, slot.top,
        ))


class TestSanitizeNumeric:
    @pytest.mark.parametrize(
        "value", [math.nan, math.inf, -math.inf, None, "abc", object()],
    )
    def test_bad_values_use_default(self, value: object) -> None:
        assert tc_geometry.sanitize_numeric(value, 42) == 42  # noqa: PLR2004

    def test_numeric_strings(self) -> None:
        assert tc_geometry.sanitize_numeric("12.5", 0) == pytest.approx(12.5)

    def test_minimum(self) -> None:
        assert tc_geometry.sanitize_numeric(-5, 0, minimum=0) == 0

    def test_maximum(self) -> None:
        assert tc_geometry.sanitize_numeric(1e308, 0, maximum=360) == 360  # noqa: PLR2004

    def test_huge_padding_collapses_to_floor(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["1x2"], 2, 1280, 720, 1e308)
        assert geometry.slots == (
            SlotRect(100, 100, 360, 360),
            SlotRect(100, 100, 1000, 360),
        )


class TestGridGeometry:
    def test_single_image_fills_canvas(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["1x1"], 1, 1280, 720, 5)
        assert geometry.slots == (SlotRect(1270, 710, 5, 5),)
        assert geometry.dividers == ()

    def test_two_by_two_cells(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["2x2"], 4, 1280, 720, 0)
        assert [s.box for s in geometry.slots] == [
            (0, 0, 640, 360),
            (640, 0, 1280, 360),
            (0, 360, 640, 720),
            (640, 360, 1280, 720),
        ]

    def test_two_by_two_dividers(self) -> None:
        """One vertical divider at x=640 and one horizontal at y=360."""
        geometry = compute_geometry(
            DEFAULT_CATALOG["2x2"], 4, 1280, 720, 0, divider_width=10,
        )
        vertical = [d for d in geometry.dividers if d.is_vertical]
        horizontal = [d for d in geometry.dividers if not d.is_vertical]
        assert [d.position for d in vertical] == [640]
        assert [d.position for d in horizontal] == [360]
        assert vertical[0].length == 720  # noqa: PLR2004
        assert horizontal[0].length == 1280  # noqa: PLR2004

    def test_floor_cell_size_and_padding(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["1x3"], 3, 1280, 720, 5)
        assert [s.left for s in geometry.slots] == [5, 431, 857]
        assert {s.width for s in geometry.slots} == {416}

    def test_tilt_only_on_vertical(self) -> None:
        geometry = compute_geometry(
            DEFAULT_CATALOG["2x2"], 4, 1280, 720, 5, tilt_degrees=10,
        )
        vertical, horizontal = geometry.dividers
        assert vertical.skew_degrees == pytest.approx(10.0)
        assert horizontal.skew_degrees == 0.0
        assert vertical.thickness == 10  # noqa: PLR2004

    def test_slots_capped_at_capacity(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["1x2"], 5, 1280, 720, 0)
        assert len(geometry) == 2  # noqa: PLR2004


class TestCustomGeometry:
    @pytest.mark.parametrize("shape", [
        "hero-side", "corner-grid", "banner-split", "spotlight", "l-shape",
    ])
    def test_every_count_is_valid(self, shape: str) -> None:
        spec = DEFAULT_CATALOG[shape]
        for count in range(1, spec.max_images + 1):
            geometry = compute_geometry(spec, count, 1280, 720, 4)
            assert len(geometry.slots) == count
            assert geometry.dividers == ()
            _assert_valid(geometry.slots)

    def test_hero_side(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["hero-side"], 4, 1280, 720, 0)
        hero, *side = geometry.slots
        assert hero == SlotRect(853, 720, 0, 0)
        assert [s.top for s in side] == [0, 240, 480]
        assert {s.left for s in side} == {853}

    def test_corner_grid_centre_is_last(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["corner-grid"], 5, 1280, 720, 0)
        assert geometry.slots[-1] == SlotRect(640, 360, 320, 180)

    def test_banner_split(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["banner-split"], 3, 1280, 720, 0)
        banner, left, right = geometry.slots
        assert banner == SlotRect(1280, 432, 0, 0)
        assert (left.top, right.top) == (432, 432)
        assert (left.width, right.left) == (640, 640)

    def test_spotlight_grid_for_four(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["spotlight"], 4, 1280, 720, 0)
        assert {s.size for s in geometry.slots} == {(640, 360)}

    def test_true_l_shape(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["l-shape"], 3, 1200, 720, 0)
        main, column, strip = geometry.slots
        assert main == SlotRect(800, 480, 0, 0)
        assert column == SlotRect(400, 720, 800, 0)
        assert strip == SlotRect(800, 240, 0, 480)

    def test_l_shape_five(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["l-shape"], 5, 1200, 720, 0)
        _, right_a, right_b, bottom_a, bottom_b = geometry.slots
        assert (right_a.left, right_b.left) == (800, 800)
        assert (bottom_a.top, bottom_b.top) == (480, 480)


class TestSanitisedInputs:
    @pytest.mark.parametrize("arrangement_id", sorted(DEFAULT_CATALOG))
    @pytest.mark.parametrize(
        ("width", "height", "padding", "count"),
        [
            (math.nan, 720, 0, 3),
            (1280, math.inf, 10, 2),
            (1280, 720, math.nan, 4),
            (1280, 720, 5, math.nan),
            (100, 100, 0, 6),
            (100, 100, 80, 5),
            (150, 333, 1000, 1),
            (1280, 720, 1e308, 2),
        ],
    )
    def test_invariants_hold(  # noqa: PLR0913
        self,
        arrangement_id: str,
        width: float,
        height: float,
        padding: float,
        count: float,
    ) -> None:
        geometry = compute_geometry(
            DEFAULT_CATALOG[arrangement_id], count, width, height, padding,
        )
        assert geometry.slots
        _assert_valid(geometry.slots)

    def test_nan_count_means_one(self) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["2x2"], math.nan, 1280, 720, 0)
        assert len(geometry) == 1

    @pytest.mark.parametrize(
        ("width", "height", "count"),
        [(0, 720, 2), (1280, -5, 2), (1280, 720, 0), (1280, 720, -1)],
    )
    def test_non_positive_inputs_give_empty(
        self,
        width: float,
        height: float,
        count: float,
    ) -> None:
        geometry = compute_geometry(DEFAULT_CATALOG["1x2"], count, width, height, 0)
        assert geometry.slots == ()
        assert geometry.dividers == ()

    def test_unknown_shape(self) -> None:
        with pytest.raises(ValueError, match="Invalid grid layout"):
            tc_geometry.compute_custom_geometry("hexagon", 2, 100, 100, 0)
