"""Tests for planning, slot processing and painting of thumbnails."""
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image
from pytest_mock import MockerFixture

from thumbnail_composer.errors import (
    ImageProcessingFailure,
    InsufficientImages,
    InvalidLayout,
)
from thumbnail_composer.layout import DEFAULT_CATALOG, SlotRect
from thumbnail_composer.render import compositor as tc_compositor
from thumbnail_composer.render.compositor import (
    CompositeOp,
    CompositionPlan,
    SlotOptions,
)
from thumbnail_composer.render.text import TextOverlay

ImageFactory = Callable[..., Path]

NO_COSMETICS = SlotOptions(cosmetics=False)


def _layer(color: tuple[int, int, int]) -> Image.Image:
    return Image.new("RGBA", (10, 10), (*color, 255))


class TestReconcileImages:
    def test_explicit_grid_repeats_cyclically(self) -> None:
        spec, images = tc_compositor.reconcile_images(
            ["a", "b"], DEFAULT_CATALOG["2x2"], downgrade=False,
        )
        assert spec.id == "2x2"
        assert images == ["a", "b", "a", "b"]

    def test_auto_grid_downgrades(self) -> None:
        spec, images = tc_compositor.reconcile_images(
            ["a", "b"], DEFAULT_CATALOG["2x2"], downgrade=True,
        )
        assert spec.id == "1x2"
        assert images == ["a", "b"]

    def test_downgrade_only_up_to_three(self) -> None:
        spec, images = tc_compositor.reconcile_images(
            ["a", "b", "c", "d"], DEFAULT_CATALOG["2x3"], downgrade=True,
        )
        assert spec.id == "2x3"
        assert images == ["a", "b", "c", "d", "a", "b"]

    def test_extra_images_dropped(self) -> None:
        spec, images = tc_compositor.reconcile_images(
            list("abcdefgh"), DEFAULT_CATALOG["2x2"],
        )
        assert spec.id == "2x2"
        assert images == ["a", "b", "c", "d"]

    def test_custom_shape_untouched(self) -> None:
        spec, images = tc_compositor.reconcile_images(
            ["a", "b"], DEFAULT_CATALOG["hero-side"],
        )
        assert spec.id == "hero-side"
        assert images == ["a", "b"]

    def test_empty_raises(self) -> None:
        with pytest.raises(InsufficientImages):
            tc_compositor.reconcile_images([], DEFAULT_CATALOG["1x1"])

    def test_fill_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        tc_compositor.reconcile_images(
            ["a"], DEFAULT_CATALOG["1x3"], downgrade=False,
        )
        assert "Filled 2 empty slots" in caplog.text


def test_cycle_images() -> None:
    assert tc_compositor.cycle_images([1, 2, 3], 5) == [1, 2, 3, 1, 2]


class TestResolveArrangement:
    def test_explicit_alias(self) -> None:
        spec, decision = tc_compositor.resolve_arrangement(["x"], " 3-Split ")
        assert decision is None
        assert spec.id == "1x3"

    def test_explicit_unknown(self) -> None:
        with pytest.raises(InvalidLayout, match="Invalid grid layout: 7x7"):
            tc_compositor.resolve_arrangement(["x"], "7x7")

    def test_auto_runs_selector(self, make_image_file: ImageFactory) -> None:
        path = make_image_file()
        spec, decision = tc_compositor.resolve_arrangement([path], "auto")
        assert spec.id == "1x1"
        assert decision is not None
        assert decision.confidence == 1.0


class TestPlanComposition:
    def test_explicit_grid_with_two_images(
        self, make_image_file: ImageFactory,
    ) -> None:
        a, b = make_image_file(), make_image_file()
        plan = tc_compositor.plan_composition([a, b], "2x2", delimiter_width=4)
        assert plan.spec.id == "2x2"
        assert plan.images == (a, b, a, b)
        assert len(plan.geometry.slots) == 4  # noqa: PLR2004
        assert plan.geometry.slots[0] == SlotRect(636, 356, 2, 2)

    def test_empty_paths(self) -> None:
        with pytest.raises(InsufficientImages):
            tc_compositor.plan_composition([], "auto")


class TestDrawList:
    @pytest.fixture
    def grid_plan(self) -> CompositionPlan:
        spec = DEFAULT_CATALOG["2x2"]
        geometry = tc_compositor.compute_geometry(
            spec, 4, 1280, 720, 2, divider_width=4,
        )
        return CompositionPlan(spec, ("a", "b", "c", "d"), geometry)

    def _buffers(self, plan: CompositionPlan) -> list[Image.Image]:
        return [
            Image.new("RGBA", rect.size, (0, 0, 0, 255))
            for rect in plan.geometry.slots
        ]

    def test_images_then_dividers(self, grid_plan: CompositionPlan) -> None:
        ops = tc_compositor.build_draw_list(grid_plan, self._buffers(grid_plan))
        assert [op.kind for op in ops] == [
            "image", "image", "image", "image", "divider", "divider",
        ]

    def test_overlay_text_on_top(self, grid_plan: CompositionPlan) -> None:
        ops = tc_compositor.build_draw_list(
            grid_plan,
            self._buffers(grid_plan),
            text_overlay=TextOverlay("Top", layer="overlay"),
        )
        assert ops[-1].kind == "text"
        assert ops[-1].blend_mode == "over"

    @pytest.mark.parametrize(
        ("layer", "blend"), [("between", "over"), ("smart-blend", "overlay")],
    )
    def test_text_inserted_at_midpoint(
        self, grid_plan: CompositionPlan, layer: str, blend: str,
    ) -> None:
        ops = tc_compositor.build_draw_list(
            grid_plan,
            self._buffers(grid_plan),
            text_overlay=TextOverlay("Mid", layer=layer),
        )
        assert len(ops) == 7  # noqa: PLR2004
        assert ops[3].kind == "text"
        assert ops[3].blend_mode == blend

    def test_blank_text_skipped(self, grid_plan: CompositionPlan) -> None:
        ops = tc_compositor.build_draw_list(
            grid_plan,
            self._buffers(grid_plan),
            text_overlay=TextOverlay("   "),
        )
        assert all(op.kind != "text" for op in ops)

    def test_custom_shape_has_no_dividers(self) -> None:
        spec = DEFAULT_CATALOG["hero-side"]
        geometry = tc_compositor.compute_geometry(spec, 4, 1280, 720, 0)
        plan = CompositionPlan(spec, ("a", "b", "c", "d"), geometry)
        ops = tc_compositor.build_draw_list(plan, self._buffers(plan))
        assert all(op.kind == "image" for op in ops)

    def test_insert_text_op(self) -> None:
        ops = [CompositeOp(_layer((0, 0, 0)), 0, 0) for _ in range(5)]
        text = CompositeOp(_layer((1, 1, 1)), 0, 0, kind="text")
        assert tc_compositor.insert_text_op(ops, text, "between")[2] is text
        assert tc_compositor.insert_text_op(ops, text, "overlay")[-1] is text


class TestPaint:
    def test_later_ops_on_top(self) -> None:
        ops = [
            CompositeOp(_layer((255, 0, 0)), 0, 0),
            CompositeOp(_layer((0, 0, 255)), 5, 5),
        ]
        canvas = tc_compositor.paint(ops, (255, 255, 255), (20, 20))
        assert canvas.getpixel((2, 2)) == (255, 0, 0, 255)
        assert canvas.getpixel((7, 7)) == (0, 0, 255, 255)
        assert canvas.getpixel((18, 18)) == (255, 255, 255, 255)


class TestProcessSlot:
    def test_fits_slot(self, make_image_file: ImageFactory) -> None:
        path = make_image_file(size=(300, 200))
        out = tc_compositor.process_slot(
            path, 0, SlotRect(120, 150, 0, 0), SlotOptions(),
        )
        assert out.size == (120, 150)
        assert out.mode == "RGBA"

    def test_failure_names_one_based_index(self, tmp_path: Path) -> None:
        with pytest.raises(ImageProcessingFailure) as excinfo:
            tc_compositor.process_slot(
                tmp_path / "missing.png", 2, SlotRect(100, 100, 0, 0),
                NO_COSMETICS,
            )
        assert excinfo.value.index == 3  # noqa: PLR2004
        assert "Failed to process image 3" in str(excinfo.value)

    def test_enhance_is_applied(
        self, make_image_file: ImageFactory, mocker: MockerFixture,
    ) -> None:
        spy = mocker.spy(tc_compositor, "enhance_image")
        tc_compositor.process_slot(
            make_image_file(), 0, SlotRect(100, 100, 0, 0),
            SlotOptions(enhance=True, enhance_level="high", cosmetics=False),
        )
        assert spy.call_count == 1
        assert spy.call_args.args[1] == "high"

    def test_enhancement_error_keeps_slot(
        self, make_image_file: ImageFactory, mocker: MockerFixture,
    ) -> None:
        """A failing adjustment falls back to the unenhanced image."""
        mocker.patch(
            "thumbnail_composer.render.raster.gamma",
            side_effect=ValueError("gamma failed"),
        )
        out = tc_compositor.process_slot(
            make_image_file(), 0, SlotRect(200, 200, 0, 0),
            SlotOptions(enhance=True),
        )
        assert out.size == (200, 200)
        assert out.mode == "RGBA"


@pytest.mark.slow
class TestEndToEnd:
    """Auto layout selection through to the painted canvas."""

    def _compose(self, paths: list[Path], mode: str = "auto") -> str:
        plan = tc_compositor.plan_composition(paths, mode)
        result = tc_compositor.compose(plan, options=NO_COSMETICS)
        assert result.image.size == (1280, 720)
        return result.layout

    def test_single_image(self, make_image_file: ImageFactory) -> None:
        assert self._compose([make_image_file()]) == "1x1"

    def test_two_squares(self, make_image_file: ImageFactory) -> None:
        paths = [make_image_file(), make_image_file()]
        assert self._compose(paths) == "1x2"

    def test_four_mostly_square(self, make_image_file: ImageFactory) -> None:
        paths = [make_image_file() for _ in range(3)]
        paths.append(make_image_file(size=(178, 100)))
        assert self._compose(paths) == "2x2"

    def test_six_with_subjects(self, make_image_file: ImageFactory) -> None:
        paths = [make_image_file(subject=True) for _ in range(4)]
        paths += [make_image_file(), make_image_file()]
        assert self._compose(paths) == "2x3"

    def test_side_by_side_pixels(self, make_image_file: ImageFactory) -> None:
        red = make_image_file(color=(255, 0, 0))
        blue = make_image_file(color=(0, 0, 255))
        plan = tc_compositor.plan_composition([red, blue], "1x2")
        result = tc_compositor.compose(plan, options=NO_COSMETICS)
        assert result.image.getpixel((320, 360)) == (255, 0, 0, 255)
        assert result.image.getpixel((960, 360)) == (0, 0, 255, 255)
        assert result.images_used == 2  # noqa: PLR2004

    def test_dividers_painted_in_colour(
        self, make_image_file: ImageFactory,
    ) -> None:
        paths = [make_image_file(color=(0, 0, 0)) for _ in range(2)]
        plan = tc_compositor.plan_composition(
            paths, "1x2", delimiter_width=10,
        )
        result = tc_compositor.compose(
            plan, options=NO_COSMETICS, divider_color=(0, 255, 0),
        )
        assert result.image.getpixel((640, 360)) == (0, 255, 0, 255)
