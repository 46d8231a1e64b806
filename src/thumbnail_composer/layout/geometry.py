"""
Pixel geometry for every arrangement in the catalog.

All caller-supplied numbers (canvas size, padding, image count) pass
through :func:`sanitize_numeric` first, so the shape formulas below only
ever see finite values. Every emitted slot is clamped to
``MIN_SLOT_DIMENSION`` on both axes and to a non-negative origin.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from thumbnail_composer.constants import (
    MIN_SLOT_DIMENSION,
    THUMBNAIL_HEIGHT,
    THUMBNAIL_WIDTH,
)
from thumbnail_composer.errors import InvalidGeometryInput, InvalidLayout
from thumbnail_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable

    from thumbnail_composer.layout.catalog import ArrangementSpec
    from thumbnail_composer.type_defs import DividerOrientation

# Spotlight switches from magazine to two-column grid above this count
_SPOTLIGHT_MAGAZINE_MAX = 3


@dataclass(frozen=True, slots=True)
class SlotRect:
    """Image slot in canvas pixel space."""

    width: int
    height: int
    left: int
    top: int

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def box(self) -> tuple[int, int, int, int]:
        return (self.left, self.top,
                self.left + self.width, self.top + self.height)


@dataclass(frozen=True, slots=True)
class DividerLine:
    """
    A divider centred on a grid cell boundary.

    ``position`` is the x coordinate of a vertical boundary or the y
    coordinate of a horizontal one. ``skew_degrees`` only applies to
    vertical dividers.
    """

    orientation: DividerOrientation
    position: int
    thickness: int
    length: int
    skew_degrees: float = 0.0

    @property
    def is_vertical(self) -> bool:
        return self.orientation == "vertical"


@dataclass(frozen=True, slots=True)
class LayoutGeometry:
    """Ordered slots (one per image) plus grid dividers."""

    slots: tuple[SlotRect, ...] = ()
    dividers: tuple[DividerLine, ...] = ()

    def __len__(self) -> int:
        return len(self.slots)


def _coerce_finite(value: object) -> float:
    """Return ``value`` as a finite float or raise InvalidGeometryInput."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"Not a number: {value!r}"
        raise InvalidGeometryInput(msg) from exc
    if not math.isfinite(number):
        msg = f"Not a finite number: {value!r}"
        raise InvalidGeometryInput(msg)
    return number


def sanitize_numeric(
    value: object,
    default: float,
    *,
    minimum: float | None = None,
    maximum: float | None = None,
) -> float:
    """
    Coerce an external numeric input to a safe finite value.

    Non-numeric, NaN and infinite inputs become ``default``; finite
    values outside ``minimum``/``maximum`` (when given) are clamped.
    """
    try:
        number = _coerce_finite(value)
    except InvalidGeometryInput as exc:
        logger.debug("Using default %s for geometry input: %s", default, exc)
        return default
    if minimum is not None and number < minimum:
        logger.debug("Clamping geometry input %s to %s", number, minimum)
        return minimum
    if maximum is not None and number > maximum:
        logger.debug("Clamping geometry input %s to %s", number, maximum)
        return maximum
    return number


def _slot(x: float, y: float, w: float, h: float, padding: float) -> SlotRect:
    """Inset a cell by ``padding`` and apply the slot invariants."""
    return SlotRect(
        width=max(MIN_SLOT_DIMENSION, math.floor(w - 2 * padding)),
        height=max(MIN_SLOT_DIMENSION, math.floor(h - 2 * padding)),
        left=max(0, math.floor(x + padding)),
        top=max(0, math.floor(y + padding)),
    )


def _stack(  # noqa: PLR0913
    x: float,
    y: float,
    w: float,
    h: float,
    count: int,
    padding: float,
    *,
    vertical: bool = True,
) -> list[SlotRect]:
    """Split a region into ``count`` equal cells along one axis."""
    if count <= 0:
        return []
    if vertical:
        step = h / count
        return [_slot(x, y + i * step, w, step, padding) for i in range(count)]
    step = w / count
    return [_slot(x + i * step, y, step, h, padding) for i in range(count)]


def compute_grid_geometry(  # noqa: PLR0913
    rows: int,
    cols: int,
    count: int,
    canvas_width: float,
    canvas_height: float,
    padding: float,
    *,
    divider_width: float | None = None,
    tilt_degrees: float = 0.0,
) -> LayoutGeometry:
    """
    Regular grid, filled row-major.

    Cells are ``floor(W/cols)`` by ``floor(H/rows)``. Dividers sit on
    the interior cell boundaries; their thickness defaults to twice
    the padding.
    """
    cell_w = math.floor(canvas_width / cols)
    cell_h = math.floor(canvas_height / rows)
    slots = []
    for i in range(min(count, rows * cols)):
        row, col = divmod(i, cols)
        slots.append(_slot(col * cell_w, row * cell_h, cell_w, cell_h, padding))

    thickness = 2 * padding if divider_width is None else divider_width
    thickness = math.floor(sanitize_numeric(thickness, 0, minimum=0))
    tilt = sanitize_numeric(tilt_degrees, 0.0)
    dividers = [
        DividerLine("vertical", col * cell_w, thickness,
                    math.floor(canvas_height), tilt)
        for col in range(1, cols)
    ]
    dividers.extend(
        DividerLine("horizontal", row * cell_h, thickness,
                    math.floor(canvas_width))
        for row in range(1, rows)
    )
    return LayoutGeometry(tuple(slots), tuple(dividers))


def _hero_side(count: int, w: float, h: float, p: float) -> list[SlotRect]:
    if count == 1:
        return [_slot(0, 0, w, h, p)]
    hero_w = math.floor(w * 2 / 3)
    return [
        _slot(0, 0, hero_w, h, p),
        *_stack(hero_w, 0, w - hero_w, h, count - 1, p),
    ]


def _corner_grid(count: int, w: float, h: float, p: float) -> list[SlotRect]:
    half_w = math.floor(w / 2)
    half_h = math.floor(h / 2)
    if count == 1:
        return [_slot(0, 0, w, h, p)]
    if count == 2:  # noqa: PLR2004
        return _stack(0, 0, w, h, 2, p, vertical=False)
    if count == 3:  # noqa: PLR2004
        return [
            _slot(0, 0, half_w, h, p),
            *_stack(half_w, 0, w - half_w, h, 2, p),
        ]
    corners = [
        _slot(0, 0, half_w, half_h, p),
        _slot(half_w, 0, w - half_w, half_h, p),
        _slot(0, half_h, half_w, h - half_h, p),
        _slot(half_w, half_h, w - half_w, h - half_h, p),
    ]
    if count == 4:  # noqa: PLR2004
        return corners
    # the centre slot is last so it is painted over the corners
    return [*corners, _slot(w / 4, h / 4, half_w, half_h, p)]


def _banner_split(count: int, w: float, h: float, p: float) -> list[SlotRect]:
    if count == 1:
        return [_slot(0, 0, w, h, p)]
    banner_h = math.floor(h * 3 / 5)
    return [
        _slot(0, 0, w, banner_h, p),
        *_stack(0, banner_h, w, h - banner_h, count - 1, p, vertical=False),
    ]


def _spotlight(count: int, w: float, h: float, p: float) -> list[SlotRect]:
    if count == 1:
        return [_slot(0, 0, w, h, p)]
    if count <= _SPOTLIGHT_MAGAZINE_MAX:
        main_w = math.floor(w * 3 / 5)
        return [
            _slot(0, 0, main_w, h, p),
            *_stack(main_w, 0, w - main_w, h, count - 1, p),
        ]
    rows = math.ceil(count / 2)
    cell_w = w / 2
    cell_h = h / rows
    return [
        _slot((i % 2) * cell_w, (i // 2) * cell_h, cell_w, cell_h, p)
        for i in range(count)
    ]


def _l_shape(count: int, w: float, h: float, p: float) -> list[SlotRect]:
    if count == 1:
        return [_slot(0, 0, w, h, p)]
    main_w = math.floor(w * 2 / 3)
    main_h = math.floor(h * 2 / 3)
    if count == 2:  # noqa: PLR2004
        return [
            _slot(0, 0, main_w, h, p),
            _slot(main_w, 0, w - main_w, h, p),
        ]
    if count == 3:  # noqa: PLR2004
        return [
            _slot(0, 0, main_w, main_h, p),
            _slot(main_w, 0, w - main_w, h, p),
            _slot(0, main_h, main_w, h - main_h, p),
        ]
    rest = count - 1
    right_n = math.ceil(rest / 2)
    bottom_n = rest - right_n
    return [
        _slot(0, 0, main_w, main_h, p),
        *_stack(main_w, 0, w - main_w, h, right_n, p),
        *_stack(0, main_h, main_w, h - main_h, bottom_n, p, vertical=False),
    ]


CUSTOM_SHAPES: dict[
    str, Callable[[int, float, float, float], list[SlotRect]],
] = {
    "hero-side": _hero_side,
    "corner-grid": _corner_grid,
    "banner-split": _banner_split,
    "spotlight": _spotlight,
    "l-shape": _l_shape,
}


def compute_custom_geometry(
    shape_name: str,
    count: int,
    canvas_width: float,
    canvas_height: float,
    padding: float,
) -> LayoutGeometry:
    """Closed-form subdivision for a named custom shape."""
    try:
        shape = CUSTOM_SHAPES[shape_name]
    except KeyError as exc:
        raise InvalidLayout(shape_name) from exc
    return LayoutGeometry(
        tuple(shape(count, canvas_width, canvas_height, padding)),
    )


def compute_geometry(  # noqa: PLR0913
    spec: ArrangementSpec,
    count: object,
    canvas_width: object = THUMBNAIL_WIDTH,
    canvas_height: object = THUMBNAIL_HEIGHT,
    padding: object = 0,
    *,
    divider_width: object = None,
    tilt_degrees: object = 0.0,
) -> LayoutGeometry:
    """
    Compute slots (and grid dividers) for ``count`` images.

    Inputs are sanitised first: non-finite canvas sizes fall back to
    1280x720, padding to 0 and count to 1. A canvas or count that is
    still non-positive yields an empty geometry. At most
    ``spec.max_images`` slots are produced.
    """
    width = sanitize_numeric(canvas_width, THUMBNAIL_WIDTH)
    height = sanitize_numeric(canvas_height, THUMBNAIL_HEIGHT)
    n = math.floor(sanitize_numeric(count, 1))
    if width <= 0 or height <= 0 or n <= 0:
        logger.debug(
            "Empty geometry for canvas %sx%s with %s images", width, height, n,
        )
        return LayoutGeometry()

    # padding past half the short side only collapses slots to the floor
    pad = sanitize_numeric(padding, 0, minimum=0, maximum=min(width, height) / 2)

    n = min(n, spec.max_images)
    if spec.is_grid:
        # rows/cols are guaranteed by ArrangementSpec validation
        return compute_grid_geometry(
            spec.rows or 1,
            spec.cols or 1,
            n,
            width,
            height,
            pad,
            divider_width=(
                None if divider_width is None
                else sanitize_numeric(
                    divider_width, 2 * pad, minimum=0, maximum=max(width, height),
                )
            ),
            tilt_degrees=sanitize_numeric(tilt_degrees, 0.0),
        )
    return compute_custom_geometry(spec.shape_name or spec.id, n, width, height, pad)
