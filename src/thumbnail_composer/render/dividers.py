"""Divider graphics drawn over grid cell boundaries."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from thumbnail_composer.constants import COLOR_MODE_RGBA, MAX_DIVIDER_TILT

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from thumbnail_composer.layout.geometry import DividerLine
    from thumbnail_composer.type_defs import RGB


@dataclass(frozen=True, slots=True)
class DividerGraphic:
    """A transparent RGBA layer and where its top-left corner goes."""

    layer: Image.Image
    left: int
    top: int


def clamp_tilt(degrees: float) -> float:
    """Limit skew so the parallelogram stays a sensible width."""
    if not math.isfinite(degrees):
        return 0.0
    return max(-MAX_DIVIDER_TILT, min(MAX_DIVIDER_TILT, degrees))


def _vertical(divider: DividerLine, fill: tuple[int, int, int, int]) -> DividerGraphic:
    thickness = divider.thickness
    height = divider.length
    skew = math.tan(math.radians(clamp_tilt(divider.skew_degrees))) * height
    offset = round(abs(skew))
    width = thickness + offset

    # positive tilt leans the top edge to the right
    if skew >= 0:
        polygon = [(offset, 0), (offset + thickness, 0),
                   (thickness, height), (0, height)]
    else:
        polygon = [(0, 0), (thickness, 0),
                   (offset + thickness, height), (offset, height)]

    layer = Image.new(COLOR_MODE_RGBA, (width, height), (0, 0, 0, 0))
    ImageDraw.Draw(layer).polygon(polygon, fill=fill)
    return DividerGraphic(layer, divider.position - width // 2, 0)


def _horizontal(
    divider: DividerLine,
    fill: tuple[int, int, int, int],
) -> DividerGraphic:
    layer = Image.new(
        COLOR_MODE_RGBA, (divider.length, divider.thickness), fill,
    )
    return DividerGraphic(layer, 0, divider.position - divider.thickness // 2)


def render_divider(divider: DividerLine, color: RGB) -> DividerGraphic | None:
    """
    Rasterize one divider centred on its boundary.

    Vertical dividers become parallelograms skewed by their tilt;
    horizontal ones are straight bars. Zero-thickness dividers are
    not drawn and return ``None``.
    """
    if divider.thickness <= 0 or divider.length <= 0:
        return None
    fill = (*color, 255)
    if divider.is_vertical:
        return _vertical(divider, fill)
    return _horizontal(divider, fill)


def render_dividers(
    dividers: Sequence[DividerLine],
    color: RGB,
) -> list[DividerGraphic]:
    """Render every drawable divider, vertical ones first as listed."""
    graphics = []
    for divider in dividers:
        graphic = render_divider(divider, color)
        if graphic is not None:
            graphics.append(graphic)
    return graphics
