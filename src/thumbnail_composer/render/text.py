"""Text overlay rendering as a separate, tightly cropped RGBA layer."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from thumbnail_composer.config_defaults import (
    DEFAULT_TEXT_EFFECT,
    DEFAULT_TEXT_FONT,
    DEFAULT_TEXT_LAYER,
    DEFAULT_TEXT_OPACITY,
    DEFAULT_TEXT_POSITION,
    DEFAULT_TEXT_SIZE,
)
from thumbnail_composer.constants import (
    COLOR_BLACK,
    COLOR_MODE_RGBA,
    COLOR_WHITE,
    TEXT_BACKGROUND_ALPHA,
    TEXT_BACKGROUND_PAD,
    TEXT_GLOW_RADIUS,
    TEXT_MARGIN_PX,
    TEXT_SHADOW_BLUR,
    TEXT_SHADOW_OFFSET,
)
from thumbnail_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from thumbnail_composer.type_defs import (
        RGB,
        TextEffect,
        TextLayer,
        TextPosition,
    )

_FALLBACK_FONTS = ("DejaVuSans-Bold.ttf", "DejaVuSans.ttf")
_OUTLINE_DIVISOR = 16
_MIN_OUTLINE = 2

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True, slots=True)
class TextOverlay:
    """What to write on the thumbnail and how to style it."""

    text: str
    font: str = DEFAULT_TEXT_FONT
    size: int = DEFAULT_TEXT_SIZE
    color: RGB = COLOR_WHITE
    opacity: float = DEFAULT_TEXT_OPACITY
    position: TextPosition = DEFAULT_TEXT_POSITION
    effect: TextEffect = DEFAULT_TEXT_EFFECT
    layer: TextLayer = DEFAULT_TEXT_LAYER

    def __post_init__(self) -> None:
        if self.size <= 0:
            msg = f"Text size must be positive, got {self.size}"
            raise ValueError(msg)
        if not 0.0 <= self.opacity <= 1.0:
            msg = f"Text opacity must be in [0, 1], got {self.opacity}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class TextGraphic:
    """Rendered text layer and its top-left position on the canvas."""

    layer: Image.Image
    left: int
    top: int


@lru_cache(maxsize=16)
def load_font(name: str, size: int) -> FontType:
    """Load ``name`` at ``size`` px, falling back to DejaVu, then Pillow's font."""
    for candidate in (name, *_FALLBACK_FONTS):
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    logger.warning("Font %s not found, using Pillow default", name)
    return ImageFont.load_default(size)


def _outline_width(size: int) -> int:
    return max(_MIN_OUTLINE, size // _OUTLINE_DIVISOR)


def _effect_pad(effect: TextEffect, size: int) -> int:
    """Room around the glyphs so effects are not cut off."""
    if effect == "glow":
        return TEXT_GLOW_RADIUS * 2
    if effect == "background":
        return TEXT_BACKGROUND_PAD
    if effect in {"shadow", "smart-blend"}:
        return max(TEXT_SHADOW_OFFSET) + TEXT_SHADOW_BLUR * 2
    if effect == "outline":
        return _outline_width(size)
    return 0


def anchor_position(
    position: TextPosition,
    box: tuple[int, int],
    canvas: tuple[int, int],
    margin: int = TEXT_MARGIN_PX,
) -> tuple[int, int]:
    """Top-left corner for a ``box`` placed at a named canvas anchor."""
    box_w, box_h = box
    canvas_w, canvas_h = canvas
    center_x = (canvas_w - box_w) // 2
    center_y = (canvas_h - box_h) // 2
    right_x = canvas_w - margin - box_w
    bottom_y = canvas_h - margin - box_h
    anchors = {
        "top": (center_x, margin),
        "bottom": (center_x, bottom_y),
        "left": (margin, center_y),
        "right": (right_x, center_y),
        "center": (center_x, center_y),
        "top-left": (margin, margin),
        "top-right": (right_x, margin),
        "bottom-left": (margin, bottom_y),
        "bottom-right": (right_x, bottom_y),
    }
    try:
        return anchors[position]
    except KeyError as exc:
        msg = f"Unknown text position: {position}"
        raise ValueError(msg) from exc


def _text_mask(
    text: str,
    font: FontType,
    size: tuple[int, int],
    origin: tuple[int, int],
    stroke: int = 0,
) -> Image.Image:
    """Greyscale coverage mask of the glyphs."""
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).text(
        origin, text, font=font, fill=255, stroke_width=stroke, stroke_fill=255,
    )
    return mask


def _solid(size: tuple[int, int], color: RGB, mask: Image.Image) -> Image.Image:
    layer = Image.new(COLOR_MODE_RGBA, size, (*color, 0))
    layer.putalpha(mask)
    return layer


def _apply_opacity(layer: Image.Image, opacity: float) -> Image.Image:
    if opacity >= 1.0:
        return layer
    alpha = layer.getchannel("A").point(lambda a: round(a * opacity))
    layer.putalpha(alpha)
    return layer


def render_text_layer(
    overlay: TextOverlay,
    canvas_size: tuple[int, int],
) -> TextGraphic:
    """
    Render ``overlay`` into its own layer positioned on the canvas.

    The layer is only as large as the glyphs plus the room the effect
    needs; the anchor is computed for the glyph box so effects hang
    outside the 40 px margin rather than shifting the text.
    """
    font = load_font(overlay.font, overlay.size)
    stroke = _outline_width(overlay.size) if overlay.effect in {
        "outline", "smart-blend",
    } else 0
    probe = ImageDraw.Draw(Image.new("L", (1, 1)))
    x0, y0, x1, y1 = probe.textbbox(
        (0, 0), overlay.text, font=font, stroke_width=stroke,
    )
    text_w, text_h = max(1, x1 - x0), max(1, y1 - y0)
    pad = _effect_pad(overlay.effect, overlay.size)
    size = (text_w + 2 * pad, text_h + 2 * pad)
    origin = (pad - x0, pad - y0)

    layer = Image.new(COLOR_MODE_RGBA, size, (0, 0, 0, 0))
    effect = overlay.effect
    if effect == "background":
        backdrop = ImageDraw.Draw(layer)
        backdrop.rounded_rectangle(
            (0, 0, size[0] - 1, size[1] - 1),
            radius=TEXT_BACKGROUND_PAD // 2,
            fill=(*COLOR_BLACK, TEXT_BACKGROUND_ALPHA),
        )
    if effect in {"shadow", "smart-blend"}:
        dx, dy = TEXT_SHADOW_OFFSET
        shadow_mask = _text_mask(
            overlay.text, font, size, (origin[0] + dx, origin[1] + dy), stroke,
        ).filter(ImageFilter.GaussianBlur(radius=TEXT_SHADOW_BLUR))
        layer = Image.alpha_composite(
            layer, _solid(size, COLOR_BLACK, shadow_mask),
        )
    if effect == "glow":
        glow_mask = _text_mask(
            overlay.text, font, size, origin, _outline_width(overlay.size),
        ).filter(ImageFilter.GaussianBlur(radius=TEXT_GLOW_RADIUS))
        glow = _solid(size, overlay.color, glow_mask)
        layer = Image.alpha_composite(Image.alpha_composite(layer, glow), glow)

    draw = ImageDraw.Draw(layer)
    draw.text(
        origin,
        overlay.text,
        font=font,
        fill=(*overlay.color, 255),
        stroke_width=stroke,
        stroke_fill=(*COLOR_BLACK, 255),
    )
    layer = _apply_opacity(layer, overlay.opacity)

    left, top = anchor_position(overlay.position, (text_w, text_h), canvas_size)
    return TextGraphic(layer, left - pad, top - pad)
