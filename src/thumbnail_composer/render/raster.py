"""
Raster primitives used by the compositor, built on Pillow and NumPy.

Each helper takes a Pillow image and returns a new image; inputs are
never modified in place, so per-slot processing can run in parallel.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image, ImageEnhance, ImageFilter, ImageOps

from thumbnail_composer.constants import (
    COLOR_MODE_RGB,
    COLOR_MODE_RGBA,
    VIGNETTE_EDGE_OPACITY,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from thumbnail_composer.type_defs import RGB, BlendMode

_HUE_STEPS = 256
_MIN_PERCENTILE_SPAN = 1.0
_MID_GREY = 0.5


def _to_array(img: Image.Image) -> np.ndarray:
    """Float32 RGB array in 0-255."""
    return np.asarray(img.convert(COLOR_MODE_RGB), dtype=np.float32)


def _from_array(arr: np.ndarray) -> Image.Image:
    """Clip a float array back into an 8-bit RGB image."""
    return Image.fromarray(np.clip(np.rint(arr), 0, 255).astype(np.uint8))


def new_canvas(size: tuple[int, int], color: RGB) -> Image.Image:
    """Opaque RGBA canvas filled with ``color``."""
    return Image.new(COLOR_MODE_RGBA, size, (*color, 255))


def normalise(img: Image.Image, lower: float, upper: float) -> Image.Image:
    """
    Stretch luminance so the given percentiles map to black and white.

    ``lower`` and ``upper`` are fractions (0.03 means the 3rd
    percentile). A flat image is returned unchanged.
    """
    lum = np.asarray(img.convert("L"), dtype=np.float32)
    lo = float(np.percentile(lum, lower * 100))
    hi = float(np.percentile(lum, upper * 100))
    if hi - lo < _MIN_PERCENTILE_SPAN:
        return img.convert(COLOR_MODE_RGB)
    arr = (_to_array(img) - lo) * (255.0 / (hi - lo))
    return _from_array(arr)


def modulate(
    img: Image.Image,
    *,
    brightness: float = 1.0,
    saturation: float = 1.0,
    hue: float = 0.0,
) -> Image.Image:
    """Scale brightness and saturation, then rotate hue by degrees."""
    out = img.convert(COLOR_MODE_RGB)
    if brightness != 1.0:
        out = ImageEnhance.Brightness(out).enhance(brightness)
    if saturation != 1.0:
        out = ImageEnhance.Color(out).enhance(saturation)
    if hue and np.isfinite(hue):
        hsv = np.array(out.convert("HSV"), dtype=np.int32)
        shift = round(hue / 360.0 * _HUE_STEPS)
        hsv[..., 0] = (hsv[..., 0] + shift) % _HUE_STEPS
        out = Image.frombytes(
            "HSV", out.size, hsv.astype(np.uint8).tobytes(),
        ).convert(COLOR_MODE_RGB)
    return out


def gamma(img: Image.Image, value: float) -> Image.Image:
    """Apply a power curve; values above 1 brighten the midtones."""
    rgb = img.convert(COLOR_MODE_RGB)
    if value <= 0 or value == 1.0:
        return rgb
    curve = [round(255 * (i / 255) ** (1.0 / value)) for i in range(256)]
    return rgb.point(curve * len(rgb.getbands()))


def linear(img: Image.Image, multiply: float, offset: float) -> Image.Image:
    """Return ``pixel * multiply + offset`` per channel."""
    return _from_array(_to_array(img) * multiply + offset)


def sharpen(  # noqa: PLR0913
    img: Image.Image,
    *,
    sigma: float,
    m1: float,
    m2: float,
    x1: float,
    y2: float,
) -> Image.Image:
    """
    Unsharp mask with separate gains for flat and jagged areas.

    Detail with magnitude up to ``x1`` is scaled by ``m1``, stronger
    detail by ``m2``; the added amount is limited to ``y2`` levels.
    """
    rgb = img.convert(COLOR_MODE_RGB)
    if sigma <= 0:
        return rgb
    arr = _to_array(rgb)
    blurred = _to_array(rgb.filter(ImageFilter.GaussianBlur(radius=sigma)))
    detail = arr - blurred
    gain = np.where(np.abs(detail) <= x1, m1, m2)
    boost = np.clip(detail * gain, -y2, y2)
    return _from_array(arr + boost)


def convolve(img: Image.Image, kernel: Sequence[float]) -> Image.Image:
    """3x3 convolution normalised by the kernel sum."""
    return img.convert(COLOR_MODE_RGB).filter(
        ImageFilter.Kernel((3, 3), list(kernel)),
    )


def _overlay(base: np.ndarray, layer: np.ndarray) -> np.ndarray:
    """Overlay blend on 0-1 arrays."""
    return np.where(
        base < _MID_GREY,
        2.0 * base * layer,
        1.0 - 2.0 * (1.0 - base) * (1.0 - layer),
    )


def blend_region(
    base: Image.Image,
    layer: Image.Image,
    mode: BlendMode,
) -> Image.Image:
    """
    Blend an RGBA ``layer`` onto a same-sized ``base``.

    ``over`` is plain alpha compositing; ``overlay`` applies the
    overlay blend weighted by the layer alpha.
    """
    base_rgba = base.convert(COLOR_MODE_RGBA)
    layer_rgba = layer.convert(COLOR_MODE_RGBA)
    if mode == "over":
        return Image.alpha_composite(base_rgba, layer_rgba)
    b = np.asarray(base_rgba, dtype=np.float32) / 255.0
    s = np.asarray(layer_rgba, dtype=np.float32) / 255.0
    alpha = s[..., 3:4]
    mixed = b[..., :3] * (1.0 - alpha) + _overlay(b[..., :3], s[..., :3]) * alpha
    out = np.concatenate([mixed, b[..., 3:4]], axis=-1) * 255.0
    return Image.fromarray(np.clip(np.rint(out), 0, 255).astype(np.uint8))


def paste_layer(
    canvas: Image.Image,
    layer: Image.Image,
    dest: tuple[int, int],
    mode: BlendMode = "over",
) -> None:
    """
    Blend ``layer`` onto ``canvas`` in place at ``dest``.

    Layers that hang off any canvas edge are clipped; fully outside
    layers are ignored.
    """
    left, top = dest
    x0, y0 = max(0, left), max(0, top)
    x1 = min(canvas.width, left + layer.width)
    y1 = min(canvas.height, top + layer.height)
    if x1 <= x0 or y1 <= y0:
        return
    piece = layer.crop((x0 - left, y0 - top, x1 - left, y1 - top))
    region = canvas.crop((x0, y0, x1, y1))
    canvas.paste(blend_region(region, piece, mode), (x0, y0))


def radial_vignette(
    size: tuple[int, int],
    edge_opacity: float = VIGNETTE_EDGE_OPACITY,
) -> Image.Image:
    """Black RGBA layer, transparent at the centre, ``edge_opacity`` at the rim."""
    width, height = size
    ys, xs = np.ogrid[:height, :width]
    cx, cy = width / 2, height / 2
    dist = np.sqrt(((xs - cx) / max(cx, 1)) ** 2 + ((ys - cy) / max(cy, 1)) ** 2)
    alpha = np.clip(dist, 0.0, 1.0) * edge_opacity * 255.0
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[..., 3] = np.rint(alpha).astype(np.uint8)
    return Image.fromarray(arr)


def apply_vignette(
    img: Image.Image,
    edge_opacity: float = VIGNETTE_EDGE_OPACITY,
) -> Image.Image:
    """Darken the rim of ``img`` with an overlay-blended radial gradient."""
    overlay = radial_vignette(img.size, edge_opacity)
    return blend_region(img, overlay, "overlay").convert(COLOR_MODE_RGB)


def cover_fit(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Fill ``size`` exactly, cropping overflow around the centre."""
    return ImageOps.fit(
        img,
        size,
        method=Image.Resampling.LANCZOS,
        centering=(0.5, 0.5),
    )


def flatten_opaque(img: Image.Image) -> Image.Image:
    """Drop any alpha and return a fully opaque RGBA image."""
    return img.convert(COLOR_MODE_RGB).convert(COLOR_MODE_RGBA)


def encode_png(
    img: Image.Image,
    *,
    compression_level: int = 8,
    optimize: bool = False,
) -> bytes:
    """Encode ``img`` as PNG without carrying over any metadata."""
    buf = io.BytesIO()
    img.save(
        buf,
        format="PNG",
        compress_level=compression_level,
        optimize=optimize,
    )
    return buf.getvalue()
