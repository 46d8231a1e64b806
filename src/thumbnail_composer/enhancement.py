"""
Adaptive enhancement parameters and their application to one image.

``calculate_enhancement_params`` is a pure function of an image's
color analysis and the requested intensity level. ``enhance_image``
runs the resulting adjustments through the raster primitives.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from PIL import ImageOps

import thumbnail_composer.render.raster as tc_raster
from thumbnail_composer.analysis.extract import compute_stats
from thumbnail_composer.analysis.features import ColorAnalysis, analyze_color
from thumbnail_composer.constants import (
    CENTER_WEIGHT_KERNEL,
    CONTRAST_BOOST,
    CONTRAST_CAP,
    ENHANCE_SHARPEN_M1_GAIN,
    ENHANCE_SHARPEN_M2_GAIN,
    SATURATION_BOOST,
    SATURATION_CAP,
    THUMBNAIL_BOOST,
)
from thumbnail_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from PIL import Image

    from thumbnail_composer.type_defs import EnhanceLevel

INTENSITY_MULTIPLIERS: dict[str, float] = {
    "none": 0.0,
    "light": 0.7,
    "medium": 1.0,
    "high": 1.3,
}

# Exposure and color thresholds (0-1 scale)
_UNDEREXPOSED = 0.4
_OVEREXPOSED = 0.7
_LOW_CONTRAST = 0.3
_LOW_SATURATION = 0.25
_DESATURATED = 0.15
_SHARPEN_LOW_CONTRAST = 0.15
_SHARPEN_DARK = 0.3


@dataclass(frozen=True, slots=True)
class NormaliseRange:
    """Luminance percentiles mapped to black and white."""

    lower: float
    upper: float


@dataclass(frozen=True, slots=True)
class LinearContrast:
    """Per-pixel ``value * multiply + offset``."""

    multiply: float
    offset: float


@dataclass(frozen=True, slots=True)
class SharpenParams:
    """Unsharp-mask settings (see ``raster.sharpen``)."""

    sigma: float
    m1: float
    m2: float
    x1: float
    y2: float


BASE_SHARPEN = SharpenParams(sigma=0.8, m1=1.0, m2=2.0, x1=2.0, y2=10.0)


@dataclass(frozen=True, slots=True)
class EnhancementParams:
    """Full set of adjustments for one image."""

    normalise: NormaliseRange
    brightness: float
    saturation: float
    white_balance: float
    gamma: float
    contrast: LinearContrast
    sharpen: SharpenParams


def intensity_multiplier(level: str) -> float:
    """Map an enhance level to its multiplier; unknown levels act as medium."""
    return INTENSITY_MULTIPLIERS.get(level, 1.0)


def white_balance_shift(channel_means: Sequence[float]) -> float:
    """
    Hue rotation in degrees that counters a red/blue cast.

    Malformed input (fewer than three channels or non-finite values)
    yields 0, meaning no correction.
    """
    if len(channel_means) < 3:  # noqa: PLR2004
        return 0.0
    r, g, b = channel_means[:3]
    if not all(math.isfinite(v) for v in (r, g, b)):
        return 0.0
    target = (r + g + b) / 3
    return math.degrees(math.atan2(b - target, r - target))


def calculate_adaptive_sharpening(
    analysis: ColorAnalysis,
    intensity: float,
) -> SharpenParams:
    """Scale the base sharpening for low-contrast, dark, or normal images."""
    base = BASE_SHARPEN
    if analysis.contrast < _SHARPEN_LOW_CONTRAST:
        return SharpenParams(
            sigma=base.sigma * (1 + 0.3 * intensity),
            m1=base.m1 * (1 - 0.2 * intensity),
            m2=base.m2 * (1 - 0.1 * intensity),
            x1=base.x1 * (1 + 0.2 * intensity),
            y2=base.y2 * (1 - 0.2 * intensity),
        )
    if analysis.mean_brightness < _SHARPEN_DARK:
        # dark images: soften the flat-area gain to keep noise down
        return SharpenParams(
            sigma=base.sigma * (1 - 0.2 * intensity),
            m1=base.m1 * (1 - 0.3 * intensity),
            m2=base.m2,
            x1=base.x1 * (1 + 0.3 * intensity),
            y2=base.y2 * (1 - 0.1 * intensity),
        )
    return SharpenParams(
        sigma=base.sigma * (1 + 0.2 * intensity),
        m1=base.m1 * (1 + 0.1 * intensity),
        m2=base.m2,
        x1=base.x1,
        y2=base.y2 * (1 + 0.1 * intensity),
    )


def calculate_enhancement_params(
    analysis: ColorAnalysis,
    level: EnhanceLevel | str = "medium",
) -> EnhancementParams:
    """Derive adjustments from an image's color analysis and a level."""
    i = intensity_multiplier(level)
    b = THUMBNAIL_BOOST
    mean = analysis.mean_brightness
    underexposed = mean < _UNDEREXPOSED
    overexposed = mean > _OVEREXPOSED
    low_contrast = analysis.contrast < _LOW_CONTRAST

    if underexposed:
        brightness = 1 + 0.2 * i * b
    elif overexposed:
        brightness = 1 - 0.1 * i
    else:
        brightness = 1 + 0.05 * i

    # the desaturated branch sits behind the low-saturation one and so
    # only fires if the thresholds are ever reordered
    if analysis.saturation_level < _LOW_SATURATION:
        saturation = 1 + 0.5 * i * b
    elif analysis.saturation_level < _DESATURATED:
        saturation = 1 + 0.7 * i * b
    else:
        saturation = 1 + 0.2 * i * b

    if underexposed:
        offset = 0.02 * i
    elif overexposed:
        offset = -0.02 * i
    else:
        offset = 0.0

    return EnhancementParams(
        normalise=NormaliseRange(
            lower=0.01 if underexposed else 0.03,
            upper=0.98 if overexposed else 0.97,
        ),
        brightness=brightness,
        saturation=saturation,
        white_balance=(
            white_balance_shift(analysis.channel_means)
            if analysis.color_cast
            else 0.0
        ),
        gamma=0.9 - 0.1 * i if underexposed else 1.1 + 0.1 * i,
        contrast=LinearContrast(
            multiply=(
                1 + 0.25 * i * b if low_contrast else 1 + 0.15 * i * b
            ),
            offset=offset,
        ),
        sharpen=calculate_adaptive_sharpening(analysis, i * b),
    )


def apply_thumbnail_boost(params: EnhancementParams) -> EnhancementParams:
    """Push saturation and contrast further, within the thumbnail caps."""
    return replace(
        params,
        saturation=min(params.saturation * SATURATION_BOOST, SATURATION_CAP),
        contrast=replace(
            params.contrast,
            multiply=min(
                params.contrast.multiply * CONTRAST_BOOST, CONTRAST_CAP,
            ),
        ),
    )


def apply_enhancement(
    img: Image.Image,
    params: EnhancementParams,
) -> Image.Image:
    """Run the enhancement chain in its fixed order."""
    out = tc_raster.normalise(
        img, params.normalise.lower, params.normalise.upper,
    )
    out = tc_raster.modulate(
        out,
        brightness=params.brightness,
        saturation=params.saturation,
        hue=params.white_balance,
    )
    out = tc_raster.gamma(out, params.gamma)
    out = tc_raster.linear(
        out, params.contrast.multiply, params.contrast.offset,
    )
    out = tc_raster.sharpen(
        out,
        sigma=params.sharpen.sigma,
        m1=params.sharpen.m1 * ENHANCE_SHARPEN_M1_GAIN,
        m2=params.sharpen.m2 * ENHANCE_SHARPEN_M2_GAIN,
        x1=params.sharpen.x1,
        y2=params.sharpen.y2,
    )
    out = tc_raster.convolve(out, CENTER_WEIGHT_KERNEL)
    return tc_raster.flatten_opaque(out)


def enhance_image(img: Image.Image, level: EnhanceLevel | str) -> Image.Image:
    """
    Analyze ``img`` and apply boosted adaptive enhancement.

    If the statistics cannot be analyzed, or any adjustment fails, the
    image is returned unchanged (after EXIF orientation) and a warning
    is logged.
    """
    oriented = ImageOps.exif_transpose(img)
    try:
        analysis = analyze_color(compute_stats(oriented.convert("RGB")))
        params = apply_thumbnail_boost(
            calculate_enhancement_params(analysis, level),
        )
        logger.debug("Enhancement parameters: %s", params)
        return apply_enhancement(oriented, params)
    except (OSError, ValueError) as exc:
        logger.warning("Skipping enhancement: %s", exc)
        return oriented
