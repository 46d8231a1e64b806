"""
Pure feature computations over per-image statistics and pixel buffers.

Every function here works on values supplied by the caller (channel
statistics, raw grayscale bytes, an edge-filtered sample) and has no
side effects, so analyses for different images can run concurrently.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from thumbnail_composer.constants import (
    CHANNEL_MAX_VALUE,
    COLOR_CAST_THRESHOLD,
    EDGE_THRESHOLD,
    ENTROPY_BINS,
    LANDSCAPE_MIN_ASPECT,
    OVEREXPOSED_MEAN,
    PORTRAIT_MAX_ASPECT,
    SUBJECT_CENTER_END,
    SUBJECT_CENTER_START,
    SUBJECT_DENSITY_RATIO,
    UNDEREXPOSED_MEAN,
)
from thumbnail_composer.errors import InvalidStatistics
from thumbnail_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from thumbnail_composer.type_defs import Orientation

_RGB_CHANNELS = 3

PixelBuffer = bytes | bytearray | memoryview | np.ndarray


@dataclass(frozen=True, slots=True)
class ChannelStats:
    """Summary statistics for one channel, in 0-255 units."""

    mean: float
    min: float
    max: float
    stdev: float


@dataclass(frozen=True, slots=True)
class ColorAnalysis:
    """Exposure and color summary derived from RGB channel statistics."""

    mean_brightness: float
    max_brightness: float
    min_brightness: float
    contrast: float
    color_cast: bool
    saturation_level: float
    is_underexposed: bool
    is_overexposed: bool
    dynamic_range: float
    channel_means: tuple[float, float, float]


@dataclass(frozen=True, slots=True)
class ImageFeature:
    """Layout-relevant features of one input image."""

    path: str
    width: int
    height: int
    aspect_ratio: float
    entropy: float
    color_variance: float
    visual_weight: float
    has_prominent_subject: bool
    orientation: Orientation

    @classmethod
    def from_measurements(  # noqa: PLR0913
        cls,
        path: str,
        width: int,
        height: int,
        *,
        entropy: float,
        color_variance: float,
        visual_weight: float,
        has_prominent_subject: bool,
    ) -> ImageFeature:
        """Build a feature record, deriving aspect ratio and orientation."""
        aspect = width / height if height else 0.0
        return cls(
            path=path,
            width=width,
            height=height,
            aspect_ratio=aspect,
            entropy=entropy,
            color_variance=color_variance,
            visual_weight=visual_weight,
            has_prominent_subject=has_prominent_subject,
            orientation=classify_orientation(aspect),
        )

    @property
    def is_portrait(self) -> bool:
        return self.orientation == "portrait"

    @property
    def is_landscape(self) -> bool:
        return self.orientation == "landscape"

    @property
    def is_square(self) -> bool:
        return self.orientation == "square"


def _rgb(stats: Sequence[ChannelStats]) -> Sequence[ChannelStats]:
    """Return the first three channels or raise when fewer are present."""
    if len(stats) < _RGB_CHANNELS:
        msg = (
            "Invalid image statistics - insufficient channels "
            f"(got {len(stats)}, need {_RGB_CHANNELS})"
        )
        raise InvalidStatistics(msg)
    return stats[:_RGB_CHANNELS]


def calculate_saturation(stats: Sequence[ChannelStats]) -> float:
    """Return (max - min) / max over the RGB channel means."""
    if len(stats) < _RGB_CHANNELS:
        return 0.0
    means = [c.mean for c in stats[:_RGB_CHANNELS]]
    top = max(means)
    return 0.0 if top == 0 else (top - min(means)) / top


def analyze_color(stats: Sequence[ChannelStats]) -> ColorAnalysis:
    """
    Summarize exposure, contrast and color cast for one image.

    Channel values are normalized to 0-1 before thresholds are applied.

    Raises:
        InvalidStatistics: If fewer than three channels are present.

    """
    rgb = _rgb(stats)
    means = tuple(c.mean / CHANNEL_MAX_VALUE for c in rgb)
    mean_brightness = sum(means) / _RGB_CHANNELS
    max_brightness = max(c.max for c in rgb) / CHANNEL_MAX_VALUE
    min_brightness = min(c.min for c in rgb) / CHANNEL_MAX_VALUE
    contrast = sum(c.stdev for c in rgb) / _RGB_CHANNELS / CHANNEL_MAX_VALUE
    color_cast = max(abs(m - mean_brightness) for m in means) > (
        COLOR_CAST_THRESHOLD
    )
    return ColorAnalysis(
        mean_brightness=mean_brightness,
        max_brightness=max_brightness,
        min_brightness=min_brightness,
        contrast=contrast,
        color_cast=color_cast,
        saturation_level=calculate_saturation(rgb),
        is_underexposed=mean_brightness < UNDEREXPOSED_MEAN,
        is_overexposed=mean_brightness > OVEREXPOSED_MEAN,
        dynamic_range=max_brightness - min_brightness,
        channel_means=(means[0], means[1], means[2]),
    )


def calculate_color_variance(stats: Sequence[ChannelStats]) -> float:
    """Mean of the per-channel variances; 0 for malformed statistics."""
    if len(stats) < _RGB_CHANNELS:
        return 0.0
    return sum(c.stdev ** 2 for c in stats[:_RGB_CHANNELS]) / _RGB_CHANNELS


def calculate_visual_weight(stats: Sequence[ChannelStats]) -> float:
    """Combine contrast (stdev) and spread (max - min) into one score."""
    if len(stats) < _RGB_CHANNELS:
        return 0.0
    rgb = stats[:_RGB_CHANNELS]
    total_contrast = sum(c.stdev for c in rgb)
    total_spread = sum(c.max - c.min for c in rgb)
    return (total_contrast + total_spread) / (_RGB_CHANNELS * 2)


def _as_uint8(buffer: PixelBuffer) -> np.ndarray:
    """View a byte-like buffer or array as a flat uint8 array."""
    if isinstance(buffer, np.ndarray):
        return buffer.astype(np.uint8, copy=False).ravel()
    return np.frombuffer(buffer, dtype=np.uint8)


def compute_entropy(buffer: PixelBuffer) -> float:
    """
    Shannon entropy (bits) of the byte-value histogram of ``buffer``.

    A constant buffer yields 0; an even spread over all 256 values
    yields 8.
    """
    values = _as_uint8(buffer)
    total = values.size
    if total == 0:
        return 0.0
    counts = np.bincount(values, minlength=ENTROPY_BINS)
    probs = counts[counts > 0] / total
    return float(-(probs * np.log2(probs)).sum())


def _region_counts(
    mask: np.ndarray,
    start_ratio: float,
    end_ratio: float,
) -> tuple[int, int]:
    """Return (edge pixels, total pixels) inside a centred ratio window."""
    height, width = mask.shape
    x0, x1 = math.floor(width * start_ratio), math.floor(width * end_ratio)
    y0, y1 = math.floor(height * start_ratio), math.floor(height * end_ratio)
    region = mask[y0:y1, x0:x1]
    return int(region.sum()), int(region.size)


def detect_prominent_subject(
    edge_buffer: PixelBuffer,
    width: int,
    height: int,
) -> bool:
    """
    Report whether edges concentrate in the central 50% x 50% window.

    The subject is prominent when the central edge density exceeds the
    density of the surrounding frame by more than 1.5x. Never raises:
    malformed buffers or dimensions yield ``False``.
    """
    try:
        edges = _as_uint8(edge_buffer).reshape(int(height), int(width))
        mask = edges > EDGE_THRESHOLD
        center_edges, center_total = _region_counts(
            mask, SUBJECT_CENTER_START, SUBJECT_CENTER_END,
        )
        all_edges, all_total = _region_counts(mask, 0.0, 1.0)
        outer_total = all_total - center_total
        center_density = center_edges / center_total if center_total else 0.0
        outer_density = (
            (all_edges - center_edges) / outer_total if outer_total else 0.0
        )
    except Exception as exc:  # noqa: BLE001
        logger.debug("Subject detection failed: %s", exc)
        return False
    return center_density > SUBJECT_DENSITY_RATIO * outer_density


def classify_orientation(aspect_ratio: float) -> Orientation:
    """Classify an aspect ratio; 0.9 and 1.1 are both square."""
    if aspect_ratio < PORTRAIT_MAX_ASPECT:
        return "portrait"
    if aspect_ratio > LANDSCAPE_MIN_ASPECT:
        return "landscape"
    return "square"
