"""Per-image feature extraction used by the layout selector."""

from __future__ import annotations

from .extract import (
    analyze_image_for_layout,
    analyze_images,
    compute_stats,
    extract_features,
    load_image,
)
from .features import (
    ChannelStats,
    ColorAnalysis,
    ImageFeature,
    analyze_color,
    calculate_color_variance,
    calculate_saturation,
    calculate_visual_weight,
    classify_orientation,
    compute_entropy,
    detect_prominent_subject,
)

__all__ = [
    "ChannelStats",
    "ColorAnalysis",
    "ImageFeature",
    "analyze_color",
    "analyze_image_for_layout",
    "analyze_images",
    "calculate_color_variance",
    "calculate_saturation",
    "calculate_visual_weight",
    "classify_orientation",
    "compute_entropy",
    "compute_stats",
    "detect_prominent_subject",
    "extract_features",
    "load_image",
]
