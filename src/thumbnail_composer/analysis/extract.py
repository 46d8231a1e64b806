"""Decode images with Pillow and derive their layout features."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image, ImageFilter, ImageOps, ImageStat

from thumbnail_composer.analysis.features import (
    ChannelStats,
    ImageFeature,
    calculate_color_variance,
    calculate_visual_weight,
    compute_entropy,
    detect_prominent_subject,
)
from thumbnail_composer.constants import (
    COLOR_MODE_RGB,
    EDGE_KERNEL,
    EDGE_SAMPLE_MAX,
)
from thumbnail_composer.errors import InvalidStatistics
from thumbnail_composer.logging_utils import logger

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence


def load_image(path: str | Path) -> Image.Image:
    """
    Load an image, apply its EXIF orientation, and convert to RGB.

    Raises:
        FileNotFoundError: If the image file does not exist
        OSError: If the image cannot be opened or decoded, or exceeds
            Pillow's decompression-bomb pixel limit

    """
    try:
        with Image.open(path) as img:
            img.load()
            return ImageOps.exif_transpose(img).convert(COLOR_MODE_RGB)
    except FileNotFoundError as e:
        msg = f"Image file not found: '{path}'"
        raise FileNotFoundError(msg) from e
    except (OSError, Image.DecompressionBombError) as e:
        msg = f"Error loading image '{path}': {e!s}"
        raise OSError(msg) from e


def compute_stats(img: Image.Image) -> list[ChannelStats]:
    """Return per-band mean/min/max/stdev in 0-255 units."""
    stat = ImageStat.Stat(img)
    return [
        ChannelStats(mean=mean, min=lo, max=hi, stdev=stdev)
        for mean, (lo, hi), stdev in zip(
            stat.mean, stat.extrema, stat.stddev, strict=True,
        )
    ]


def grayscale_buffer(img: Image.Image) -> bytes:
    """Raw 8-bit grayscale bytes of the full image."""
    return img.convert("L").tobytes()


def edge_sample(img: Image.Image) -> tuple[bytes, int, int]:
    """
    Build a small Laplacian edge map for subject detection.

    The image is shrunk to fit inside 200x200 first, so the returned
    buffer is at most 40,000 bytes.
    """
    sample = img.convert("L")
    sample.thumbnail((EDGE_SAMPLE_MAX, EDGE_SAMPLE_MAX))
    edges = sample.filter(ImageFilter.Kernel((3, 3), EDGE_KERNEL, scale=1))
    return edges.tobytes(), edges.width, edges.height


def extract_features(path: str | Path) -> ImageFeature:
    """Decode one image and compute its full feature record."""
    img = load_image(path)
    stats = compute_stats(img)
    if len(stats) < 3:  # noqa: PLR2004
        msg = f"Expected RGB statistics for '{path}'"
        raise InvalidStatistics(msg)
    edges, edge_w, edge_h = edge_sample(img)
    return ImageFeature.from_measurements(
        str(path),
        img.width,
        img.height,
        entropy=compute_entropy(grayscale_buffer(img)),
        color_variance=calculate_color_variance(stats),
        visual_weight=calculate_visual_weight(stats),
        has_prominent_subject=detect_prominent_subject(edges, edge_w, edge_h),
    )


def analyze_image_for_layout(path: str | Path) -> ImageFeature | None:
    """
    Return the feature record for ``path`` or ``None`` on failure.

    Failures are logged and swallowed so a single unreadable image only
    drops out of the aggregate statistics.
    """
    try:
        return extract_features(path)
    except (OSError, ValueError) as exc:
        logger.warning("Error analyzing image %s: %s", path, exc)
        return None


def analyze_images(
    paths: Sequence[str | Path],
    *,
    max_workers: int = 4,
) -> list[ImageFeature | None]:
    """Analyze every path concurrently, preserving input order."""
    if not paths:
        return []
    workers = max(1, min(max_workers, len(paths)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(analyze_image_for_layout, paths))
