"""Helpers for managing output locations and persisted thumbnails."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from thumbnail_composer.config_defaults import DEFAULT_COMPRESSION_LEVEL
from thumbnail_composer.constants import (
    MAX_OUTPUT_PATH_LENGTH,
    OUTPUT_NAME_PREFIX,
)
from thumbnail_composer.logging_utils import logger
from thumbnail_composer.render.raster import encode_png

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable

    from PIL import Image

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB")
_BYTE_BASE = 1024
_PNG_SUFFIX = ".png"


def setup_output_directory(
    output_dir: str | Path,
    path_factory: Callable[[str | Path], Path] = Path,
) -> Path:
    """Create the output directory if needed and return it."""
    resolved = path_factory(output_dir)
    try:
        resolved.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"Cannot create output directory: {exc}"
        raise OSError(msg) from exc
    return resolved


def default_output_name(layout_id: str, now: datetime | None = None) -> str:
    """Return ``youtube-thumbnail-<layout>-<UTC timestamp>``."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{OUTPUT_NAME_PREFIX}-{layout_id}-{stamp}"


def output_path_for(
    output_dir: Path,
    output_name: str | None,
    layout_id: str,
) -> Path:
    """
    Build the final ``.png`` path for a thumbnail.

    Raises:
        ValueError: If the full path exceeds the portable length limit

    """
    stem = (output_name or "").strip() or default_output_name(layout_id)
    if stem.lower().endswith(_PNG_SUFFIX):
        stem = stem[: -len(_PNG_SUFFIX)]
    path = output_dir / f"{stem}{_PNG_SUFFIX}"
    if len(str(path)) > MAX_OUTPUT_PATH_LENGTH:
        msg = "Output filename is too long. Please use a shorter name."
        raise ValueError(msg)
    return path


def format_bytes(size: int, decimals: int = 2) -> str:
    """Human readable size in 1024-based units, trailing zeros dropped."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    index = 0
    while value >= _BYTE_BASE and index < len(_BYTE_UNITS) - 1:
        value /= _BYTE_BASE
        index += 1
    return f"{round(value, max(0, decimals)):g} {_BYTE_UNITS[index]}"


@dataclass(frozen=True, slots=True)
class OptimizationResult:
    """Sizes of a written thumbnail before and after optimisation."""

    path: Path
    original_size: int
    new_size: int
    optimized: bool = False
    quality_preserved: bool = True

    @property
    def savings(self) -> str:
        if not self.optimized or self.original_size <= 0:
            return "0%"
        pct = (self.original_size - self.new_size) / self.original_size * 100
        return f"{pct:.2f}%"

    def to_dict(self) -> dict[str, str | bool]:
        return {
            "path": str(self.path),
            "originalSize": format_bytes(self.original_size),
            "newSize": format_bytes(self.new_size),
            "savings": self.savings,
            "qualityPreserved": self.quality_preserved,
        }


def write_thumbnail(
    image: Image.Image,
    path: Path,
    *,
    optimize: bool = True,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
) -> OptimizationResult:
    """
    Write ``image`` as PNG and report the size change.

    With ``optimize`` the image is first written without metadata,
    then re-encoded with ``compression_level`` and PNG optimisation.
    Without it the file is written once and both sizes are equal.
    """
    if not optimize:
        path.write_bytes(encode_png(image, compression_level=compression_level))
        size = path.stat().st_size
        return OptimizationResult(path, size, size)

    logger.info("Applying YouTube optimizations...")
    path.write_bytes(encode_png(image, compression_level=compression_level))
    original_size = path.stat().st_size
    path.write_bytes(
        encode_png(image, compression_level=compression_level, optimize=True),
    )
    new_size = path.stat().st_size
    result = OptimizationResult(path, original_size, new_size, optimized=True)
    logger.info(
        "File size: %s -> %s (%s reduction)",
        format_bytes(original_size),
        format_bytes(new_size),
        result.savings,
    )
    return result
