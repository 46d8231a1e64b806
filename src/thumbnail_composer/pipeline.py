"""
Request entry point: turn a list of images into a saved thumbnail.

:func:`create_thumbnail` never raises for request-level problems; every
failure is reported as an unsuccessful :class:`ThumbnailResult` that
carries the error message and the elapsed time.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from thumbnail_composer.config_defaults import (
    DEFAULT_APPLY_ENHANCE,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_COMPRESSION_LEVEL,
    DEFAULT_DELIMITER_COLOR,
    DEFAULT_DELIMITER_TILT,
    DEFAULT_DELIMITER_WIDTH,
    DEFAULT_ENHANCE_LEVEL,
    DEFAULT_LAYOUT_MODE,
    DEFAULT_MAX_WORKERS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_YOUTUBE_OPTIMIZE,
)
from thumbnail_composer.errors import InsufficientImages, ThumbnailError
from thumbnail_composer.logging_utils import logger
from thumbnail_composer.render import SlotOptions, compose, plan_composition
from thumbnail_composer.runtime.output import (
    output_path_for,
    setup_output_directory,
    write_thumbnail,
)
from thumbnail_composer.runtime.validation import (
    parse_hex_color,
    parse_tilt,
    validate_delimiter_width,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from thumbnail_composer.config import ThumbnailConfig
    from thumbnail_composer.layout import LayoutDecision
    from thumbnail_composer.render import TextOverlay
    from thumbnail_composer.runtime.output import OptimizationResult
    from thumbnail_composer.type_defs import EnhanceLevel

_UNKNOWN_ERROR = "An unknown error occurred while creating the thumbnail"


@dataclass(frozen=True, slots=True)
class ThumbnailRequest:
    """All inputs for one thumbnail."""

    image_paths: tuple[str | Path, ...]
    delimiter_width: int = DEFAULT_DELIMITER_WIDTH
    delimiter_tilt: float | str = DEFAULT_DELIMITER_TILT
    delimiter_color: str = DEFAULT_DELIMITER_COLOR
    output_name: str | None = None
    enhance_level: EnhanceLevel = DEFAULT_ENHANCE_LEVEL
    apply_enhance: bool = DEFAULT_APPLY_ENHANCE
    layout_mode: str = DEFAULT_LAYOUT_MODE
    youtube_optimize: bool = DEFAULT_YOUTUBE_OPTIMIZE
    text_overlay: TextOverlay | None = None
    background_color: str = DEFAULT_BACKGROUND_COLOR
    output_dir: str | Path = DEFAULT_OUTPUT_DIR
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    max_workers: int = DEFAULT_MAX_WORKERS

    @classmethod
    def from_config(
        cls,
        image_paths: Sequence[str | Path],
        config: ThumbnailConfig,
    ) -> ThumbnailRequest:
        """Build a request from validated configuration sections."""
        return cls(
            image_paths=tuple(image_paths),
            delimiter_width=config.divider.width,
            delimiter_tilt=config.divider.tilt,
            delimiter_color=config.divider.color,
            output_name=config.output.name,
            enhance_level=config.enhance.level,
            apply_enhance=config.enhance.apply,
            layout_mode=config.layout.mode,
            youtube_optimize=config.output.youtube_optimize,
            text_overlay=config.text.to_overlay(),
            background_color=config.divider.background,
            output_dir=config.output.dir,
            compression_level=config.output.compression_level,
            max_workers=config.processing.max_workers,
        )


@dataclass(frozen=True, slots=True)
class ThumbnailResult:
    """Outcome of :func:`create_thumbnail`."""

    success: bool
    processing_time_ms: int
    output_path: Path | None = None
    output_dir: Path | None = None
    layout: str | None = None
    images_used: int = 0
    optimization: OptimizationResult | None = None
    decision: LayoutDecision | None = field(default=None, repr=False)
    error: str | None = None

    @property
    def processing_time(self) -> str:
        return f"{self.processing_time_ms}ms"

    def to_dict(self) -> dict[str, Any]:
        """Plain summary suitable for JSON output."""
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "processingTime": self.processing_time,
            }
        return {
            "success": True,
            "outputPath": str(self.output_path),
            "outputDir": str(self.output_dir),
            "layout": self.layout,
            "imagesUsed": self.images_used,
            "processingTime": self.processing_time,
            "optimizationResult": (
                self.optimization.to_dict() if self.optimization else None
            ),
        }


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


def _run(request: ThumbnailRequest, start: float) -> ThumbnailResult:
    if not request.image_paths:
        msg = "At least 1 image is required for the thumbnail"
        raise InsufficientImages(msg)

    logger.info(
        "Starting thumbnail creation with %d images using %s mode",
        len(request.image_paths),
        request.layout_mode,
    )
    width = validate_delimiter_width(request.delimiter_width)
    tilt = parse_tilt(request.delimiter_tilt)
    divider_color = parse_hex_color(request.delimiter_color)
    background = parse_hex_color(request.background_color)

    plan = plan_composition(
        request.image_paths,
        request.layout_mode,
        delimiter_width=width,
        delimiter_tilt=tilt,
        max_workers=request.max_workers,
    )
    output_dir = setup_output_directory(request.output_dir)
    output_path = output_path_for(output_dir, request.output_name, plan.spec.id)

    composition = compose(
        plan,
        options=SlotOptions(
            enhance=request.apply_enhance,
            enhance_level=request.enhance_level,
        ),
        divider_color=divider_color,
        background=background,
        text_overlay=request.text_overlay,
        max_workers=request.max_workers,
    )
    optimization = write_thumbnail(
        composition.image,
        output_path,
        optimize=request.youtube_optimize,
        compression_level=request.compression_level,
    )

    elapsed = _elapsed_ms(start)
    logger.info(
        "Thumbnail created with %s layout in %dms: %s",
        plan.spec.id, elapsed, output_path,
    )
    return ThumbnailResult(
        success=True,
        processing_time_ms=elapsed,
        output_path=output_path,
        output_dir=output_dir,
        layout=plan.spec.id,
        images_used=composition.images_used,
        optimization=optimization,
        decision=plan.decision,
    )


def create_thumbnail(request: ThumbnailRequest) -> ThumbnailResult:
    """
    Compose, encode and save one thumbnail.

    Composition errors, I/O errors and invalid values are returned as a
    failed result rather than raised.
    """
    start = time.perf_counter()
    try:
        return _run(request, start)
    except (ThumbnailError, OSError, ValueError) as exc:
        elapsed = _elapsed_ms(start)
        logger.error("Error creating thumbnail after %dms: %s", elapsed, exc)
        return ThumbnailResult(
            success=False,
            processing_time_ms=elapsed,
            error=str(exc) or _UNKNOWN_ERROR,
        )
