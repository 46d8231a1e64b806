"""CLI argument parsing and main entry point."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING, TypeVar

import thumbnail_composer.config as tc_config
from thumbnail_composer.config_defaults import (
    DEFAULT_DELIMITER_WIDTH,
    DEFAULT_ENHANCE_LEVEL,
    DEFAULT_OUTPUT_DIR,
)
from thumbnail_composer.layout.catalog import DEFAULT_CATALOG, LAYOUT_ALIASES
from thumbnail_composer.logging_utils import (
    logger,
    set_verbosity,
    verbosity_level,
)
from thumbnail_composer.pipeline import ThumbnailRequest, create_thumbnail
from thumbnail_composer.runtime.validation import (
    parse_hex_color,
    parse_tilt,
    validate_image_paths,
)
from thumbnail_composer.runtime.version import resolve_project_version
from thumbnail_composer.type_defs import (
    ENHANCE_LEVELS,
    TEXT_EFFECTS,
    TEXT_LAYERS,
    TEXT_POSITIONS,
)

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Callable, Sequence

T = TypeVar("T")

LAYOUT_CHOICES = ("auto", *DEFAULT_CATALOG, *LAYOUT_ALIASES)


def _wrap_validator(
    validator: Callable[[str], T],
    error_cls: type[argparse.ArgumentTypeError] = argparse.ArgumentTypeError,
) -> Callable[[str], T]:
    """Convert ``ValueError`` from a validator into ``ArgumentTypeError``."""

    def wrapper(text: str) -> T:
        try:
            return validator(text)
        except ValueError as exc:
            raise error_cls(str(exc)) from exc

    return wrapper


def non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        msg = f"must be >= 0, got {value}"
        raise ValueError(msg)
    return value


def positive_int(text: str) -> int:
    value = int(text)
    if value < 1:
        msg = f"must be >= 1, got {value}"
        raise ValueError(msg)
    return value


def unit_float(text: str) -> float:
    value = float(text)
    if not 0.0 <= value <= 1.0:
        msg = f"must be between 0 and 1, got {value}"
        raise ValueError(msg)
    return value


def _hex_color(text: str) -> str:
    parse_hex_color(text)
    return text


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the command-line interface."""
    p = argparse.ArgumentParser(
        prog="thumbnail-composer",
        description="Compose several photos into one 1280x720 thumbnail",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  thumbnail-composer a.jpg b.jpg c.jpg\n"
            "  thumbnail-composer a.jpg b.jpg --layout 1x2 --tilt 8\n"
            "  thumbnail-composer a.jpg b.jpg c.jpg d.jpg --enhance "
            "--text 'Day 1' --text-position top\n"
        ),
    )
    p.add_argument(
        "images", nargs="*", type=Path, help="Input image files, in order")
    p.add_argument(
        "--version", action="version",
        version=f"%(prog)s {resolve_project_version()}")

    layout = p.add_argument_group("layout")
    layout.add_argument(
        "--layout", choices=LAYOUT_CHOICES, default=argparse.SUPPRESS,
        help="Arrangement id, alias, or 'auto' (default: auto)")
    layout.add_argument(
        "--delimiter-width", type=_wrap_validator(non_negative_int),
        default=argparse.SUPPRESS,
        help=f"Divider thickness in pixels (default: {DEFAULT_DELIMITER_WIDTH})")
    layout.add_argument(
        "--tilt", type=_wrap_validator(parse_tilt), default=argparse.SUPPRESS,
        help="Tilt of vertical dividers in degrees")
    layout.add_argument(
        "--color", type=_wrap_validator(_hex_color), default=argparse.SUPPRESS,
        help="Divider color as #RGB or #RRGGBB")
    layout.add_argument(
        "--background", type=_wrap_validator(_hex_color),
        default=argparse.SUPPRESS, help="Canvas background color")

    enhance = p.add_argument_group("enhancement")
    enhance.add_argument(
        "--enhance", action="store_true",
        help="Apply adaptive enhancement to every image")
    enhance.add_argument(
        "--enhance-level", choices=ENHANCE_LEVELS, default=argparse.SUPPRESS,
        help=f"Enhancement strength (default: {DEFAULT_ENHANCE_LEVEL})")

    text = p.add_argument_group("text overlay")
    text.add_argument(
        "--text", type=str, default=argparse.SUPPRESS,
        help="Text to draw on the thumbnail")
    text.add_argument("--text-font", type=str, default=argparse.SUPPRESS)
    text.add_argument(
        "--text-size", type=_wrap_validator(positive_int),
        default=argparse.SUPPRESS)
    text.add_argument(
        "--text-color", type=_wrap_validator(_hex_color),
        default=argparse.SUPPRESS)
    text.add_argument(
        "--text-opacity", type=_wrap_validator(unit_float),
        default=argparse.SUPPRESS)
    text.add_argument(
        "--text-position", choices=TEXT_POSITIONS, default=argparse.SUPPRESS)
    text.add_argument(
        "--text-effect", choices=TEXT_EFFECTS, default=argparse.SUPPRESS)
    text.add_argument(
        "--text-layer", choices=TEXT_LAYERS, default=argparse.SUPPRESS)

    output = p.add_argument_group("output")
    output.add_argument(
        "--output", type=str, default=argparse.SUPPRESS,
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR})")
    output.add_argument(
        "--name", type=str, default=argparse.SUPPRESS,
        help="Output file name; .png is appended when missing")
    output.add_argument(
        "--no-optimize", action="store_true",
        help="Skip the YouTube re-encode pass")
    output.add_argument(
        "--max-workers", type=_wrap_validator(positive_int),
        default=argparse.SUPPRESS,
        help="Threads used for analysis and slot processing")

    cfg = p.add_argument_group("config")
    cfg.add_argument(
        "--config", type=str, help="Path to config.toml file")
    cfg.add_argument(
        "--validate-config-only", action="store_true",
        help="Validate config file and exit without composing")

    verbosity = p.add_argument_group("logging")
    verbosity.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log more detail; repeat for debug output")
    verbosity.add_argument(
        "-q", "--quiet", action="count", default=0,
        help="Log less; repeat to show only critical errors")

    return p


def log_parameters(
    images: Sequence[Path],
    cfg: tc_config.ThumbnailConfig,
    args: argparse.Namespace,
) -> None:
    """Log the effective parameters for this run."""
    logger.info("Images: %s", ", ".join(str(p) for p in images))
    if getattr(args, "config", None):
        logger.info("Loaded config from: %s", args.config)
    logger.info("Layout Mode: %s", cfg.layout.mode)
    logger.info("Delimiter: %dpx, tilt %.1f deg, color %s",
                cfg.divider.width, cfg.divider.tilt, cfg.divider.color)
    logger.info("Enhancement: %s",
                cfg.enhance.level if cfg.enhance.apply else "Disabled")
    logger.info("YouTube Optimize: %s",
                "Enabled" if cfg.output.youtube_optimize else "Disabled")
    logger.info("Output Directory: %s", cfg.output.dir)


def run_from_args(args: argparse.Namespace) -> int:
    """Compose a thumbnail from parsed arguments and return an exit code."""
    base_cfg: tc_config.ThumbnailConfig | None = None
    if args.config:
        base_cfg = tc_config.ConfigLoader.load(args.config)
        if args.validate_config_only:
            logger.info("Config %s validated successfully.", args.config)
            return 0

    cfg = tc_config.build_config_from_cli(vars(args), base_config=base_cfg)
    images = validate_image_paths(args.images)
    log_parameters(images, cfg, args)

    result = create_thumbnail(ThumbnailRequest.from_config(images, cfg))
    if not result.success:
        logger.error("Thumbnail creation failed: %s", result.error)
        return 1
    logger.info("Saved thumbnail to: %s", result.output_path)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command-line interface and return the process exit code."""
    arg_parser = build_arg_parser()
    args = arg_parser.parse_args(argv)
    set_verbosity(verbosity_level(args.verbose, args.quiet))
    if args.validate_config_only and not args.config:
        arg_parser.error("--validate-config-only requires --config")
    if not args.validate_config_only and not args.images:
        arg_parser.error("at least one image is required")
    for image in args.images:
        if not image.is_file():
            arg_parser.error(f"image not found: {image}")

    return run_from_args(args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
