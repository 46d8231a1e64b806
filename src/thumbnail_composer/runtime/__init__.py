"""Runtime utilities for output persistence, validation, and versioning."""

from .output import (
    OptimizationResult,
    default_output_name,
    format_bytes,
    output_path_for,
    setup_output_directory,
    write_thumbnail,
)
from .validation import (
    parse_hex_color,
    parse_tilt,
    validate_delimiter_width,
    validate_image_paths,
)
from .version import resolve_project_version

__all__ = [
    "OptimizationResult",
    "default_output_name",
    "format_bytes",
    "output_path_for",
    "parse_hex_color",
    "parse_tilt",
    "resolve_project_version",
    "setup_output_directory",
    "validate_delimiter_width",
    "validate_image_paths",
    "write_thumbnail",
]
