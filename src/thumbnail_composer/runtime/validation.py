"""Input validation helpers for request and CLI values."""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import TYPE_CHECKING

from thumbnail_composer.errors import InsufficientImages

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Sequence

    from thumbnail_composer.type_defs import RGB

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_SHORT_HEX_LEN = 4


def validate_image_paths(paths: Sequence[str | Path]) -> list[Path]:
    """Ensure at least one path is given and every path is a file."""
    if not paths:
        msg = "At least 1 image is required for the thumbnail"
        raise InsufficientImages(msg)
    resolved = []
    for index, raw in enumerate(paths, start=1):
        path = Path(raw)
        if not path.is_file():
            msg = f"Image {index} not found: {raw}"
            raise FileNotFoundError(msg)
        resolved.append(path)
    return resolved


def parse_hex_color(value: str) -> RGB:
    """Parse ``#RGB`` or ``#RRGGBB`` into an RGB tuple."""
    text = value.strip()
    if not _HEX_COLOR.match(text):
        msg = f"Invalid hex color: {value!r} (expected #RGB or #RRGGBB)"
        raise ValueError(msg)
    digits = text[1:]
    if len(text) == _SHORT_HEX_LEN:
        digits = "".join(ch * 2 for ch in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def parse_tilt(value: float | str | None) -> float:
    """
    Accept a tilt in degrees as a number or numeric string.

    Empty and non-finite values mean no tilt; other text is rejected.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0.0
    try:
        degrees = float(value)
    except (TypeError, ValueError) as exc:
        msg = f"Invalid delimiter tilt: {value!r}"
        raise ValueError(msg) from exc
    return degrees if math.isfinite(degrees) else 0.0


def validate_delimiter_width(value: int) -> int:
    """Divider thickness must be a non-negative whole number of pixels."""
    msg = f"Delimiter width must be a non-negative integer, got {value!r}"
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(msg)
    if not math.isfinite(value) or int(value) != value or value < 0:
        raise ValueError(msg)
    return int(value)
