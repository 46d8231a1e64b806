"""Exception hierarchy raised by the thumbnail composition engine."""

from __future__ import annotations


class ThumbnailError(Exception):
    """Base class for all request-level composition failures."""


class InvalidStatistics(ThumbnailError, ValueError):
    """Per-channel statistics are missing channels or malformed."""


class InvalidLayout(ThumbnailError, ValueError):
    """An arrangement id is not part of the catalog."""

    def __init__(self, layout_id: str) -> None:
        self.layout_id = layout_id
        super().__init__(f"Invalid grid layout: {layout_id}")


class ImageProcessingFailure(ThumbnailError):
    """Decoding or transforming one input image failed."""

    def __init__(self, index: int, reason: str) -> None:
        # index is 1-based, matching what users see in the file picker
        self.index = index
        self.reason = reason
        super().__init__(f"Failed to process image {index}: {reason}")


class InsufficientImages(ThumbnailError, ValueError):
    """No usable images were supplied for the request."""


class InvalidGeometryInput(ThumbnailError, ValueError):
    """A canvas, padding, or count value is non-finite or non-numeric."""


__all__ = [
    "ImageProcessingFailure",
    "InsufficientImages",
    "InvalidGeometryInput",
    "InvalidLayout",
    "InvalidStatistics",
    "ThumbnailError",
]
