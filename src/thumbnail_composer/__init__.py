"""Public package exports for the thumbnail composer."""

from __future__ import annotations

from .pipeline import ThumbnailRequest, ThumbnailResult, create_thumbnail
from .render import TextOverlay

__all__ = ["TextOverlay", "ThumbnailRequest", "ThumbnailResult", "create_thumbnail"]
