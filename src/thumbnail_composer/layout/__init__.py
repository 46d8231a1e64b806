"""Arrangement catalog, layout selection, and slot geometry."""

from __future__ import annotations

from .catalog import (
    DEFAULT_CATALOG,
    LAYOUT_ALIASES,
    ArrangementCatalog,
    ArrangementSpec,
)
from .geometry import (
    DividerLine,
    LayoutGeometry,
    SlotRect,
    compute_geometry,
    sanitize_numeric,
)
from .selector import (
    CREATIVE_RULES,
    GRID_RULES,
    AggregateMetrics,
    LayoutDecision,
    LayoutRule,
    select_layout,
)

__all__ = [
    "CREATIVE_RULES",
    "DEFAULT_CATALOG",
    "GRID_RULES",
    "LAYOUT_ALIASES",
    "AggregateMetrics",
    "ArrangementCatalog",
    "ArrangementSpec",
    "DividerLine",
    "LayoutDecision",
    "LayoutGeometry",
    "LayoutRule",
    "SlotRect",
    "compute_geometry",
    "sanitize_numeric",
    "select_layout",
]
