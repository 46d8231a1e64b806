"""Slot processing, divider and text layers, and final canvas painting."""

from __future__ import annotations

from .compositor import (
    CompositeOp,
    Composition,
    CompositionPlan,
    SlotOptions,
    build_draw_list,
    compose,
    cycle_images,
    paint,
    plan_composition,
    reconcile_images,
    resolve_arrangement,
)
from .dividers import DividerGraphic, render_divider, render_dividers
from .text import TextGraphic, TextOverlay, anchor_position, render_text_layer

__all__ = [
    "CompositeOp",
    "Composition",
    "CompositionPlan",
    "DividerGraphic",
    "SlotOptions",
    "TextGraphic",
    "TextOverlay",
    "anchor_position",
    "build_draw_list",
    "compose",
    "cycle_images",
    "paint",
    "plan_composition",
    "reconcile_images",
    "render_divider",
    "render_dividers",
    "render_text_layer",
    "resolve_arrangement",
]
