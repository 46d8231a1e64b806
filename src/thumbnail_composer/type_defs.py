"""
Defines shared type aliases for the thumbnail composer.

Centralizes reusable type hints to improve consistency and readability.
"""
from __future__ import annotations

from typing import Literal

EnhanceLevel = Literal["none", "light", "medium", "high"]
Orientation = Literal["portrait", "landscape", "square"]
ArrangementKind = Literal["grid", "custom"]
DividerOrientation = Literal["vertical", "horizontal"]
BlendMode = Literal["over", "overlay"]
TextPosition = Literal[
    "top",
    "bottom",
    "left",
    "right",
    "center",
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
]
TextEffect = Literal[
    "shadow", "outline", "glow", "background", "smart-blend", "none",
]
TextLayer = Literal["overlay", "between", "smart-blend"]

RGB = tuple[int, int, int]
RGBA = tuple[int, int, int, int]

ENHANCE_LEVELS: tuple[EnhanceLevel, ...] = ("none", "light", "medium", "high")
TEXT_POSITIONS: tuple[TextPosition, ...] = (
    "top",
    "bottom",
    "left",
    "right",
    "center",
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
)
TEXT_EFFECTS: tuple[TextEffect, ...] = (
    "shadow", "outline", "glow", "background", "smart-blend", "none",
)
TEXT_LAYERS: tuple[TextLayer, ...] = ("overlay", "between", "smart-blend")
