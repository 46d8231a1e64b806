"""Shared default values for user-facing configuration settings."""
from thumbnail_composer.type_defs import EnhanceLevel, TextEffect, TextLayer, TextPosition

# Layout
DEFAULT_LAYOUT_MODE = "auto"

# Dividers
DEFAULT_DELIMITER_WIDTH = 10
DEFAULT_DELIMITER_TILT = 0.0
DEFAULT_DELIMITER_COLOR = "#ffffff"
DEFAULT_BACKGROUND_COLOR = "#ffffff"

# Enhancement
DEFAULT_APPLY_ENHANCE = False
DEFAULT_ENHANCE_LEVEL: EnhanceLevel = "medium"

# Text overlay
DEFAULT_TEXT_FONT = "DejaVuSans-Bold.ttf"
DEFAULT_TEXT_SIZE = 72
DEFAULT_TEXT_COLOR = "#ffffff"
DEFAULT_TEXT_OPACITY = 1.0
DEFAULT_TEXT_POSITION: TextPosition = "bottom"
DEFAULT_TEXT_EFFECT: TextEffect = "shadow"
DEFAULT_TEXT_LAYER: TextLayer = "overlay"

# Output
DEFAULT_OUTPUT_DIR = "thumbnails"
DEFAULT_YOUTUBE_OPTIMIZE = True
DEFAULT_COMPRESSION_LEVEL = 8

# Processing
DEFAULT_MAX_WORKERS = 4
