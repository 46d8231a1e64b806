"""
Configuration schema and loader for the thumbnail composer.

Defines Pydantic models representing structured configuration sections
and a TOML-based config loader with validation support.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, Field, field_validator

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
    DEFAULT_TEXT_COLOR,
    DEFAULT_TEXT_EFFECT,
    DEFAULT_TEXT_FONT,
    DEFAULT_TEXT_LAYER,
    DEFAULT_TEXT_OPACITY,
    DEFAULT_TEXT_POSITION,
    DEFAULT_TEXT_SIZE,
    DEFAULT_YOUTUBE_OPTIMIZE,
)
from thumbnail_composer.layout.catalog import DEFAULT_CATALOG, LAYOUT_ALIASES
from thumbnail_composer.render.text import TextOverlay
from thumbnail_composer.runtime.validation import parse_hex_color, parse_tilt
from thumbnail_composer.type_defs import (
    EnhanceLevel,
    TextEffect,
    TextLayer,
    TextPosition,
)


def _check_color(value: str) -> str:
    parse_hex_color(value)
    return value.strip()


class OutputConfig(BaseModel):
    """Configure where thumbnails are written and how they are encoded."""

    dir: str = Field(DEFAULT_OUTPUT_DIR)
    name: str | None = None
    youtube_optimize: bool = DEFAULT_YOUTUBE_OPTIMIZE
    compression_level: int = Field(DEFAULT_COMPRESSION_LEVEL, ge=0, le=9)


class LayoutConfig(BaseModel):
    """Select automatic layout or a named arrangement."""

    mode: str = Field(DEFAULT_LAYOUT_MODE)

    @field_validator("mode")
    @classmethod
    def _known_mode(cls, value: str) -> str:
        mode = value.strip().lower()
        if mode != "auto" and LAYOUT_ALIASES.get(mode, mode) not in DEFAULT_CATALOG:
            msg = f"Invalid grid layout: {value}"
            raise ValueError(msg)
        return mode


class DividerConfig(BaseModel):
    """Control divider thickness, tilt, and colours."""

    width: int = Field(DEFAULT_DELIMITER_WIDTH, ge=0)
    tilt: float = Field(DEFAULT_DELIMITER_TILT)
    color: str = Field(DEFAULT_DELIMITER_COLOR)
    background: str = Field(DEFAULT_BACKGROUND_COLOR)

    @field_validator("tilt", mode="before")
    @classmethod
    def _numeric_tilt(cls, value: Any) -> float:
        return parse_tilt(value)

    @field_validator("color", "background")
    @classmethod
    def _hex_color(cls, value: str) -> str:
        return _check_color(value)


class EnhanceConfig(BaseModel):
    """Toggle adaptive enhancement and choose its strength."""

    apply: bool = DEFAULT_APPLY_ENHANCE
    level: EnhanceLevel = Field(DEFAULT_ENHANCE_LEVEL)


class TextConfig(BaseModel):
    """Optional text overlay; an empty ``text`` disables it."""

    text: str = ""
    font: str = Field(DEFAULT_TEXT_FONT)
    size: int = Field(DEFAULT_TEXT_SIZE, ge=1)
    color: str = Field(DEFAULT_TEXT_COLOR)
    opacity: float = Field(DEFAULT_TEXT_OPACITY, ge=0.0, le=1.0)
    position: TextPosition = Field(DEFAULT_TEXT_POSITION)
    effect: TextEffect = Field(DEFAULT_TEXT_EFFECT)
    layer: TextLayer = Field(DEFAULT_TEXT_LAYER)

    @field_validator("color")
    @classmethod
    def _hex_color(cls, value: str) -> str:
        return _check_color(value)

    def to_overlay(self) -> TextOverlay | None:
        """Return the overlay to render, or ``None`` when there is no text."""
        if not self.text.strip():
            return None
        return TextOverlay(
            text=self.text,
            font=self.font,
            size=self.size,
            color=parse_hex_color(self.color),
            opacity=self.opacity,
            position=self.position,
            effect=self.effect,
            layer=self.layer,
        )


class ProcessingConfig(BaseModel):
    """Concurrency settings for analysis and slot processing."""

    max_workers: int = Field(DEFAULT_MAX_WORKERS, ge=1)


class ThumbnailConfig(BaseModel):
    """
    Root configuration object combining all supported sections.

    Mirrors the structure of config.toml, grouping related parameters
    under logical categories.
    """

    # model_validate({}) lets Pydantic v2 fill every Field default while
    # keeping pyright happy about the zero-argument factories.
    output: OutputConfig = Field(
        default_factory=lambda: OutputConfig.model_validate({}),
    )
    layout: LayoutConfig = Field(
        default_factory=lambda: LayoutConfig.model_validate({}),
    )
    divider: DividerConfig = Field(
        default_factory=lambda: DividerConfig.model_validate({}),
    )
    enhance: EnhanceConfig = Field(
        default_factory=lambda: EnhanceConfig.model_validate({}),
    )
    text: TextConfig = Field(
        default_factory=lambda: TextConfig.model_validate({}),
    )
    processing: ProcessingConfig = Field(
        default_factory=lambda: ProcessingConfig.model_validate({}),
    )


class ConfigLoader:
    """
    Loads and parses a TOML configuration file into a typed config object.

    Falls back to defaults for any missing subsections or fields.
    """

    @staticmethod
    def load(path: str | Path) -> ThumbnailConfig:
        """Load and validate a thumbnail configuration from a TOML file."""
        config_path = Path(path)
        if not config_path.is_file():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with config_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)

        return ThumbnailConfig.model_validate(doc.unwrap())


# CLI argument name -> (config section, field)
CLI_FIELD_MAP: Mapping[str, tuple[str, str]] = {
    "output": ("output", "dir"),
    "name": ("output", "name"),
    "compression_level": ("output", "compression_level"),
    "layout": ("layout", "mode"),
    "delimiter_width": ("divider", "width"),
    "tilt": ("divider", "tilt"),
    "color": ("divider", "color"),
    "background": ("divider", "background"),
    "enhance_level": ("enhance", "level"),
    "text": ("text", "text"),
    "text_font": ("text", "font"),
    "text_size": ("text", "size"),
    "text_color": ("text", "color"),
    "text_opacity": ("text", "opacity"),
    "text_position": ("text", "position"),
    "text_effect": ("text", "effect"),
    "text_layer": ("text", "layer"),
    "max_workers": ("processing", "max_workers"),
}


def build_config_from_cli(
    cli_args: Mapping[str, Any],
    base_config: ThumbnailConfig | None = None,
) -> ThumbnailConfig:
    """
    Merge CLI overrides onto a loaded (or default) configuration.

    Only arguments that were actually supplied (present and not
    ``None``) override the base values. ``enhance`` and
    ``no_optimize`` are boolean flags.
    """
    base = base_config or ThumbnailConfig.model_validate({})
    data = base.model_dump()
    for arg_name, (section, field_name) in CLI_FIELD_MAP.items():
        value = cli_args.get(arg_name)
        if value is not None:
            data[section][field_name] = value
    if cli_args.get("enhance"):
        data["enhance"]["apply"] = True
    if cli_args.get("no_optimize"):
        data["output"]["youtube_optimize"] = False
    return ThumbnailConfig.model_validate(data)
