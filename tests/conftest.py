"""
Test configuration and shared fixtures for thumbnail_composer.

This module defines reusable pytest fixtures for synthetic images,
feature records, and configuration objects. These fixtures support all
test modules in the test suite.

Note:
    This file is automatically loaded by pytest and should not be
    renamed.

"""
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from PIL import Image, ImageDraw

from thumbnail_composer.analysis.features import ImageFeature
from thumbnail_composer.config import ThumbnailConfig
from thumbnail_composer.constants import COLOR_MODE_RGB
from thumbnail_composer.logging_utils import logger

ImageFactory = Callable[..., Path]
FeatureFactory = Callable[..., ImageFeature]


@pytest.fixture
def sample_image() -> Image.Image:
    """Create a sample 100x100 red RGB PIL image."""
    return Image.new(COLOR_MODE_RGB, (100, 100), color="red")


@pytest.fixture
def gradient_image() -> Image.Image:
    """A 256x64 horizontal grey ramp with every byte value present."""
    img = Image.new("L", (256, 64))
    img.putdata([x for _ in range(64) for x in range(256)])
    return img.convert(COLOR_MODE_RGB)


@pytest.fixture
def make_image_file(tmp_path: Path) -> ImageFactory:
    """
    Write synthetic images to ``tmp_path``.

    ``subject=True`` draws a white block in the middle of a black frame,
    which concentrates edges in the centre.
    """
    counter = iter(range(10_000))

    def _make(
        size: tuple[int, int] = (160, 160),
        color: tuple[int, int, int] | str = (90, 120, 150),
        *,
        subject: bool = False,
        name: str | None = None,
        fmt: str = "PNG",
    ) -> Path:
        width, height = size
        if subject:
            img = Image.new(COLOR_MODE_RGB, size, (0, 0, 0))
            ImageDraw.Draw(img).rectangle(
                (width * 0.35, height * 0.35, width * 0.65, height * 0.65),
                fill=(255, 255, 255),
            )
        else:
            img = Image.new(COLOR_MODE_RGB, size, color)
        suffix = ".jpg" if fmt == "JPEG" else ".png"
        path = tmp_path / (name or f"img_{next(counter)}{suffix}")
        img.save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def make_feature() -> FeatureFactory:
    """Build ImageFeature records with neutral defaults."""

    def _make(
        width: int = 100,
        height: int = 100,
        *,
        entropy: float = 5.0,
        color_variance: float = 100.0,
        visual_weight: float = 50.0,
        prominent: bool = False,
        path: str = "img.png",
    ) -> ImageFeature:
        return ImageFeature.from_measurements(
            path,
            width,
            height,
            entropy=entropy,
            color_variance=color_variance,
            visual_weight=visual_weight,
            has_prominent_subject=prominent,
        )

    return _make


@pytest.fixture
def make_thumbnail_config(tmp_path: Path) -> Callable[..., ThumbnailConfig]:
    """
    Build ThumbnailConfig instances with optional section overrides.

    Every config writes into an isolated directory under tmp_path.
    """
    default_output = tmp_path / "thumbs"

    def _build(**sections: dict[str, Any]) -> ThumbnailConfig:
        data: dict[str, Any] = {k: dict(v) for k, v in sections.items()}
        data.setdefault("output", {}).setdefault("dir", str(default_output))
        return ThumbnailConfig.model_validate(data)

    return _build


@pytest.fixture(autouse=True)
def enable_logger_propagation(monkeypatch: pytest.MonkeyPatch) -> None:
    """Enable propagation for the composer logger to allow caplog to work."""
    monkeypatch.setattr(logger, "propagate", True)


@pytest.fixture
def restore_log_level() -> Iterator[None]:
    """Put the composer logger back to its level after a verbosity change."""
    level = logger.level
    yield
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(logging.NOTSET)
