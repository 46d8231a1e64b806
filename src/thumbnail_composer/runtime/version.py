"""Version lookup for ``--version`` and the package metadata."""

from __future__ import annotations

import tomllib
from importlib import metadata as importlib_metadata
from pathlib import Path

from thumbnail_composer.logging_utils import logger

DISTRIBUTION_NAME = "thumbnail-composer"
FALLBACK_VERSION = "0.0.0"


def installed_version(distribution: str = DISTRIBUTION_NAME) -> str | None:
    """Version recorded in the installed distribution metadata, if any."""
    try:
        return importlib_metadata.version(distribution)
    except importlib_metadata.PackageNotFoundError:
        return None


def find_pyproject(start: Path) -> Path | None:
    """Nearest ``pyproject.toml`` at or above ``start``."""
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def pyproject_version(pyproject_path: Path) -> str | None:
    """``project.version`` from a pyproject file, or ``None``."""
    try:
        with pyproject_path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Error reading %s: %s", pyproject_path, exc)
        return None
    version = data.get("project", {}).get("version")
    if isinstance(version, str) and version.strip():
        return version.strip()
    return None


def resolve_project_version(start: Path | None = None) -> str:
    """
    Return the installed version, else the source checkout's version.

    A checkout is found by walking up from ``start`` (this module's
    directory by default). Returns ``0.0.0`` when neither is available.
    """
    version = installed_version()
    if version is not None:
        return version
    pyproject_path = find_pyproject(start or Path(__file__).resolve().parent)
    if pyproject_path is not None:
        version = pyproject_version(pyproject_path)
    return version or FALLBACK_VERSION
