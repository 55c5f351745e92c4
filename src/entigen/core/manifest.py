"""
Project manifest (entigen.toml) loading.

Example:

    [project]
    name = "Stamps"
    source = "stamps.model"
    backend = "sqlite"
    output = "generated"
"""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

MANIFEST_NAME = "entigen.toml"
DEFAULT_BACKEND = "memory"
DEFAULT_OUTPUT = "generated"


@dataclass
class ProjectManifest:
    """
    Project manifest loaded from entigen.toml.

    Relative paths are resolved against the manifest's directory.
    """

    source: Path
    name: str | None = None
    backend: str = DEFAULT_BACKEND
    output: Path = Path(DEFAULT_OUTPUT)


def load_manifest(path: Path) -> ProjectManifest:
    """
    Load a project manifest.

    Args:
        path: Path to entigen.toml

    Returns:
        ProjectManifest with paths resolved relative to the manifest

    Raises:
        ConfigError: If the file is missing, is not valid TOML or lacks a source
    """
    if not path.exists():
        raise ConfigError(f"Manifest not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid manifest {path}: {e}") from e

    project = data.get("project", {})

    source = project.get("source")
    if not source:
        raise ConfigError(f"{path}: [project] source is required")

    root = path.parent
    return ProjectManifest(
        source=root / source,
        name=project.get("name"),
        backend=project.get("backend", DEFAULT_BACKEND),
        output=root / project.get("output", DEFAULT_OUTPUT),
    )
