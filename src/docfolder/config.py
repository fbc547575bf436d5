"""
Engine configuration -- debounce delay, file suffix, serialization.

Read from ``<home>/config.yaml``. A missing or malformed file falls
back to defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from . import DOCFOLDER_HOME

logger = logging.getLogger("docfolder.config")

CONFIG_FILE = "config.yaml"


class EngineConfig(BaseModel):
    """Tunables for the synchronization engine."""

    debounce_seconds: float = Field(default=0.8, ge=0)
    suffix: str = ".json"
    indent: int = Field(default=2, ge=0)
    default_filename: str = "untitled.json"

    @field_validator("suffix")
    @classmethod
    def _suffix_has_dot(cls, value: str) -> str:
        if not value.startswith("."):
            return f".{value}"
        return value


def resolve_home(home: Optional[Path | str] = None) -> Path:
    """Expand the docfolder home directory and make sure it exists."""
    path = Path(home or DOCFOLDER_HOME).expanduser()
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_config(home: Optional[Path] = None) -> EngineConfig:
    """Load engine configuration from disk.

    Args:
        home: docfolder home directory. Defaults to ``DOCFOLDER_HOME``.

    Returns:
        EngineConfig: Parsed config, or defaults when absent or invalid.
    """
    config_file = resolve_home(home) / CONFIG_FILE
    if config_file.exists():
        try:
            data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            return EngineConfig(**data)
        except (yaml.YAMLError, ValueError, TypeError) as exc:
            logger.warning("Failed to load config %s: %s", config_file, exc)
    return EngineConfig()


def save_config(config: EngineConfig, home: Optional[Path] = None) -> Path:
    """Persist engine configuration as YAML."""
    config_file = resolve_home(home) / CONFIG_FILE
    config_file.write_text(
        yaml.dump(config.model_dump(mode="json"), default_flow_style=False),
        encoding="utf-8",
    )
    return config_file
