"""
Folio Configuration — Load and validate folio.yaml.

Usage:
    from folio.engine.config import load_config, get_config
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, field_validator

CONFIG_FILE = "folio.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for folio.yaml
# ---------------------------------------------------------------------------

class LayoutConfig(BaseModel):
    """On-disk artifact names of a document directory."""
    info_file: str = "info.json"
    content_file: str = "content.txt"
    history_dir: str = "history"
    empty_marker: str = "⨶"
    snapshot_date_format: str = "%Y-%m-%d %H_%M_%S"

    @field_validator("info_file", "content_file", "history_dir")
    @classmethod
    def validate_artifact_name(cls, v: str) -> str:
        if not v or "/" in v:
            raise ValueError(f"artifact name must be a single path segment, got '{v}'")
        return v

    @field_validator("empty_marker")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        if not v:
            raise ValueError("empty_marker must not be empty")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".folio/logs"
    structured: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"invalid log level '{v}'")
        return v


class FolioConfig(BaseModel):
    """Root model for folio.yaml."""
    root: str = "library"

    layout: LayoutConfig = LayoutConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("root")
    @classmethod
    def validate_root(cls, v: str) -> str:
        if not v:
            raise ValueError("root must not be empty")
        return v


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[FolioConfig] = None


def _find_project_root() -> Path:
    """Find the project root by looking for folio.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILE).exists():
            return parent
    return current


def load_config(config_path: Optional[str] = None) -> FolioConfig:
    """
    Load and validate folio.yaml.

    Args:
        config_path: Explicit path to folio.yaml. If None, auto-discovers.

    Returns:
        Validated FolioConfig instance. Defaults when the file is missing.
    """
    global _config

    if config_path is None:
        config_path = str(_find_project_root() / CONFIG_FILE)

    path = Path(config_path)
    if not path.exists():
        _config = FolioConfig()
        return _config

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    # Accept both a flat file and one wrapped under "folio:"
    data = raw.get("folio", raw)
    _config = FolioConfig(**data)
    return _config


def get_config() -> FolioConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
