"""
Horizon Configuration — Load and validate horizon.yaml.

Usage:
    from horizon.engine.config import load_config, get_config
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from horizon.engine.errors import HorizonConfigError

CONFIG_FILE_NAME = "horizon.yaml"


# ---------------------------------------------------------------------------
# Pydantic models for horizon.yaml
# ---------------------------------------------------------------------------

class PlatformConfig(BaseModel):
    base_url: str = "https://platform.example.com/api/v1"
    token_env: str = "HORIZON_API_TOKEN"
    timeout: int = 60

    @property
    def token(self) -> Optional[str]:
        return os.environ.get(self.token_env) or None


class ExportConfig(BaseModel):
    output_dir: str = "Output"
    default_branches: Dict[str, str] = Field(
        default_factory=lambda: {"svn": "trunk", "git": "main"}
    )
    branch_aliases: List[str] = Field(default_factory=lambda: ["trunk", "main"])
    on_collision: str = "error"
    preamble_module: str = "mendixmodelsdk"
    capabilities: List[str] = Field(
        default_factory=lambda: [
            "domainmodels",
            "projects",
            "texts",
            "pages",
            "IStructure",
            "datatypes",
            "IAbstractUnit",
            "JavaScriptSerializer",
        ]
    )

    @field_validator("on_collision")
    @classmethod
    def validate_on_collision(cls, v: str) -> str:
        if v not in ("error", "warn"):
            raise ValueError(f"on_collision must be error/warn, got '{v}'")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".horizon/logs"
    structured: bool = True

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"logging level must be DEBUG/INFO/WARNING/ERROR/CRITICAL, got '{v}'")
        return v


class HorizonConfig(BaseModel):
    """Root model for horizon.yaml."""
    platform: PlatformConfig = PlatformConfig()
    export: ExportConfig = ExportConfig()
    logging: LoggingConfig = LoggingConfig()


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[HorizonConfig] = None


def _find_project_root() -> Path:
    """Find the project root by looking for horizon.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / CONFIG_FILE_NAME).exists():
            return parent
    return current


def load_config(config_path: Optional[str] = None) -> HorizonConfig:
    """
    Load and validate horizon.yaml.

    Args:
        config_path: Explicit path to horizon.yaml. If None, auto-discovers.

    Returns:
        Validated HorizonConfig instance. Defaults when the file is absent.

    Raises:
        HorizonConfigError if the file is not valid YAML or fails validation.
    """
    global _config

    if config_path is None:
        config_path = str(_find_project_root() / CONFIG_FILE_NAME)

    path = Path(config_path)
    if not path.exists():
        _config = HorizonConfig()
        return _config

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise HorizonConfigError(f"Invalid YAML in {path}: {e}", config_path=str(path)) from e

    if not isinstance(raw, dict):
        raise HorizonConfigError(
            f"Expected a mapping at the top of {path}", config_path=str(path)
        )

    try:
        _config = HorizonConfig(
            platform=raw.get("platform") or {},
            export=raw.get("export") or {},
            logging=raw.get("logging") or {},
        )
    except ValidationError as e:
        raise HorizonConfigError(f"Invalid config {path}: {e}", config_path=str(path)) from e
    return _config


def get_config() -> HorizonConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config
