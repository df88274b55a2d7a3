"""
TrekPrep Configuration — Load and validate trekprep.yaml at startup.

Usage:
    from trekprep.engine.config import load_config, get_config
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from trekprep.engine.errors import TrekPrepConfigError
from trekprep.records.enums import Team, TrekType

CONFIG_FILENAME = "trekprep.yaml"
ENV_API_URL = "TREKPREP_API_URL"
ENV_API_KEY = "TREKPREP_API_KEY"


# ---------------------------------------------------------------------------
# Pydantic models for trekprep.yaml
# ---------------------------------------------------------------------------

class APIConfig(BaseModel):
    base_url: str = "http://localhost:54321/functions/v1/trekprep"
    api_key: Optional[str] = None
    timeout_seconds: float = 15.0
    max_connections: int = 10

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class PersistenceConfig(BaseModel):
    debounce_ms: int = Field(default=500, ge=0, le=5000)


class SelectionConfig(BaseModel):
    trek_type: str = TrekType.TREKS.value
    team: str = Team.SUPPORT.value

    @field_validator("trek_type")
    @classmethod
    def validate_trek_type(cls, v: str) -> str:
        allowed = [t.value for t in TrekType]
        if v not in allowed:
            raise ValueError(f"trek_type must be one of {allowed}, got '{v}'")
        return v

    @field_validator("team")
    @classmethod
    def validate_team(cls, v: str) -> str:
        allowed = [t.value for t in Team]
        if v not in allowed:
            raise ValueError(f"team must be one of {allowed}, got '{v}'")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    directory: str = ".trekprep/logs"


class TrekPrepConfig(BaseModel):
    """Root model for trekprep.yaml."""
    name: str = "TrekPrep"
    version: str = "1.0.0"
    environment: str = "dev"

    api: APIConfig = APIConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    selection: SelectionConfig = SelectionConfig()
    logging: LoggingConfig = LoggingConfig()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ("dev", "staging", "prod"):
            raise ValueError(f"environment must be dev/staging/prod, got '{v}'")
        return v


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

_config: Optional[TrekPrepConfig] = None


def _find_config_file() -> Optional[Path]:
    """Walk up from CWD looking for trekprep.yaml."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / CONFIG_FILENAME
        if candidate.exists():
            return candidate
    return None


def _apply_env_overrides(data: dict) -> dict:
    api = dict(data.get("api") or {})
    if os.environ.get(ENV_API_URL):
        api["base_url"] = os.environ[ENV_API_URL]
    if os.environ.get(ENV_API_KEY):
        api["api_key"] = os.environ[ENV_API_KEY]
    if api:
        data["api"] = api
    return data


def load_config(config_path: Optional[str] = None) -> TrekPrepConfig:
    """
    Load and validate trekprep.yaml.

    Args:
        config_path: Explicit path to the file. If None, auto-discovers.

    Returns:
        Validated TrekPrepConfig instance. Defaults when no file exists.

    Raises:
        TrekPrepConfigError: file exists but is not valid YAML or fails validation.
    """
    global _config

    path = Path(config_path) if config_path else _find_config_file()
    if config_path and not path.exists():
        raise TrekPrepConfigError(f"Config file not found: {config_path}", path=str(path))

    raw: dict = {}
    if path is not None and path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise TrekPrepConfigError(f"Invalid YAML in {path}: {e}", path=str(path)) from e
        if not isinstance(raw, dict):
            raise TrekPrepConfigError(f"{path} must contain a mapping", path=str(path))

    # trekprep.yaml may nest name/version/environment under "app:"
    app_data = raw.get("app", {}) or {}
    config_data = {
        "name": app_data.get("name", raw.get("name", "TrekPrep")),
        "version": app_data.get("version", raw.get("version", "1.0.0")),
        "environment": app_data.get("environment", raw.get("environment", "dev")),
        "api": raw.get("api", {}) or {},
        "persistence": raw.get("persistence", {}) or {},
        "selection": raw.get("selection", {}) or {},
        "logging": raw.get("logging", {}) or {},
    }
    config_data = _apply_env_overrides(config_data)

    try:
        _config = TrekPrepConfig(**config_data)
    except ValidationError as e:
        raise TrekPrepConfigError(
            f"Invalid configuration: {e.error_count()} error(s)",
            path=str(path) if path else None,
            errors=e.errors(),
        ) from e
    return _config


def get_config() -> TrekPrepConfig:
    """Get the currently loaded config, loading if necessary."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Forget the loaded config (tests, config reload)."""
    global _config
    _config = None
