"""
BlockGov Configuration

Settings are read from an optional YAML file, then overridden by
``BG_*`` environment variables.

    BG_CONFIG=/etc/blockgov.yaml       # optional settings file
    BG_LOG_LEVEL=DEBUG
    BG_LOG_JSON=false
    BG_FINGERPRINT_MODE=chained
    BG_LEDGER_PATH=/var/lib/blockgov/ledger.jsonl
    BG_LEDGER_FSYNC=true
    BG_OVERDUE_DAYS=14
    BG_SLA_ALERT_DAYS=7
    BG_DEFAULT_SLA_DAYS=30
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .models import FingerprintMode

ENV_PREFIX = "BG_"
CONFIG_ENV_VAR = "BG_CONFIG"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseModel):
    """Runtime settings."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    log_level: str = "INFO"
    log_json: bool = True
    fingerprint_mode: FingerprintMode = FingerprintMode.PER_ENTRY
    ledger_path: Optional[Path] = None
    ledger_fsync: bool = True
    overdue_days: int = Field(14, ge=0)
    sla_alert_days: int = Field(7, ge=0)
    default_sla_days: int = Field(30, ge=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level


def _read_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(
            message=f"Failed to read settings file: {e}",
            details={"path": str(path)},
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            message="Settings file must contain a mapping",
            details={"path": str(path)},
        )
    return data


def load_settings(
    path: Union[str, Path, None] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from a YAML file and the environment.

    Args:
        path: Settings file; defaults to ``$BG_CONFIG`` when set
        environ: Environment mapping; defaults to ``os.environ``

    Raises:
        ConfigError: If the file cannot be read or a value is invalid
    """
    environ = os.environ if environ is None else environ
    if path is None:
        path = environ.get(CONFIG_ENV_VAR) or None

    values: dict[str, Any] = _read_file(Path(path)) if path else {}
    for name in Settings.model_fields:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is None:
            continue
        # An empty BG_LEDGER_PATH disables file storage
        values[name] = None if name == "ledger_path" and raw == "" else raw

    try:
        return Settings.model_validate(values)
    except ValidationError as e:
        raise ConfigError(
            message=f"Invalid settings: {e.error_count()} errors",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e
