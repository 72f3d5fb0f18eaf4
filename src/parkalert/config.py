"""Configuration models and loading utilities."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PydanticValidationError

from .const import DEFAULT_SCAN_INTERVAL_SECONDS, EXPO_PUSH_ENDPOINT
from .exceptions import ConfigError


def _resolve_env(value: str | None) -> str | None:
    """Resolve ``${VAR_NAME}`` references from the environment."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1], "")
    return value


class BackendConfig(BaseModel):
    """Parking backend connection."""

    base_url: str
    token: str | None = None
    timeout_seconds: float = 30.0
    retry_count: int = 0

    @field_validator("token", mode="before")
    @classmethod
    def resolve_token(cls, v: str | None) -> str | None:
        return _resolve_env(v)


class NotifierConfig(BaseModel):
    """Where alerts are delivered."""

    kind: Literal["log", "expo"] = "log"
    push_token: str | None = None
    endpoint: str = EXPO_PUSH_ENDPOINT

    @field_validator("push_token", mode="before")
    @classmethod
    def resolve_push_token(cls, v: str | None) -> str | None:
        return _resolve_env(v)


class ScanConfig(BaseModel):
    """Scan loop settings."""

    user_id: str
    interval_seconds: int = DEFAULT_SCAN_INTERVAL_SECONDS
    timezone: str | None = None  # IANA name; local time when unset

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {v}") from exc
        return v

    @field_validator("interval_seconds")
    @classmethod
    def check_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("interval_seconds must be positive")
        return v

    def tzinfo(self) -> ZoneInfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None


class AppConfig(BaseModel):
    """Main application configuration."""

    backend: BackendConfig
    scan: ScanConfig
    notifier: NotifierConfig = NotifierConfig()


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Configuration file is not valid YAML: {config_path}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping.")

    try:
        return AppConfig(**data)
    except PydanticValidationError as exc:
        raise ConfigError("Configuration is invalid.", detail=str(exc)) from exc
