"""Configuration settings and loading."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sonarqube_client.errors import ConfigurationError, ErrorCode

LEDGER_OPTION_FIELDS = ("suppress_deprecation_warnings", "strict_mode", "migration_mode")


class DeprecationSettings(BaseSettings):
    """Process-level configuration for deprecation handling."""

    model_config = SettingsConfigDict(
        env_prefix="SONARQUBE_CLIENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    suppress_deprecation_warnings: bool = False
    strict_mode: bool = False
    migration_mode: bool = False
    report_filename: str = "migration-report.md"
    log_level: str = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("report_filename")
    @classmethod
    def validate_report_filename(cls, v: str) -> str:
        if not v or Path(v).is_absolute():
            raise ValueError("report_filename must be a relative path")
        return v

    def ledger_options(self) -> dict[str, bool]:
        """Options understood by WarningLedger.configure()."""
        return {name: getattr(self, name) for name in LEDGER_OPTION_FIELDS}


def load_config(config_path: str | Path | None = None) -> DeprecationSettings:
    """Load configuration from file and environment.

    Priority: env vars > config file > defaults
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Could not parse config file {config_path}: {e}",
                    error_code=ErrorCode.CONFIG_LOAD_FAILED,
                    cause=e,
                ) from e
            if not isinstance(config_data, dict):
                raise ConfigurationError(
                    f"Config file {config_path} must contain a mapping",
                    error_code=ErrorCode.CONFIG_LOAD_FAILED,
                )

    config_data.update(_get_env_overrides())

    try:
        return DeprecationSettings(**config_data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            error_code=ErrorCode.CONFIG_LOAD_FAILED,
            cause=e,
        ) from e


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    def as_bool(value: str) -> bool:
        return value.lower() in ("true", "1", "yes")

    env_mappings = {
        "SONARQUBE_CLIENT_SUPPRESS_DEPRECATION_WARNINGS": ("suppress_deprecation_warnings", as_bool),
        "SONARQUBE_CLIENT_STRICT_MODE": ("strict_mode", as_bool),
        "SONARQUBE_CLIENT_MIGRATION_MODE": ("migration_mode", as_bool),
        "SONARQUBE_CLIENT_REPORT_FILENAME": "report_filename",
        "SONARQUBE_CLIENT_LOG_LEVEL": "log_level",
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                overrides[key] = converter(value)
            else:
                overrides[config_key] = value

    return overrides
