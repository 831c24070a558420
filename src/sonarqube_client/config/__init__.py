"""Configuration management for the deprecation layer."""

from sonarqube_client.config.settings import (
    LEDGER_OPTION_FIELDS,
    DeprecationSettings,
    load_config,
)

__all__ = [
    "DeprecationSettings",
    "LEDGER_OPTION_FIELDS",
    "load_config",
]
