"""SonarQube Web API client - deprecation and compatibility layer.

Track deprecated API usage, redirect old calls to their replacements and
produce migration reports.

Quick Start:
    from sonarqube_client import with_compatibility, get_ledger

    get_ledger().configure(migration_mode=True)
    client = with_compatibility(client)  # users.search -> users.searchV2

    # Report what still needs migrating
    from sonarqube_client import get_analyzer
    report = get_analyzer().analyze_usage(records)
"""

from __future__ import annotations

from sonarqube_client.config import DeprecationSettings, load_config
from sonarqube_client.deprecation import (
    ApiMapping,
    DeprecationContext,
    DeprecationMetadata,
    DeprecationOptions,
    InterceptionBridge,
    MetadataRegistry,
    MigrationAnalyzer,
    MigrationExample,
    MigrationReport,
    MigrationSuggestion,
    UsageRecord,
    WarningLedger,
    deprecated,
    deprecated_class,
    deprecated_method,
    deprecated_parameter,
    get_analyzer,
    get_bridge,
    get_ledger,
    get_registry,
    reset_deprecation_state,
    with_compatibility,
)
from sonarqube_client.errors import (
    CompatibilityBridgeError,
    ConfigurationError,
    DeprecatedApiError,
    ErrorCode,
    MetadataError,
    SonarQubeClientError,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "WarningLedger",
    "DeprecationContext",
    "DeprecationOptions",
    "MetadataRegistry",
    "DeprecationMetadata",
    "MigrationExample",
    "InterceptionBridge",
    "ApiMapping",
    "with_compatibility",
    "MigrationAnalyzer",
    "MigrationReport",
    "MigrationSuggestion",
    "UsageRecord",
    "deprecated",
    "deprecated_method",
    "deprecated_class",
    "deprecated_parameter",
    "get_ledger",
    "get_registry",
    "get_bridge",
    "get_analyzer",
    "reset_deprecation_state",
    "DeprecationSettings",
    "load_config",
    "SonarQubeClientError",
    "DeprecatedApiError",
    "CompatibilityBridgeError",
    "MetadataError",
    "ConfigurationError",
    "ErrorCode",
]
