"""Deprecation tracking and compatibility translation.

- WarningLedger: de-duplicated deprecation warnings under a global policy
- MetadataRegistry: structured metadata about deprecated APIs
- InterceptionBridge: transparent redirection of deprecated calls
- MigrationAnalyzer: usage analysis, effort estimates and migration guides
- Decorators for methods, classes and parameters
"""

from sonarqube_client.deprecation.analyzer import (
    MigrationAnalyzer,
    MigrationReport,
    MigrationSuggestion,
    UsageRecord,
    days_until_removal,
    estimate_effort,
    generate_automatic_fix,
)
from sonarqube_client.deprecation.bridge import (
    ApiMapping,
    CompatibilityProxy,
    InterceptionBridge,
    resolve_path,
    with_compatibility,
)
from sonarqube_client.deprecation.catalog import BUILTIN_DEPRECATIONS, register_builtin_deprecations
from sonarqube_client.deprecation.decorators import (
    deprecated,
    deprecated_class,
    deprecated_method,
    deprecated_parameter,
    wrap_deprecated_class,
    wrap_deprecated_method,
    wrap_deprecated_parameter,
)
from sonarqube_client.deprecation.ledger import DeprecationContext, DeprecationOptions, WarningLedger
from sonarqube_client.deprecation.mappings import USERS_V1_TO_V2_MAPPINGS
from sonarqube_client.deprecation.metadata import (
    DeprecationMetadata,
    MetadataRegistry,
    MigrationExample,
    parse_removal_date,
)
from sonarqube_client.deprecation.services import (
    get_analyzer,
    get_bridge,
    get_ledger,
    get_registry,
    reset_deprecation_state,
)

__all__ = [
    "WarningLedger",
    "DeprecationContext",
    "DeprecationOptions",
    "MetadataRegistry",
    "DeprecationMetadata",
    "MigrationExample",
    "parse_removal_date",
    "InterceptionBridge",
    "CompatibilityProxy",
    "ApiMapping",
    "resolve_path",
    "with_compatibility",
    "USERS_V1_TO_V2_MAPPINGS",
    "MigrationAnalyzer",
    "MigrationReport",
    "MigrationSuggestion",
    "UsageRecord",
    "days_until_removal",
    "estimate_effort",
    "generate_automatic_fix",
    "deprecated",
    "deprecated_method",
    "deprecated_class",
    "deprecated_parameter",
    "wrap_deprecated_method",
    "wrap_deprecated_class",
    "wrap_deprecated_parameter",
    "BUILTIN_DEPRECATIONS",
    "register_builtin_deprecations",
    "get_ledger",
    "get_registry",
    "get_bridge",
    "get_analyzer",
    "reset_deprecation_state",
]
