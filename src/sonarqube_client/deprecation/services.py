"""Process-wide deprecation services.

One ledger, registry, bridge and analyzer are shared by the decorators,
the compatibility helpers and the CLI. Consumers that need isolation can
construct their own instances and pass them explicitly.
"""

from __future__ import annotations

from sonarqube_client.deprecation.analyzer import MigrationAnalyzer
from sonarqube_client.deprecation.bridge import InterceptionBridge
from sonarqube_client.deprecation.ledger import WarningLedger
from sonarqube_client.deprecation.metadata import MetadataRegistry

_global_ledger: WarningLedger | None = None
_global_registry: MetadataRegistry | None = None
_global_bridge: InterceptionBridge | None = None
_global_analyzer: MigrationAnalyzer | None = None


def get_ledger() -> WarningLedger:
    """Get the global warning ledger."""
    global _global_ledger
    if _global_ledger is None:
        _global_ledger = WarningLedger()
    return _global_ledger


def get_registry() -> MetadataRegistry:
    """Get the global metadata registry."""
    global _global_registry
    if _global_registry is None:
        _global_registry = MetadataRegistry()
    return _global_registry


def get_bridge() -> InterceptionBridge:
    """Get the global compatibility bridge, bound to the global ledger."""
    global _global_bridge
    if _global_bridge is None:
        _global_bridge = InterceptionBridge(get_ledger())
    return _global_bridge


def get_analyzer() -> MigrationAnalyzer:
    """Get the global migration analyzer, bound to the global registry."""
    global _global_analyzer
    if _global_analyzer is None:
        _global_analyzer = MigrationAnalyzer(get_registry())
    return _global_analyzer


def reset_deprecation_state() -> None:
    """Drop all global services (mainly for testing).

    The next get_*() call builds fresh instances: no warned APIs, default
    options, no metadata and no mappings.
    """
    global _global_ledger, _global_registry, _global_bridge, _global_analyzer
    _global_ledger = None
    _global_registry = None
    _global_bridge = None
    _global_analyzer = None
