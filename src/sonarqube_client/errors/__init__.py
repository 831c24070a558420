"""Error types for the SonarQube client deprecation layer."""

from sonarqube_client.errors.base import (
    CompatibilityBridgeError,
    ConfigurationError,
    DeprecatedApiError,
    ErrorCode,
    ErrorContext,
    MetadataError,
    SonarQubeClientError,
)

__all__ = [
    "SonarQubeClientError",
    "DeprecatedApiError",
    "CompatibilityBridgeError",
    "MetadataError",
    "ConfigurationError",
    "ErrorCode",
    "ErrorContext",
]
