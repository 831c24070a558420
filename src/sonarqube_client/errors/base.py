"""Exception hierarchy for the SonarQube client deprecation layer.

Every error raised by this package carries:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext naming the API involved plus extra details
- suggestions: List of actionable steps to resolve the issue
- docs_url: Link to the project documentation

Example:
    try:
        wrapped.users.search({"ps": 10})
    except CompatibilityBridgeError as e:
        print(f"Error: {e}")
        print(f"Suggestions: {e.suggestions}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

DOCS_BASE_URL = "https://github.com/sapientpants/sonarqube-web-api-client"


class ErrorCode(Enum):
    """Standardized error codes.

    Error codes are organized by category:
    - D0xx: Deprecation policy errors
    - C1xx: Compatibility bridge errors
    - M2xx: Metadata and usage input errors
    - F3xx: Configuration errors
    - X9xx: Unknown/internal errors
    """

    DEPRECATED_API = "D001"

    BRIDGE_TARGET_MISSING = "C101"
    BRIDGE_TARGET_NOT_CALLABLE = "C102"

    INVALID_METADATA = "M201"
    INVALID_USAGE_RECORD = "M202"

    INVALID_OPTION = "F301"
    CONFIG_LOAD_FAILED = "F302"

    UNKNOWN = "X999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value[0]
        return {
            "D": "deprecation",
            "C": "compatibility",
            "M": "metadata",
            "F": "configuration",
        }.get(prefix, "unknown")


@dataclass
class ErrorContext:
    """Structured context attached to an error.

    Attributes:
        api: The API identifier the error relates to, if any
        extra: Additional context-specific information
        timestamp: When the error occurred
    """

    api: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "api": self.api,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}


class SonarQubeClientError(Exception):
    """Base exception for all errors raised by this package.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with details
        suggestions: List of actionable steps to resolve the issue
        docs_url: Link to relevant documentation
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    @property
    def docs_url(self) -> str:
        """Get the documentation URL for this error."""
        return DOCS_BASE_URL

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [f"Error [{self.error_code.value}]: {self.message}"]

        if self.context.api:
            lines.append(f"API: {self.context.api}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        lines.append("")
        lines.append(f"Learn more: {self.docs_url}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "docs_url": self.docs_url,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class DeprecatedApiError(SonarQubeClientError):
    """A deprecated API was called while strict mode is active.

    The message is the same block that would otherwise have been issued
    as a DeprecationWarning.
    """

    error_code = ErrorCode.DEPRECATED_API
    default_message = "Deprecated API usage is not allowed in strict mode"
    default_suggestions = [
        "Switch to the replacement API named in the message",
        "Run 'sonarqube-client-migrate --dry-run' to list affected call sites",
        "Disable strict mode (SONARQUBE_CLIENT_STRICT_MODE=false) to downgrade this to a warning",
    ]


class CompatibilityBridgeError(SonarQubeClientError):
    """A registered mapping points at a replacement that cannot be called.

    This is a configuration error: it is raised as soon as the deprecated
    entry point is used and is never retried.
    """

    error_code = ErrorCode.BRIDGE_TARGET_MISSING
    default_message = "Compatibility bridge could not resolve the replacement API"
    default_suggestions = [
        "Check the new_api path of the mapping against the wrapped client",
        "Dotted paths are resolved from the root object passed to with_compatibility()",
    ]


class MetadataError(SonarQubeClientError):
    """Deprecation metadata or usage input is malformed."""

    error_code = ErrorCode.INVALID_METADATA
    default_message = "Invalid deprecation metadata"
    default_suggestions = [
        "Every entry needs api, deprecatedSince, removalDate and reason",
        "Usage records need api, file, line, column and code",
    ]


class ConfigurationError(SonarQubeClientError):
    """Deprecation policy configuration is invalid."""

    error_code = ErrorCode.INVALID_OPTION
    default_message = "Invalid deprecation configuration"
    default_suggestions = [
        "Valid options: suppress_deprecation_warnings, strict_mode, "
        "migration_mode, on_deprecation_warning",
    ]
