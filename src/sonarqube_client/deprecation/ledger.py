"""Deprecation warnings with per-API de-duplication.

The ledger remembers every API identifier it has been asked to warn about
and shows each one at most once until ``clear_warnings()`` is called.
Warnings are issued as ``DeprecationWarning`` through the warnings module,
so the usual filters (``-W error``, ``pytest.deprecated_call()``) apply.
Whether a warning is shown at all, raised, or handed to a custom callback
is controlled by ``DeprecationOptions``.

Example:
    >>> ledger = WarningLedger()
    >>> ledger.configure(migration_mode=True)
    >>> ledger.warn(DeprecationContext(api="users.search()", replacement="users.searchV2()"))
"""

from __future__ import annotations

import dataclasses
import logging
import warnings
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sonarqube_client.errors import ConfigurationError, DeprecatedApiError, ErrorContext

logger = logging.getLogger("sonarqube_client.deprecation")

BANNER = "🚨 DEPRECATED API USAGE"
RULE = "━" * 51
MIGRATE_COMMAND = "sonarqube-client-migrate"


@dataclass
class DeprecationContext:
    """Details about one deprecated API call.

    Attributes:
        api: The deprecated API being called.
        replacement: Recommended replacement API.
        remove_version: Version (or date) in which the API will be removed.
        migration_guide: Link to a migration guide.
        reason: Why the API was deprecated.
    """

    api: str
    replacement: str | None = None
    remove_version: str | None = None
    migration_guide: str | None = None
    reason: str | None = None


@dataclass
class DeprecationOptions:
    """Policy applied by WarningLedger.warn()."""

    suppress_deprecation_warnings: bool = False
    strict_mode: bool = False
    migration_mode: bool = False
    on_deprecation_warning: Callable[[DeprecationContext], None] | None = None


_OPTION_NAMES = frozenset(f.name for f in dataclasses.fields(DeprecationOptions))


class WarningLedger:
    """Emits deprecation warnings, at most once per API identifier."""

    def __init__(self, options: DeprecationOptions | None = None) -> None:
        self._warned: dict[str, None] = {}
        self._options = options or DeprecationOptions()

    @property
    def options(self) -> DeprecationOptions:
        return self._options

    def configure(self, options: Any = None, /, **overrides: Any) -> None:
        """Update the current configuration.

        A DeprecationOptions instance replaces every option, including the
        custom handler. A mapping, any object exposing a ``ledger_options()``
        method (such as DeprecationSettings), or keyword arguments change
        only the names they carry.
        """
        updates: dict[str, Any] = {}
        if isinstance(options, DeprecationOptions):
            updates.update({name: getattr(options, name) for name in _OPTION_NAMES})
        elif hasattr(options, "ledger_options"):
            updates.update(options.ledger_options())
        elif options is not None:
            updates.update(dict(options))
        updates.update(overrides)

        unknown = set(updates) - _OPTION_NAMES
        if unknown:
            raise ConfigurationError(
                f"Unknown deprecation option(s): {', '.join(sorted(unknown))}",
                options=sorted(unknown),
            )

        self._options = dataclasses.replace(self._options, **updates)
        logger.debug("Deprecation options updated: %s", sorted(updates))

    def warn(self, context: DeprecationContext, stacklevel: int = 2) -> None:
        """Warn about usage of a deprecated API.

        The API is recorded even when the warning is suppressed, so turning
        suppression off later does not resurface it. The default output is a
        ``DeprecationWarning``; ``stacklevel`` is passed to ``warnings.warn``
        and counts from the caller of this method.

        Raises:
            DeprecatedApiError: In strict mode, instead of warning.
        """
        key = context.api
        already_warned = key in self._warned
        if not already_warned:
            self._warned[key] = None

        if already_warned or self._options.suppress_deprecation_warnings:
            return

        if self._options.on_deprecation_warning is not None:
            self._options.on_deprecation_warning(context)
            return

        message = self.format_message(context)

        if self._options.strict_mode:
            raise DeprecatedApiError(message, context=ErrorContext(api=context.api))

        warnings.warn(message, DeprecationWarning, stacklevel=stacklevel + 1)

    def clear_warnings(self) -> None:
        """Forget which APIs have been warned about. Options are kept."""
        self._warned.clear()

    def get_warned_apis(self) -> list[str]:
        return list(self._warned)

    def has_warned(self, api: str) -> bool:
        return api in self._warned

    def format_message(self, context: DeprecationContext) -> str:
        """Render the multi-line warning block for a context."""
        lines = [BANNER, RULE, f"API: {context.api}"]

        if context.reason:
            lines.append(f"Reason: {context.reason}")
        if context.replacement:
            lines.append(f"Replacement: {context.replacement}")
        if context.remove_version:
            lines.append(f"⚠️  Will be removed in: {context.remove_version}")
        if context.migration_guide:
            lines.append(f"📖 Migration guide: {context.migration_guide}")

        if self._options.migration_mode:
            lines.append("")
            lines.append(f"💡 Run `{MIGRATE_COMMAND}` to automatically fix this usage")

        lines.append(RULE)
        return "\n".join(lines)
