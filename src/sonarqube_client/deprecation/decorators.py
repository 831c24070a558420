"""Decorators for marking methods, classes and parameters as deprecated.

Each decorator is a thin layer over a ``wrap_*`` builder, so the same
wrapping can be applied without decorator syntax (for example when
deprecating methods of a generated client at import time).

Example:
    >>> class UsersClient:
    ...     @deprecated_method(
    ...         deprecated_since="10.8",
    ...         removal_date="2025-08-13",
    ...         replacement="search_v2()",
    ...         reason="SonarQube API v1 endpoint deprecated since 10.8",
    ...     )
    ...     def search(self, **params):
    ...         ...
"""

from __future__ import annotations

import dataclasses
import functools
import logging
import warnings
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, TypeVar

from sonarqube_client.deprecation.ledger import DeprecationContext, WarningLedger
from sonarqube_client.deprecation.metadata import DeprecationMetadata, MetadataRegistry
from sonarqube_client.deprecation.services import get_ledger, get_registry

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)


def _method_api(receiver: Any, func: Callable[..., Any]) -> str:
    return f"{type(receiver).__name__}.{func.__name__}()"


def _template(placeholder_api: str, metadata: dict[str, Any]) -> DeprecationMetadata:
    """Validate decorator metadata once, at decoration time."""
    return DeprecationMetadata.from_dict({**metadata, "api": placeholder_api})


def _context_for(metadata: DeprecationMetadata) -> DeprecationContext:
    return DeprecationContext(
        api=metadata.api,
        replacement=metadata.replacement or None,
        remove_version=metadata.removal_date,
        migration_guide=metadata.migration_guide or None,
        reason=metadata.reason,
    )


def _check_removal_date(metadata: DeprecationMetadata) -> None:
    removal = metadata.removal_datetime
    if removal is not None and datetime.now(timezone.utc) >= removal:
        logger.error(
            "❌ CRITICAL: %s was scheduled for removal on %s and should no longer be used!",
            metadata.api,
            metadata.removal_date,
        )


def _show_migration_example(metadata: DeprecationMetadata) -> None:
    if not metadata.examples:
        return

    example = metadata.examples[0]
    logger.info("\n📝 Migration Example:")
    logger.info("Before: %s", example.before)
    logger.info("After: %s", example.after)
    if example.description:
        logger.info("Note: %s", example.description)


def wrap_deprecated_method(
    func: F,
    *,
    ledger: WarningLedger | None = None,
    registry: MetadataRegistry | None = None,
    **metadata: Any,
) -> F:
    """Wrap a method so each call reports its deprecation.

    The API identifier is ``ClassName.method()`` using the runtime class of
    the receiver. Metadata is registered on the first call unless the
    registry already has an entry for that identifier.
    """
    template = _template(func.__qualname__ + "()", metadata)

    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        api = _method_api(self, func)
        active_registry = registry if registry is not None else get_registry()

        entry = active_registry.get(api)
        if entry is None:
            entry = active_registry.register(dataclasses.replace(template, api=api))

        _check_removal_date(entry)
        (ledger if ledger is not None else get_ledger()).warn(_context_for(entry))
        _show_migration_example(entry)

        return func(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def deprecated_method(
    *,
    ledger: WarningLedger | None = None,
    registry: MetadataRegistry | None = None,
    **metadata: Any,
) -> Callable[[F], F]:
    """Mark a method as deprecated, with full migration metadata.

    Args:
        ledger: Ledger to warn through (defaults to the global one).
        registry: Registry to record metadata in (defaults to the global one).
        **metadata: DeprecationMetadata fields other than ``api``
            (``deprecated_since``, ``removal_date`` and ``reason`` are required).
    """

    def decorator(func: F) -> F:
        return wrap_deprecated_method(func, ledger=ledger, registry=registry, **metadata)

    return decorator


def wrap_deprecated_class(
    cls: C,
    *,
    ledger: WarningLedger | None = None,
    registry: MetadataRegistry | None = None,
    **metadata: Any,
) -> C:
    """Register ``cls`` as deprecated and warn whenever it is instantiated.

    The class object itself is returned; only its ``__init__`` is wrapped.
    """
    entry = dataclasses.replace(_template(cls.__name__, metadata), api=cls.__name__)
    (registry if registry is not None else get_registry()).register(entry)

    original_init = cls.__init__
    # object.__init__ rejects the arguments a custom __new__ already consumed
    init_takes_args = original_init is not object.__init__ or cls.__new__ is object.__new__

    @functools.wraps(original_init)
    def __init__(self: Any, *args: Any, **kwargs: Any) -> None:
        (ledger if ledger is not None else get_ledger()).warn(_context_for(entry))
        if init_takes_args:
            original_init(self, *args, **kwargs)
        else:
            original_init(self)

    cls.__init__ = __init__  # type: ignore[misc]
    return cls


def deprecated_class(
    *,
    ledger: WarningLedger | None = None,
    registry: MetadataRegistry | None = None,
    **metadata: Any,
) -> Callable[[C], C]:
    """Mark a whole class as deprecated."""

    def decorator(cls: C) -> C:
        return wrap_deprecated_class(cls, ledger=ledger, registry=registry, **metadata)

    return decorator


def wrap_deprecated_parameter(
    func: F,
    index: int,
    name: str,
    reason: str | None = None,
    replacement: str | None = None,
) -> F:
    """Wrap a method so passing a given parameter issues a DeprecationWarning.

    ``index`` counts positional arguments after ``self``. The parameter also
    counts as passed when given by keyword. These warnings do not go through
    the ledger; whether repeats are shown is up to the active warning filters.
    """

    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
        if len(args) > index or name in kwargs:
            message = f"⚠️  Parameter '{name}' in {_method_api(self, func)} is deprecated. {reason or ''}"
            if replacement:
                message += f"\n   Use '{replacement}' instead."
            warnings.warn(message, DeprecationWarning, stacklevel=2)

        return func(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def deprecated_parameter(
    index: int,
    name: str,
    reason: str | None = None,
    replacement: str | None = None,
) -> Callable[[F], F]:
    """Mark one parameter of a method as deprecated."""

    def decorator(func: F) -> F:
        return wrap_deprecated_parameter(func, index, name, reason=reason, replacement=replacement)

    return decorator


def deprecated(
    replacement: str | None = None,
    remove_version: str | None = None,
    migration_guide: str | None = None,
    reason: str | None = None,
    *,
    ledger: WarningLedger | None = None,
) -> Callable[[F], F]:
    """Lightweight method deprecation: warn through the ledger, no metadata."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: Any, *args: Any, **kwargs: Any) -> Any:
            (ledger if ledger is not None else get_ledger()).warn(
                DeprecationContext(
                    api=_method_api(self, func),
                    replacement=replacement,
                    remove_version=remove_version,
                    migration_guide=migration_guide,
                    reason=reason,
                )
            )
            return func(self, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
