"""Compatibility bridge that redirects deprecated API calls to their replacements.

A mapping ties an old dotted API path (``users.search``) to a new one
(``users.searchV2``), optionally with an argument transformer and a result
transformer. ``create_proxy()`` wraps a client object graph so that reading
a mapped member returns a forwarding function, while every other member
behaves exactly as on the original object.

Example:
    >>> bridge = InterceptionBridge(WarningLedger())
    >>> client = bridge.with_compatibility(client, [
    ...     ApiMapping(old_api="users.search", new_api="users.searchV2",
    ...                transformer=lambda p: {"pageSize": p["ps"]}),
    ... ])
    >>> client.users.search({"ps": 10})  # calls client.users.searchV2({"pageSize": 10})
"""

from __future__ import annotations

import inspect
import logging
import numbers
import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, time, timedelta
from enum import Enum
from pathlib import PurePath
from typing import Any, TypeVar
from uuid import UUID

from sonarqube_client.deprecation.ledger import DeprecationContext, WarningLedger
from sonarqube_client.errors import CompatibilityBridgeError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

T = TypeVar("T")

SUPERSEDED_REASON = "This API has been superseded by a new version"

# Values that are returned as-is instead of being wrapped
_PASSTHROUGH_TYPES = (
    str,
    bytes,
    bytearray,
    memoryview,
    numbers.Number,
    list,
    tuple,
    set,
    frozenset,
    range,
    date,
    time,
    timedelta,
    PurePath,
    UUID,
    re.Pattern,
    type(None),
)


@dataclass
class ApiMapping:
    """Association between a deprecated API path and its replacement.

    Attributes:
        old_api: Dotted path of the deprecated member, e.g. ``users.search``.
        new_api: Dotted path of the replacement, resolved from the root object.
        transformer: Converts the first old argument into the single new argument.
        result_transformer: Converts the replacement's result (or its awaited value).
    """

    old_api: str
    new_api: str
    transformer: Callable[[Any], Any] | None = None
    result_transformer: Callable[[Any], Any] | None = None


def _is_structured(value: Any) -> bool:
    """Whether a member value gets its own nested proxy.

    Any object that is not a plain value, a callable, a class or an enum
    member counts, whether it keeps its state in ``__dict__`` or in slots.
    """
    if isinstance(value, _PASSTHROUGH_TYPES):
        return False
    if isinstance(value, Mapping):
        return True
    return not (callable(value) or isinstance(value, (type, Enum)))


def _read_member(obj: Any, name: str) -> Any:
    """Read a member by attribute, falling back to mapping keys."""
    if isinstance(obj, Mapping) and name in obj:
        return obj[name]
    return getattr(obj, name)


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


class CompatibilityProxy:
    """Wrapper around one node of a client object graph.

    Members are resolved on every read, so mappings registered after the
    proxy was created still apply.
    """

    __slots__ = ("_cp_target", "_cp_prefix", "_cp_root", "_cp_bridge")

    def __init__(self, target: Any, prefix: str, root: Any, bridge: InterceptionBridge) -> None:
        object.__setattr__(self, "_cp_target", target)
        object.__setattr__(self, "_cp_prefix", prefix)
        object.__setattr__(self, "_cp_root", root)
        object.__setattr__(self, "_cp_bridge", bridge)

    def _cp_resolve(self, name: str, value: Any) -> Any:
        full_name = _join(self._cp_prefix, name)

        if callable(value):
            forwarder = self._cp_bridge.lookup(full_name, self._cp_root)
            if forwarder is not None:
                return forwarder

        if _is_structured(value):
            return CompatibilityProxy(value, full_name, self._cp_root, self._cp_bridge)

        return value

    def __getattr__(self, name: str) -> Any:
        value = _read_member(self._cp_target, name)
        return self._cp_resolve(name, value)

    def __getitem__(self, key: Any) -> Any:
        value = self._cp_target[key]
        if isinstance(key, str):
            return self._cp_resolve(key, value)
        return value

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._cp_target, name, value)

    def __delattr__(self, name: str) -> None:
        delattr(self._cp_target, name)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._cp_target[key] = value

    def __delitem__(self, key: Any) -> None:
        del self._cp_target[key]

    def __iter__(self):
        return iter(self._cp_target)

    def __len__(self) -> int:
        return len(self._cp_target)

    def __contains__(self, item: Any) -> bool:
        return item in self._cp_target

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, CompatibilityProxy):
            other = other._cp_target
        return self._cp_target == other

    def __hash__(self) -> int:
        return hash(self._cp_target)

    def __bool__(self) -> bool:
        return bool(self._cp_target)

    def __dir__(self) -> list[str]:
        return dir(self._cp_target)

    def __repr__(self) -> str:
        return repr(self._cp_target)

    @property
    def __class__(self):  # type: ignore[override]
        return type(self._cp_target)

    @property
    def __wrapped__(self) -> Any:
        return self._cp_target


class InterceptionBridge:
    """Registry of API mappings plus the proxy machinery that applies them."""

    def __init__(self, ledger: WarningLedger) -> None:
        self._ledger = ledger
        self._mappings: dict[str, ApiMapping] = {}

    @property
    def mappings(self) -> list[ApiMapping]:
        return list(self._mappings.values())

    def register(self, mapping: ApiMapping | None = None, /, **fields: Any) -> ApiMapping:
        """Register (or replace) a mapping, keyed by its old API path."""
        if mapping is None:
            mapping = ApiMapping(**fields)
        self._mappings[mapping.old_api] = mapping
        logger.debug("Registered compatibility mapping %s -> %s", mapping.old_api, mapping.new_api)
        return mapping

    def get_mapping(self, old_api: str) -> ApiMapping | None:
        return self._mappings.get(old_api)

    def clear(self) -> None:
        self._mappings.clear()

    def lookup(self, path: str, root: Any) -> Callable[..., Any] | None:
        """Return a forwarding function for ``path``, or None if it is not mapped."""
        mapping = self._mappings.get(path)
        if mapping is None:
            return None
        return self._make_forwarder(mapping, root)

    def create_proxy(self, target: T, prefix: str = "", root: Any = None) -> T:
        """Wrap ``target`` so that mapped members redirect to their replacements."""
        if root is None:
            root = target
        return CompatibilityProxy(target, prefix, root, self)  # type: ignore[return-value]

    def with_compatibility(self, client: T, mappings: Iterable[ApiMapping] | None = None) -> T:
        """Register mappings and return the wrapped client.

        With no mappings given, the built-in Users API v1 -> v2 mappings are used.
        """
        if mappings is None:
            from sonarqube_client.deprecation.mappings import USERS_V1_TO_V2_MAPPINGS

            mappings = USERS_V1_TO_V2_MAPPINGS

        for mapping in mappings:
            self.register(mapping)

        return self.create_proxy(client)

    def _make_forwarder(self, mapping: ApiMapping, root: Any) -> Callable[..., Any]:
        ledger = self._ledger

        def forward(*args: Any, **kwargs: Any) -> Any:
            ledger.warn(
                DeprecationContext(
                    api=mapping.old_api,
                    replacement=mapping.new_api,
                    reason=SUPERSEDED_REASON,
                )
            )

            if mapping.transformer is not None:
                args = (mapping.transformer(args[0] if args else None),)
                kwargs = {}

            replacement = resolve_path(root, mapping.new_api)
            result = replacement(*args, **kwargs)

            if mapping.result_transformer is not None:
                return _transform_result(result, mapping.result_transformer)
            return result

        forward.__name__ = mapping.old_api.rsplit(".", 1)[-1]
        forward.__qualname__ = mapping.old_api
        forward.__doc__ = f"Deprecated: forwards to {mapping.new_api}."
        return forward


def resolve_path(root: Any, path: str) -> Callable[..., Any]:
    """Walk a dotted path from ``root`` and return the callable at its end.

    Raises:
        CompatibilityBridgeError: If a segment is missing or the final value
            is not callable.
    """
    current = root
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                break
            current = current[part]
        elif hasattr(current, part):
            current = getattr(current, part)
        else:
            break
    else:
        if callable(current):
            return current
        raise CompatibilityBridgeError(
            f"Compatibility bridge error: New API '{path}' is not callable",
            error_code=ErrorCode.BRIDGE_TARGET_NOT_CALLABLE,
            context=ErrorContext(api=path),
        )

    raise CompatibilityBridgeError(
        f"Compatibility bridge error: New API '{path}' not found",
        context=ErrorContext(api=path),
        missing_segment=part,
    )


def _transform_result(result: Any, transformer: Callable[[Any], Any]) -> Any:
    if inspect.isawaitable(result):

        async def transformed() -> Any:
            return transformer(await result)

        return transformed()

    return transformer(result)


def with_compatibility(client: T, mappings: Iterable[ApiMapping] | None = None) -> T:
    """Apply the default bridge service to ``client``."""
    from sonarqube_client.deprecation.services import get_bridge

    return get_bridge().with_compatibility(client, mappings)
