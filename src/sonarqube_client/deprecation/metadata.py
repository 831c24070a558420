"""Structured deprecation metadata for tooling.

The registry stores one DeprecationMetadata entry per API identifier and
answers the questions migration tooling asks: what is tagged ``security``,
what goes away before a given date, and in which order removals happen.

Example:
    >>> registry = MetadataRegistry()
    >>> registry.register(DeprecationMetadata(
    ...     api="users.search()",
    ...     deprecated_since="10.8",
    ...     removal_date="2025-08-13",
    ...     reason="SonarQube API v1 endpoint deprecated since 10.8",
    ...     replacement="users.searchV2()",
    ... ))
    >>> print(registry.generate_report())
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import date, datetime, time, timezone
from typing import Any

from sonarqube_client.errors import ErrorCode, MetadataError

logger = logging.getLogger(__name__)


def parse_removal_date(value: str | date | datetime | None) -> datetime | None:
    """Parse a removal date into an aware UTC datetime.

    Accepts ISO-8601 dates and date-times (a trailing ``Z`` is allowed).
    Values without an offset are taken as UTC. Returns None for anything
    that is not a date, such as ``"TBD"``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if not text:
            return None
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class MigrationExample:
    """A before/after snippet showing how to migrate."""

    before: str
    after: str
    description: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {"before": self.before, "after": self.after}
        if self.description is not None:
            result["description"] = self.description
        return result


@dataclass
class DeprecationMetadata:
    """Everything known about one deprecated API.

    Attributes:
        api: The deprecated API identifier.
        deprecated_since: Version in which the API was deprecated.
        removal_date: When the API will be removed (date string).
        reason: Why the API was deprecated.
        replacement: The replacement API.
        examples: Ordered migration examples.
        breaking_changes: Breaking changes between old and new API.
        tags: Tags for categorization.
        migration_guide: Link to the full migration guide.
        automatic_migration: Whether a textual substitution is a safe fix.
    """

    api: str
    deprecated_since: str
    removal_date: str
    reason: str
    replacement: str | None = None
    examples: list[MigrationExample] = field(default_factory=list)
    breaking_changes: list[str] = field(default_factory=list)
    tags: list[str] | None = None
    migration_guide: str | None = None
    automatic_migration: bool = False

    # camelCase names used by the exported JSON and metadata files
    _ALIASES = {
        "deprecatedSince": "deprecated_since",
        "removalDate": "removal_date",
        "breakingChanges": "breaking_changes",
        "migrationGuide": "migration_guide",
        "automaticMigration": "automatic_migration",
    }

    @property
    def removal_datetime(self) -> datetime | None:
        return parse_removal_date(self.removal_date)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DeprecationMetadata:
        """Build metadata from a mapping using snake_case or camelCase keys.

        Raises:
            MetadataError: If a required field is missing or a key is unknown.
        """
        values = {cls._ALIASES.get(key, key): value for key, value in data.items()}

        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise MetadataError(
                f"Unknown metadata field(s): {', '.join(sorted(unknown))}",
                api=values.get("api"),
            )

        missing = [name for name in ("api", "deprecated_since", "removal_date", "reason") if not values.get(name)]
        if missing:
            raise MetadataError(
                f"Missing required metadata field(s): {', '.join(missing)}",
                error_code=ErrorCode.INVALID_METADATA,
                api=values.get("api"),
            )

        values["examples"] = [
            ex if isinstance(ex, MigrationExample) else MigrationExample(**ex)
            for ex in values.get("examples") or []
        ]
        values["breaking_changes"] = list(values.get("breaking_changes") or [])
        if values.get("tags") is not None:
            values["tags"] = list(values["tags"])
        values["automatic_migration"] = bool(values.get("automatic_migration", False))
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase keys consumed by external tooling."""
        result: dict[str, Any] = {
            "api": self.api,
            "deprecatedSince": self.deprecated_since,
            "removalDate": self.removal_date,
            "reason": self.reason,
        }
        if self.replacement is not None:
            result["replacement"] = self.replacement
        if self.examples:
            result["examples"] = [ex.to_dict() for ex in self.examples]
        if self.breaking_changes:
            result["breakingChanges"] = list(self.breaking_changes)
        if self.tags is not None:
            result["tags"] = list(self.tags)
        if self.migration_guide is not None:
            result["migrationGuide"] = self.migration_guide
        if self.automatic_migration:
            result["automaticMigration"] = True
        return result


def _date_sort_key(removal_date: str) -> tuple[bool, datetime]:
    parsed = parse_removal_date(removal_date)
    return (parsed is None, parsed or datetime.min.replace(tzinfo=timezone.utc))


def group_by_removal_date(entries: list[DeprecationMetadata]) -> list[tuple[str, list[DeprecationMetadata]]]:
    """Group entries by their exact removal date string.

    Groups are ordered by ascending parsed date; groups whose date cannot be
    parsed come last, in first-seen order. No normalization happens, so
    ``2025-01-01`` and ``2025-01-01T00:00:00Z`` form separate groups.
    """
    grouped: dict[str, list[DeprecationMetadata]] = {}
    for entry in entries:
        grouped.setdefault(entry.removal_date, []).append(entry)
    return sorted(grouped.items(), key=lambda item: _date_sort_key(item[0]))


class MetadataRegistry:
    """Keyed store of deprecation metadata, last registration wins."""

    def __init__(self) -> None:
        self._metadata: dict[str, DeprecationMetadata] = {}

    def register(self, metadata: DeprecationMetadata | Mapping[str, Any]) -> DeprecationMetadata:
        """Register (or replace) the metadata for an API."""
        if not isinstance(metadata, DeprecationMetadata):
            metadata = DeprecationMetadata.from_dict(metadata)
        self._metadata[metadata.api] = metadata
        logger.debug("Registered deprecation metadata for %s", metadata.api)
        return metadata

    def get(self, api: str) -> DeprecationMetadata | None:
        return self._metadata.get(api)

    def get_all(self) -> list[DeprecationMetadata]:
        return list(self._metadata.values())

    def get_by_tag(self, tag: str) -> list[DeprecationMetadata]:
        """Entries carrying exactly this tag (case-sensitive)."""
        return [m for m in self._metadata.values() if m.tags and tag in m.tags]

    def get_by_removal_date(self, before: str | date | datetime) -> list[DeprecationMetadata]:
        """Entries scheduled for removal on or before ``before``."""
        cutoff = parse_removal_date(before)
        if cutoff is None:
            raise MetadataError(f"Invalid cutoff date: {before!r}")

        result = []
        for entry in self._metadata.values():
            removal = entry.removal_datetime
            if removal is not None and removal <= cutoff:
                result.append(entry)
        return result

    def get_timeline(self) -> list[DeprecationMetadata]:
        """Entries with a valid removal date, soonest first."""
        dated = [m for m in self._metadata.values() if m.removal_datetime is not None]
        return sorted(dated, key=lambda m: m.removal_datetime)

    def export(self) -> str:
        """Serialize all entries as a JSON array."""
        return json.dumps([m.to_dict() for m in self._metadata.values()])

    def generate_report(self) -> str:
        """Render a markdown timeline of scheduled removals."""
        report = "# Deprecation Timeline\n\n"

        for removal_date, items in group_by_removal_date(self.get_all()):
            report += f"## Removals scheduled for {removal_date}\n\n"
            for item in items:
                report += f"### {item.api}\n"
                report += f"- **Deprecated since:** {item.deprecated_since}\n"
                report += f"- **Reason:** {item.reason}\n"
                if item.replacement:
                    report += f"- **Replacement:** {item.replacement}\n"
                if item.migration_guide:
                    report += f"- **Migration guide:** {item.migration_guide}\n"
                report += "\n"

        return report

    def clear(self) -> None:
        self._metadata.clear()

    def __len__(self) -> int:
        return len(self._metadata)

    def __contains__(self, api: object) -> bool:
        return api in self._metadata
