"""Migration analysis over externally collected usage records.

A scanner (outside this package) reports where deprecated APIs are called.
The analyzer matches those records against the metadata registry, builds
per-call-site suggestions, estimates the effort and renders a markdown
migration guide.

Example:
    >>> analyzer = MigrationAnalyzer(registry)
    >>> report = analyzer.analyze_usage([
    ...     UsageRecord(api="users.search()", file="app.py", line=12, column=4,
    ...                 code="client.users.search()"),
    ... ])
    >>> report.estimated_effort
    'Low (< 1 hour)'
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from sonarqube_client.deprecation.metadata import (
    DeprecationMetadata,
    MetadataRegistry,
    MigrationExample,
    group_by_removal_date,
    parse_removal_date,
)
from sonarqube_client.errors import ErrorCode, MetadataError

logger = logging.getLogger(__name__)

URGENT_WINDOW_DAYS = 30

# (upper bound inclusive, label)
EFFORT_BANDS = [
    (0, "No migration needed"),
    (10, "Low (< 1 hour)"),
    (50, "Medium (1-4 hours)"),
    (200, "High (1-2 days)"),
]
EFFORT_MAX = "Very High (> 2 days)"


@dataclass
class UsageRecord:
    """One call site of a deprecated API, as found by a scanner."""

    api: str
    file: str
    line: int
    column: int
    code: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UsageRecord:
        try:
            return cls(
                api=str(data["api"]),
                file=str(data["file"]),
                line=int(data["line"]),
                column=int(data["column"]),
                code=str(data["code"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MetadataError(
                f"Invalid usage record {data!r}: {e}",
                error_code=ErrorCode.INVALID_USAGE_RECORD,
                cause=e,
            ) from e


@dataclass
class MigrationSuggestion:
    file: str
    line: int
    column: int
    deprecated_api: str
    suggestion: str
    example: MigrationExample | None = None
    automatic_fix: str | None = None


@dataclass
class MigrationReport:
    total_deprecations: int
    by_api: dict[str, int] = field(default_factory=dict)
    suggestions: list[MigrationSuggestion] = field(default_factory=list)
    estimated_effort: str = "No migration needed"


def estimate_effort(count: int) -> str:
    """Map a number of call sites to an effort band."""
    for upper, label in EFFORT_BANDS:
        if count <= upper:
            return label
    return EFFORT_MAX


def api_pattern(api: str) -> re.Pattern[str]:
    """Regex matching an API identifier inside source code.

    An identifier written as a call (``users.search()``) matches the call's
    opening parenthesis, with optional whitespace before it.
    """
    if api.endswith("()"):
        return re.compile(re.escape(api[:-2]) + r"\s*\(")
    return re.compile(re.escape(api))


def generate_automatic_fix(code: str, old_api: str, new_api: str) -> str:
    """Substitute ``old_api`` with ``new_api`` everywhere in ``code``."""
    if old_api.endswith("()"):
        new_name = new_api[:-2] if new_api.endswith("()") else new_api
        replacement = new_name + "("
    else:
        replacement = new_api
    return api_pattern(old_api).sub(lambda _: replacement, code)


def days_until_removal(removal_date: str, now: datetime | None = None) -> int | None:
    """Whole days (rounded up) until ``removal_date``; None if it is not a date."""
    removal = parse_removal_date(removal_date)
    if removal is None:
        return None
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return math.ceil((removal - now).total_seconds() / 86400)


class MigrationAnalyzer:
    """Turns usage records and registry metadata into migration reports."""

    def __init__(self, registry: MetadataRegistry) -> None:
        self._registry = registry

    def analyze_usage(self, usage: Iterable[UsageRecord | Mapping[str, Any]]) -> MigrationReport:
        """Build a report for every record whose API has registered metadata.

        Records for APIs the registry does not know are skipped silently.
        """
        suggestions: list[MigrationSuggestion] = []
        api_counts: dict[str, int] = {}

        for record in usage:
            if not isinstance(record, UsageRecord):
                record = UsageRecord.from_dict(record)

            metadata = self._registry.get(record.api)
            if metadata is None:
                continue

            api_counts[record.api] = api_counts.get(record.api, 0) + 1
            suggestions.append(self._create_suggestion(record, metadata))

        logger.debug("Matched %d deprecated call site(s) across %d API(s)", len(suggestions), len(api_counts))

        return MigrationReport(
            total_deprecations=len(suggestions),
            by_api=api_counts,
            suggestions=suggestions,
            estimated_effort=estimate_effort(len(suggestions)),
        )

    def _create_suggestion(self, record: UsageRecord, metadata: DeprecationMetadata) -> MigrationSuggestion:
        suggestion = MigrationSuggestion(
            file=record.file,
            line=record.line,
            column=record.column,
            deprecated_api=record.api,
            suggestion=self._describe(metadata),
        )

        if metadata.examples:
            suggestion.example = metadata.examples[0]

        if metadata.automatic_migration and metadata.replacement:
            suggestion.automatic_fix = generate_automatic_fix(record.code, record.api, metadata.replacement)

        return suggestion

    @staticmethod
    def _describe(metadata: DeprecationMetadata) -> str:
        text = f"Replace '{metadata.api}' with '{metadata.replacement or 'newer API'}'."

        if metadata.reason:
            text += f" Reason: {metadata.reason}"

        if metadata.breaking_changes:
            text += f" Note: This migration includes breaking changes: {', '.join(metadata.breaking_changes)}"

        return text

    def find_urgent(self, now: datetime | None = None) -> list[DeprecationMetadata]:
        """Entries due for removal within the next 1-30 days."""
        urgent = []
        for entry in self._registry.get_all():
            days = days_until_removal(entry.removal_date, now)
            if days is not None and 0 < days <= URGENT_WINDOW_DAYS:
                urgent.append(entry)
        return urgent

    def generate_migration_guide(self, now: datetime | None = None) -> str:
        """Render a markdown guide covering every registered deprecation."""
        guide = "# API Migration Guide\n\n"
        guide += "This guide helps you migrate from deprecated APIs to their replacements.\n\n"

        guide += self._urgency_section(now)

        guide += "## Migration Instructions\n\n"
        for removal_date, entries in group_by_removal_date(self._registry.get_all()):
            guide += f"### APIs to be removed on {removal_date}\n\n"
            for entry in entries:
                guide += self._api_section(entry)

        return guide

    def _urgency_section(self, now: datetime | None) -> str:
        urgent = self.find_urgent(now)
        if not urgent:
            return ""

        section = "## ⚠️ Urgent Migrations\n\n"
        section += f"These APIs will be removed within {URGENT_WINDOW_DAYS} days:\n\n"
        for entry in urgent:
            days = days_until_removal(entry.removal_date, now)
            section += f"- **{entry.api}** - {days} days remaining\n"
        section += "\n"
        return section

    def _api_section(self, entry: DeprecationMetadata) -> str:
        section = f"#### {entry.api}\n\n"
        section += f"**Deprecated since:** {entry.deprecated_since}\n\n"
        section += f"**Reason:** {entry.reason}\n\n"

        if entry.replacement:
            section += f"**Replacement:** `{entry.replacement}`\n\n"

        if entry.breaking_changes:
            section += "**Breaking Changes:**\n"
            for change in entry.breaking_changes:
                section += f"- {change}\n"
            section += "\n"

        if entry.examples:
            section += "**Examples:**\n\n"
            for number, example in enumerate(entry.examples, start=1):
                section += _format_example(example, number)

        if entry.migration_guide:
            section += f"📖 [Full Migration Guide]({entry.migration_guide})\n\n"

        section += "---\n\n"
        return section


def _format_example(example: MigrationExample, number: int) -> str:
    title = f"Example {number}"
    if example.description:
        title += f": {example.description}"
    before = f"Before:\n```python\n{example.before}\n```"
    after = f"After:\n```python\n{example.after}\n```"
    return f"{title}\n\n{before}\n\n{after}\n\n"
