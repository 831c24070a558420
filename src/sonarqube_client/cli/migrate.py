"""Migration tool for deprecated SonarQube client API usage.

Usage records come from an external scanner as a JSON or YAML list of
``{api, file, line, column, code}`` objects.

Usage:
    sonarqube-client-migrate --usage usage.json --dry-run
    sonarqube-client-migrate --usage usage.yaml --report --no-interactive
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table

from sonarqube_client.config import DeprecationSettings, load_config
from sonarqube_client.deprecation import (
    MetadataRegistry,
    MigrationAnalyzer,
    MigrationReport,
    MigrationSuggestion,
    UsageRecord,
    days_until_removal,
    get_analyzer,
    get_ledger,
    get_registry,
    register_builtin_deprecations,
)
from sonarqube_client.errors import ErrorCode, MetadataError, SonarQubeClientError

logger = logging.getLogger(__name__)

console = Console()

PREVIEW_LIMIT = 3


def setup_logging(verbose: bool, level: str = "INFO") -> None:
    """Configure logging based on verbosity level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_records(path: str | Path) -> list[dict[str, Any]]:
    """Read a JSON or YAML list from ``path``.

    Raises:
        MetadataError: If the file does not contain a list.
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)

    if data is None:
        return []
    if not isinstance(data, list):
        raise MetadataError(
            f"{path} must contain a list of records",
            error_code=ErrorCode.INVALID_USAGE_RECORD,
            path=str(path),
        )
    return data


def _indent(text: str, prefix: str = "  ") -> str:
    return prefix + text.replace("\n", "\n" + prefix)


@dataclass
class MigrationOptions:
    project_path: Path
    dry_run: bool = False
    interactive: bool = True
    generate_report: bool = False
    target_version: str | None = None
    usage_file: Path | None = None
    report_filename: str = "migration-report.md"


class MigrationCLI:
    """Drives one migration run: analyze, report, preview or apply."""

    def __init__(
        self,
        options: MigrationOptions,
        registry: MetadataRegistry | None = None,
        analyzer: MigrationAnalyzer | None = None,
        output: Console | None = None,
    ) -> None:
        self.options = options
        self.registry = registry if registry is not None else get_registry()
        self.analyzer = analyzer if analyzer is not None else get_analyzer()
        self.console = output or console

    def run(self) -> MigrationReport | None:
        self.console.print("[bold blue]🔄 SonarQube Client Migration Tool[/bold blue]\n")
        if self.options.target_version:
            self.console.print(f"Target version: {self.options.target_version}")

        usage = self.scan_project()
        if not usage:
            self.console.print("[green]✅ No deprecated APIs found! Your code is up to date.[/green]")
            return None

        report = self.analyzer.analyze_usage(usage)
        self.display_summary(report)

        if self.options.generate_report:
            self.write_report()

        if self.options.dry_run:
            self.console.print("\n🔍 Dry run mode - no changes will be made.")
            self.show_preview(report)
        elif not self.options.interactive or click.confirm("\n🤔 Apply automatic migrations?", default=False):
            self.console.print("\n🔧 Applying migrations...")
            self.apply_migrations(report, usage)
            self.console.print("[green]✅ Migrations complete![/green]")
        else:
            self.console.print("[red]❌ Migration cancelled.[/red]")

        self.show_next_steps()
        self.show_urgent_warnings(report)
        return report

    def scan_project(self) -> list[UsageRecord]:
        self.console.print("📍 Scanning project for deprecated API usage...")
        if self.options.usage_file is None:
            logger.info("No usage file given; nothing to analyze")
            return []
        return [UsageRecord.from_dict(item) for item in load_records(self.options.usage_file)]

    def display_summary(self, report: MigrationReport) -> None:
        self.console.print(f"\n📊 Found {report.total_deprecations} deprecated API calls:")

        table = Table(show_header=True, header_style="bold")
        table.add_column("API")
        table.add_column("Usages", justify="right")
        table.add_column("Removal")
        for api, count in report.by_api.items():
            metadata = self.registry.get(api)
            table.add_row(api, str(count), metadata.removal_date if metadata else "unknown")
        self.console.print(table)

        self.console.print(f"\n⏱️  Estimated migration effort: [bold]{report.estimated_effort}[/bold]")

    def write_report(self) -> Path:
        report_path = self.options.project_path / self.options.report_filename
        report_path.write_text(self.analyzer.generate_migration_guide(), encoding="utf-8")
        self.console.print(f"\n📄 Detailed migration report saved to: {report_path}")
        return report_path

    def show_preview(self, report: MigrationReport) -> None:
        self.console.print("\n📝 Migration preview:")

        for suggestion in report.suggestions[:PREVIEW_LIMIT]:
            self.console.print(f"\n{suggestion.file}:{suggestion.line}", highlight=False, markup=False)
            self.console.print(f"  {suggestion.suggestion}", highlight=False, markup=False)
            if suggestion.automatic_fix:
                self.console.print(f"  Fix: {suggestion.automatic_fix}", highlight=False, markup=False)
            if suggestion.example:
                self.console.print("\n  Before:")
                self.console.print(_indent(suggestion.example.before), highlight=False, markup=False)
                self.console.print("\n  After:")
                self.console.print(_indent(suggestion.example.after), highlight=False, markup=False)

        remaining = len(report.suggestions) - PREVIEW_LIMIT
        if remaining > 0:
            self.console.print(f"\n... and {remaining} more")

    def apply_migrations(self, report: MigrationReport, usage: list[UsageRecord]) -> tuple[int, int]:
        """Apply every automatic fix; returns (applied, failed)."""
        snippets = {(r.file, r.line, r.column, r.api): r.code for r in usage}
        applied = 0
        failed = 0

        for suggestion in report.suggestions:
            location = f"{suggestion.file}:{suggestion.line}"
            if not suggestion.automatic_fix:
                self.console.print(f"   ⚠️  {location} - Manual migration required", highlight=False, markup=False)
                continue
            code = snippets[(suggestion.file, suggestion.line, suggestion.column, suggestion.deprecated_api)]
            try:
                self.apply_fix(suggestion, code)
            except (OSError, ValueError) as e:
                failed += 1
                logger.debug("Failed to apply fix at %s", location, exc_info=True)
                self.console.print(f"   ❌ {location} - {e}", style="red", highlight=False, markup=False)
            else:
                applied += 1
                self.console.print(f"   ✅ {location}", style="green", highlight=False, markup=False)

        self.console.print(f"\n📈 Migration summary: {applied} automatic, {failed} failed")
        return applied, failed

    def apply_fix(self, suggestion: MigrationSuggestion, code: str) -> None:
        """Replace the scanned snippet with its fix on the recorded line.

        Raises:
            ValueError: If the line no longer contains the snippet.
        """
        path = Path(suggestion.file)
        if not path.is_absolute():
            path = self.options.project_path / path

        lines = path.read_text(encoding="utf-8").splitlines(keepends=True)
        index = suggestion.line - 1
        if not 0 <= index < len(lines) or code not in lines[index]:
            raise ValueError("source changed since it was scanned")

        lines[index] = lines[index].replace(code, suggestion.automatic_fix or code, 1)
        path.write_text("".join(lines), encoding="utf-8")

    def show_next_steps(self) -> None:
        self.console.print("\n💡 Next steps:")
        self.console.print("1. Run your test suite to ensure everything works")
        self.console.print("2. Review the changes and commit them")
        self.console.print("3. Update your dependencies if needed")

    def show_urgent_warnings(self, report: MigrationReport) -> None:
        used = set(report.by_api)
        urgent = [entry for entry in self.analyzer.find_urgent() if entry.api in used]
        if not urgent:
            return

        self.console.print("\n[yellow]⚠️  URGENT: The following APIs will be removed soon:[/yellow]")
        for entry in urgent:
            days = days_until_removal(entry.removal_date)
            self.console.print(f"   - {entry.api} ({days} days left)", highlight=False, markup=False)


@click.command()
@click.option(
    "--project-path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Project root; relative usage paths and the report are resolved against it",
)
@click.option(
    "--usage",
    "usage_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON/YAML list of usage records produced by a scanner",
)
@click.option(
    "--metadata",
    "metadata_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON/YAML list of additional deprecation metadata",
)
@click.option("--dry-run", is_flag=True, help="Preview migrations without changing files")
@click.option("--interactive/--no-interactive", default=True, help="Ask before applying fixes")
@click.option("--report", "generate_report", is_flag=True, help="Write the migration guide to the project")
@click.option("--target", "target_version", help="Target client version (informational)")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def migrate(
    project_path: Path,
    usage_file: Path | None,
    metadata_file: Path | None,
    dry_run: bool,
    interactive: bool,
    generate_report: bool,
    target_version: str | None,
    config: str | None,
    verbose: bool,
) -> None:
    """Find deprecated SonarQube client API usage and migrate it."""
    try:
        settings: DeprecationSettings = load_config(config)
        setup_logging(verbose, settings.log_level)
        get_ledger().configure(settings)

        registry = get_registry()
        register_builtin_deprecations(registry)
        if metadata_file is not None:
            for entry in load_records(metadata_file):
                registry.register(entry)

        options = MigrationOptions(
            project_path=project_path,
            dry_run=dry_run,
            interactive=interactive,
            generate_report=generate_report,
            target_version=target_version,
            usage_file=usage_file,
            report_filename=settings.report_filename,
        )
        MigrationCLI(options, registry=registry).run()
    except SonarQubeClientError as e:
        console.print(e.format_verbose(), style="red", highlight=False, markup=False)
        sys.exit(1)
