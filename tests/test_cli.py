"""Tests for the sonarqube-client-migrate command."""

from __future__ import annotations

import json

import pytest
import yaml
from click.testing import CliRunner

from sonarqube_client.cli import MigrationCLI, MigrationOptions, migrate
from sonarqube_client.deprecation import DeprecationMetadata, MigrationAnalyzer, UsageRecord

SOURCE = 'result = client.users.search({"ps": 10})\n'
CALL = 'client.users.search({"ps": 10})'


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def project(tmp_path):
    """Project with one deprecated call and a matching usage file."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text(SOURCE)
    usage = [{"api": "users.search()", "file": "src/app.py", "line": 1, "column": 9, "code": CALL}]
    (tmp_path / "usage.json").write_text(json.dumps(usage))
    return tmp_path


def _invoke(runner, project, *args, **kwargs):
    return runner.invoke(
        migrate,
        ["--project-path", str(project), "--usage", str(project / "usage.json"), *args],
        **kwargs,
    )


class TestMigrateCommand:
    """Tests for the migrate click command."""

    def test_help(self, runner):
        result = runner.invoke(migrate, ["--help"])

        assert result.exit_code == 0
        assert "--dry-run" in result.output
        assert "--no-interactive" in result.output

    def test_no_usage_file(self, runner, tmp_path):
        result = runner.invoke(migrate, ["--project-path", str(tmp_path)])

        assert result.exit_code == 0
        assert "No deprecated APIs found" in result.output

    def test_dry_run_leaves_files_untouched(self, runner, project):
        result = _invoke(runner, project, "--dry-run")

        assert result.exit_code == 0, result.output
        assert "Found 1 deprecated API calls" in result.output
        assert "Dry run mode" in result.output
        assert 'Fix: client.users.searchV2({"ps": 10})' in result.output
        assert "src/app.py:1" in result.output
        assert (project / "src" / "app.py").read_text() == SOURCE

    def test_no_interactive_applies_fix(self, runner, project):
        result = _invoke(runner, project, "--no-interactive")

        assert result.exit_code == 0, result.output
        assert "1 automatic, 0 failed" in result.output
        assert (project / "src" / "app.py").read_text() == 'result = client.users.searchV2({"ps": 10})\n'

    def test_interactive_confirm(self, runner, project):
        result = _invoke(runner, project, input="y\n")

        assert result.exit_code == 0, result.output
        assert "searchV2" in (project / "src" / "app.py").read_text()

    def test_interactive_decline(self, runner, project):
        result = _invoke(runner, project, input="n\n")

        assert result.exit_code == 0
        assert "Migration cancelled" in result.output
        assert (project / "src" / "app.py").read_text() == SOURCE

    def test_report_written(self, runner, project):
        result = _invoke(runner, project, "--dry-run", "--report")

        assert result.exit_code == 0, result.output
        report = (project / "migration-report.md").read_text()
        assert report.startswith("# API Migration Guide")
        assert "#### users.search()" in report

    def test_report_filename_from_config(self, runner, project):
        config = project / "sonarqube-client.yaml"
        config.write_text(yaml.safe_dump({"report_filename": "docs-migration.md"}))

        result = _invoke(runner, project, "--dry-run", "--report", "--config", str(config))

        assert result.exit_code == 0, result.output
        assert (project / "docs-migration.md").exists()

    def test_extra_metadata_file(self, runner, project):
        (project / "usage.json").write_text(
            json.dumps([{"api": "ce.submit()", "file": "src/app.py", "line": 1, "column": 0, "code": "ce.submit()"}])
        )
        metadata = [
            {
                "api": "ce.submit()",
                "deprecatedSince": "10.2",
                "removalDate": "2030-01-01",
                "reason": "Use the scanner",
            }
        ]
        (project / "metadata.yaml").write_text(yaml.safe_dump(metadata))

        result = _invoke(runner, project, "--dry-run", "--metadata", str(project / "metadata.yaml"))

        assert result.exit_code == 0, result.output
        assert "Found 1 deprecated API calls" in result.output

    def test_invalid_usage_file(self, runner, project):
        (project / "usage.json").write_text(json.dumps({"api": "users.search()"}))

        result = _invoke(runner, project, "--dry-run")

        assert result.exit_code == 1
        assert "Error [M202]" in result.output

    def test_usage_file_with_non_mapping_records(self, runner, project):
        (project / "usage.json").write_text(json.dumps([1, 2]))

        result = _invoke(runner, project, "--dry-run")

        assert result.exit_code == 1
        assert "Error [M202]" in result.output

    def test_invalid_config(self, runner, project):
        config = project / "bad.yaml"
        config.write_text("log_level: chatty\n")

        result = _invoke(runner, project, "--dry-run", "--config", str(config))

        assert result.exit_code == 1
        assert "Error [F302]" in result.output


class TestMigrationCLI:
    """Tests for MigrationCLI.apply_migrations()."""

    @pytest.fixture
    def cli(self, project, registry):
        registry.register(
            DeprecationMetadata(
                api="users.search()",
                deprecated_since="10.8",
                removal_date="2025-08-13",
                reason="v1 deprecated",
                replacement="users.searchV2()",
                automatic_migration=True,
            )
        )
        registry.register(
            DeprecationMetadata(
                api="projects.bulkUpdateKey()",
                deprecated_since="7.6",
                removal_date="8.0.0",
                reason="Use updateKey()",
                replacement="projects.updateKey()",
            )
        )
        options = MigrationOptions(project_path=project, interactive=False)
        return MigrationCLI(options, registry=registry, analyzer=MigrationAnalyzer(registry))

    def test_manual_migrations_are_skipped(self, cli, project):
        usage = [UsageRecord("projects.bulkUpdateKey()", "src/app.py", 1, 0, "projects.bulkUpdateKey()")]
        report = cli.analyzer.analyze_usage(usage)

        assert cli.apply_migrations(report, usage) == (0, 0)
        assert (project / "src" / "app.py").read_text() == SOURCE

    def test_changed_source_counts_as_failure(self, cli, project):
        (project / "src" / "app.py").write_text("result = None\n")
        usage = [UsageRecord("users.search()", "src/app.py", 1, 9, CALL)]
        report = cli.analyzer.analyze_usage(usage)

        assert cli.apply_migrations(report, usage) == (0, 1)

    def test_missing_file_counts_as_failure(self, cli):
        usage = [UsageRecord("users.search()", "src/gone.py", 1, 9, CALL)]
        report = cli.analyzer.analyze_usage(usage)

        assert cli.apply_migrations(report, usage) == (0, 1)

    def test_run_without_usage_returns_none(self, cli):
        assert cli.run() is None
