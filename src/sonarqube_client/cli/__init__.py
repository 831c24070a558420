"""Command line interface for the SonarQube client migration tool."""

from sonarqube_client.cli.migrate import MigrationCLI, MigrationOptions, migrate


def main() -> None:
    """Main entry point for the sonarqube-client-migrate CLI."""
    migrate()


__all__ = ["main", "migrate", "MigrationCLI", "MigrationOptions"]
