"""Migration CLI entry point.

This module enables running the tool as:
    python -m sonarqube_client.cli --usage usage.json --dry-run
"""

from sonarqube_client.cli import main

if __name__ == "__main__":
    main()
