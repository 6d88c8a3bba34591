"""dbus-explorer CLI - Command line interface."""

from __future__ import annotations

from dbus_explorer.cli.commands import cli, setup_logging


def main() -> None:
    """Main entry point for the dbus-explorer CLI."""
    cli()


__all__ = ["main", "cli", "setup_logging"]
