"""Command-line interface for gcss.

This module provides the main CLI entry point and assembles all commands.

Commands:
- init: Configure repository, access token and a first game
- add-game: Add a game to the settings
- provision: Create remote save storage for configured games
- games: List games in the repository
- status: Show the sync state of a game
- sync: Synchronize a game's save
"""

from __future__ import annotations

import logging

import click

from gcss.client.cli.config import (
    get_config_dir,
    get_settings_file,
    load_config,
    load_settings,
    save_config,
)
from gcss.client.cli.remote import games, provision
from gcss.client.cli.setup import add_game_cmd, init
from gcss.client.cli.sync import status, sync


def configure_logging(verbose: bool) -> None:
    """Send gcss log records to stderr."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    gcss_logger = logging.getLogger("gcss")
    gcss_logger.handlers = [handler]
    gcss_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    gcss_logger.propagate = False


@click.group()
@click.version_option(package_name="gcss")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """GCSS - Git Cloud Save System."""
    configure_logging(verbose)


# Setup commands
cli.add_command(init)
cli.add_command(add_game_cmd)

# Remote commands
cli.add_command(provision)
cli.add_command(games)

# Sync commands
cli.add_command(status)
cli.add_command(sync)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "get_config_dir",
    "get_settings_file",
    "load_config",
    "load_settings",
    "save_config",
]
