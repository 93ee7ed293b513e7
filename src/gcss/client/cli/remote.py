"""Remote repository commands for the gcss CLI.

Commands:
- provision: Create remote save storage for every configured game
- games: List games stored in the repository
"""

from __future__ import annotations

import sys

import click

from gcss.client.api import ContentStoreClient
from gcss.client.cli.config import require_settings
from gcss.client.sync import Provisioner, SyncError, list_remote_games


@click.command()
@click.argument("games", nargs=-1)
def provision(games: tuple[str, ...]) -> None:
    """Create remote save storage for configured games.

    Without arguments, every configured game is provisioned. Games that
    already have storage are left untouched.
    """
    settings = require_settings()
    names = list(games) or settings.game_names
    unknown = [name for name in names if settings.get_game(name) is None]
    if unknown:
        click.echo(f"Error: not in your settings: {', '.join(unknown)}", err=True)
        sys.exit(1)
    if not names:
        click.echo("No games configured. Run 'gcss add-game' first.")
        return

    with ContentStoreClient(settings.remote) as store:
        result = Provisioner(store).provision(names)

    for name in result.created:
        click.echo(f"Created save storage for {name}")
    for name in result.existing:
        click.echo(f"{name}: already provisioned")
    for name, error in result.errors.items():
        click.echo(f"Error: {name}: {error}", err=True)
    if not result.ok:
        sys.exit(1)


@click.command()
def games() -> None:
    """List games stored in the repository and in your settings."""
    settings = require_settings()
    with ContentStoreClient(settings.remote) as store:
        try:
            remote_games = list_remote_games(store)
        except SyncError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    if not remote_games:
        click.echo("The repository holds no games yet. Run 'gcss provision'.")
    configured = set(settings.game_names)
    for name in sorted(set(remote_games) | configured):
        where = []
        if name in remote_games:
            where.append("remote")
        if name in configured:
            where.append("configured")
        click.echo(f"{name} ({', '.join(where)})")
