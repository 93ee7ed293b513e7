"""Sync commands for the gcss CLI.

Commands:
- sync: Synchronize one game's save with the repository
- status: Show what sync would recommend, without changing anything
"""

from __future__ import annotations

import sys

import click

from gcss.client.api import ContentStoreClient
from gcss.client.cli.config import require_settings
from gcss.client.cli.prompts import ClickPrompter, describe_decision
from gcss.client.sync import (
    RunStatus,
    SyncEngine,
    SyncError,
    SyncOutcome,
    list_remote_games,
)
from gcss.core.config import Settings
from gcss.core.types import SyncAction


def _choose_game(settings: Settings, store: ContentStoreClient) -> str:
    """Ask which configured game to manage."""
    try:
        remote_games = list_remote_games(store)
    except SyncError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if remote_games:
        click.echo(f"Found: {', '.join(remote_games)}")
    if not settings.games:
        click.echo("Error: no games configured. Run 'gcss add-game' first.", err=True)
        sys.exit(1)
    return click.prompt(
        "Enter the name of the game you wish to manage",
        type=click.Choice(settings.game_names),
    )


def _report(outcome: SyncOutcome) -> None:
    if outcome.backup:
        click.echo(
            f"Backed up {outcome.backup.files_copied} files to {outcome.backup.destination}"
        )
    if outcome.status is RunStatus.FAILED:
        click.echo(f"Error: {outcome.error}", err=True)
    elif outcome.status is RunStatus.CANCELLED:
        click.echo("Nothing was changed.")
    elif outcome.upload:
        click.echo("Save uploaded successfully.")
    elif outcome.download:
        click.echo(f"File written successfully to {outcome.download.local_path}")
    elif outcome.action is SyncAction.NOOP:
        click.echo("Nothing to do.")


@click.command()
@click.argument("game", required=False)
@click.option(
    "--backup/--no-backup",
    default=None,
    help="Back up the save folder before changing it (asks when omitted).",
)
@click.option("--yes", "-y", is_flag=True, help="Accept the recommended upload/download.")
def sync(game: str | None, backup: bool | None, yes: bool) -> None:
    """Synchronize a game's save with the repository.

    Compares the newest local save with the time recorded in the remote
    manifest, recommends an upload or a download, and carries it out once
    confirmed. A manual upload/download is always offered.
    """
    settings = require_settings()
    with ContentStoreClient(settings.remote) as store:
        name = game or _choose_game(settings, store)
        profile = settings.get_game(name)
        if profile is None:
            click.echo(
                f"Error: '{name}' is not in your settings. "
                f"Run 'gcss add-game {name}' first.",
                err=True,
            )
            sys.exit(1)

        engine = SyncEngine(store, ClickPrompter(backup=backup, assume_yes=yes))
        outcome = engine.run(profile)

    _report(outcome)
    if not outcome.ok:
        sys.exit(1)


@click.command()
@click.argument("game")
def status(game: str) -> None:
    """Show the sync state of a game without changing anything."""
    settings = require_settings()
    profile = settings.get_game(game)
    if profile is None:
        click.echo(f"Error: '{game}' is not in your settings.", err=True)
        sys.exit(1)

    with ContentStoreClient(settings.remote) as store:
        engine = SyncEngine(store, ClickPrompter())
        try:
            evaluation = engine.evaluate(profile)
        except SyncError as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    click.echo(f"Newest save: {evaluation.snapshot.file_name}")
    describe_decision(evaluation.decision)
    click.echo(f"State: {evaluation.decision.state.value}")
    click.echo(f"Recommended action: {evaluation.decision.action.value}")
