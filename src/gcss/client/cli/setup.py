"""First-run setup commands for the gcss CLI.

Commands:
- init: Create the settings file (repository, token, first game)
- add-game: Add a game to the settings
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from gcss.client.cli.config import (
    add_game,
    get_settings_file,
    load_config,
    save_config,
    store_token,
)
from gcss.core.config import ConfigError, GameProfile


def _prompt_game(name: str | None, path: str | None, backup_path: str | None) -> GameProfile:
    name = name or click.prompt("Enter game name")
    path = path or click.prompt("Enter game save folder path")
    if backup_path is None:
        backup_path = click.prompt(
            "Enter backup folder path (leave empty to disable backups)",
            default="",
            show_default=False,
        )
    return GameProfile(
        name=name,
        local_path=Path(path).expanduser(),
        backup_path=Path(backup_path).expanduser() if backup_path else None,
    )


@click.command()
@click.option("--repo", default=None, help="Repository where saves will be kept.")
@click.option("--owner", default=None, help="GitHub user owning the repository.")
def init(repo: str | None, owner: str | None) -> None:
    """Configure gcss: repository, access token and a first game."""
    try:
        existing = load_config()
    except ConfigError:
        existing = {}
    if existing and not click.confirm(
        f"Settings already exist at {get_settings_file()}. Overwrite them?"
    ):
        sys.exit(0)

    repo = repo or click.prompt("Enter target repo name (where saves will be kept)")
    owner = owner or click.prompt("Enter GitHub username (must be owner of the target repo)")
    token = click.prompt("Enter repo access token", hide_input=True)
    game = _prompt_game(None, None, None)

    config: dict[str, object] = {"owner": owner, "repo": repo}
    config = add_game(config, game)

    click.echo(f"\nRepository: {owner}/{repo}")
    click.echo(f"Game: {game.name} -> {game.local_path}")
    if game.backup_path:
        click.echo(f"Backups: {game.backup_path}")
    if not click.confirm("Confirm settings?", default=True):
        click.echo("Setup cancelled. Nothing was saved.")
        sys.exit(0)

    store_token(config, token)
    save_config(config)
    click.echo(f"Settings saved to {get_settings_file()}")
    click.echo("Run 'gcss provision' to create remote storage for your games.")


@click.command("add-game")
@click.argument("name", required=False)
@click.option("--path", "path", default=None, help="Save folder of the game.")
@click.option("--backup-path", default=None, help="Folder receiving backups.")
def add_game_cmd(name: str | None, path: str | None, backup_path: str | None) -> None:
    """Add a game to the settings."""
    try:
        config = load_config()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not config:
        click.echo("Error: gcss is not configured. Run 'gcss init' first.", err=True)
        sys.exit(1)

    game = _prompt_game(name, path, backup_path)
    if game.name in (config.get("games") or {}):
        click.echo(f"Note: replacing existing settings for '{game.name}'")
    save_config(add_game(config, game))
    click.echo(f"Added '{game.name}'. Run 'gcss provision' to create its remote storage.")
