"""Configuration utilities for the gcss CLI.

Settings live in ``settings.json`` inside the config directory::

    {
      "owner": "me",
      "repo": "saves",
      "backupPath": "~/gcss-backups",
      "games": {"hollow-knight": "~/.config/unity3d/Team Cherry/Hollow Knight"}
    }

A game entry is either the save path or ``{"path": ..., "backupPath": ...}``.
The access token is kept in the OS keyring; when no keyring backend works it
is stored in the settings file under ``auth``.
"""

from __future__ import annotations

import contextlib
import json
import os
import sys
from pathlib import Path
from typing import Any

import click
import keyring
from keyring.errors import KeyringError

from gcss.core.config import (
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT,
    ConfigError,
    GameProfile,
    RemoteConfig,
    Settings,
)

KEYRING_SERVICE = "gcss"
SETTINGS_NAME = "settings.json"


def get_config_dir() -> Path:
    """Get the configuration directory for gcss.

    Returns:
        Path from ``GCSS_CONFIG_DIR`` or ``~/.gcss``.
    """
    override = os.environ.get("GCSS_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".gcss"


def get_settings_file() -> Path:
    """Get the path to the settings file."""
    return get_config_dir() / SETTINGS_NAME


def load_config() -> dict[str, Any]:
    """Load the raw settings dictionary ({} if there is no settings file)."""
    settings_file = get_settings_file()
    if not settings_file.exists():
        return {}
    try:
        data = json.loads(settings_file.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigError(f"{settings_file} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{settings_file} must contain a JSON object")
    return data


def save_config(config: dict[str, Any]) -> None:
    """Save the raw settings dictionary."""
    settings_file = get_settings_file()
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps(config, indent=2), encoding="utf-8")


def _keyring_user(owner: str, repo: str) -> str:
    return f"{owner}/{repo}"


def store_token(config: dict[str, Any], token: str) -> None:
    """Store the access token, in the keyring when possible.

    Mutates ``config``: the plain-text ``auth`` key is removed when the
    keyring accepted the token, set otherwise.
    """
    try:
        keyring.set_password(
            KEYRING_SERVICE, _keyring_user(config["owner"], config["repo"]), token
        )
    except KeyringError:
        config["auth"] = token
        return
    config.pop("auth", None)


def load_token(config: dict[str, Any]) -> str | None:
    """Get the access token from the keyring or the settings file."""
    token = None
    with contextlib.suppress(KeyringError):
        token = keyring.get_password(
            KEYRING_SERVICE, _keyring_user(config["owner"], config["repo"])
        )
    return token or config.get("auth")


def settings_from_config(config: dict[str, Any], token: str) -> Settings:
    """Build immutable Settings from a raw settings dictionary.

    Raises:
        ConfigError: If required keys are missing or malformed.
    """
    for key in ("owner", "repo"):
        if not config.get(key):
            raise ConfigError(f"Missing '{key}' in settings")
    try:
        timeout = float(config.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid timeout: {config.get('timeout')!r}") from e

    remote = RemoteConfig(
        owner=config["owner"],
        repo=config["repo"],
        token=token,
        api_url=config.get("apiUrl") or DEFAULT_API_URL,
        timeout=timeout,
    )
    games_data = config.get("games") or {}
    if not isinstance(games_data, dict):
        raise ConfigError("'games' must map game names to save paths")
    games = tuple(
        GameProfile.from_entry(name, entry, config.get("backupPath"))
        for name, entry in games_data.items()
    )
    return Settings(remote=remote, games=games)


def load_settings() -> Settings:
    """Load the settings file into immutable Settings.

    Raises:
        ConfigError: If gcss is not configured or the file is invalid.
    """
    config = load_config()
    if not config:
        raise ConfigError("gcss is not configured. Run 'gcss init' first.")
    for key in ("owner", "repo"):
        if not config.get(key):
            raise ConfigError(f"Missing '{key}' in settings")
    token = load_token(config)
    if not token:
        raise ConfigError("No access token found. Run 'gcss init' again.")
    return settings_from_config(config, token)


def add_game(config: dict[str, Any], game: GameProfile) -> dict[str, Any]:
    """Add or replace a game in a raw settings dictionary."""
    games = dict(config.get("games") or {})
    games[game.name] = game.to_entry()
    return {**config, "games": games}


def require_settings() -> Settings:
    """Load settings or exit with an error message (CLI helper)."""
    try:
        return load_settings()
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
