"""Shared configuration classes for gcss.

This module defines the immutable configuration handed to the sync engine.
It is assembled once by the settings layer (see ``gcss.client.cli.config``)
and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_COMMITTER_NAME = "GCSS"
DEFAULT_COMMITTER_EMAIL = "gcss@users.noreply.github.com"


class ConfigError(Exception):
    """Settings are missing or malformed."""


@dataclass(frozen=True)
class RemoteConfig:
    """Configuration for connecting to the remote content store.

    Attributes:
        owner: Repository owner (user or organisation).
        repo: Repository holding the saves.
        token: Personal access token used as bearer token.
        api_url: Base URL of the REST API.
        timeout: Per-request timeout in seconds.
        committer_name: Name recorded on every commit.
        committer_email: Email recorded on every commit.
    """

    owner: str
    repo: str
    token: str
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    committer_name: str = DEFAULT_COMMITTER_NAME
    committer_email: str = DEFAULT_COMMITTER_EMAIL

    def __post_init__(self) -> None:
        """Normalize API URL."""
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))

    @property
    def repo_url(self) -> str:
        """Base URL of the repository endpoints."""
        return f"{self.api_url}/repos/{self.owner}/{self.repo}"

    @property
    def committer(self) -> dict[str, str]:
        """Committer identity sent with every write."""
        return {"name": self.committer_name, "email": self.committer_email}


@dataclass(frozen=True)
class GameProfile:
    """A tracked game.

    Attributes:
        name: Game name, also the remote directory name.
        local_path: Directory holding the local save files.
        backup_path: Directory receiving timestamped backups (None disables backups).
    """

    name: str
    local_path: Path
    backup_path: Path | None = None

    @classmethod
    def from_entry(
        cls, name: str, entry: str | dict[str, Any], default_backup: str | None = None
    ) -> GameProfile:
        """Create from a settings file entry.

        The entry is either a plain path string or a mapping with ``path``
        and an optional ``backupPath``.
        """
        if isinstance(entry, str):
            path, backup = entry, default_backup
        elif isinstance(entry, dict) and entry.get("path"):
            path, backup = entry["path"], entry.get("backupPath") or default_backup
        else:
            raise ConfigError(f"Game '{name}' has no save path")
        return cls(
            name=name,
            local_path=Path(path).expanduser(),
            backup_path=Path(backup).expanduser() if backup else None,
        )

    def to_entry(self) -> dict[str, str]:
        """Serialize for the settings file."""
        entry = {"path": str(self.local_path)}
        if self.backup_path is not None:
            entry["backupPath"] = str(self.backup_path)
        return entry


@dataclass(frozen=True)
class Settings:
    """Complete, immutable client settings."""

    remote: RemoteConfig
    games: tuple[GameProfile, ...] = field(default_factory=tuple)

    @property
    def game_names(self) -> list[str]:
        return [g.name for g in self.games]

    def get_game(self, name: str) -> GameProfile | None:
        """Look up a game profile by name."""
        for game in self.games:
            if game.name == name:
                return game
        return None
