"""Pre-flight backups of a game's save directory.

Each backup is a full copy of the save directory under
``<backup_path>/<unix milliseconds>/``. Folder names are purely numeric so
they are valid on every filesystem, and strictly increasing.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from gcss.client.sync.types import (
    BackupDirectoryUnwritableError,
    BackupResult,
    CopyFailedError,
    DirectoryUnreadableError,
)
from gcss.core.timestamps import now_millis

if TYPE_CHECKING:
    from gcss.core.config import GameProfile

logger = logging.getLogger(__name__)


class BackupManager:
    """Copies save directories into timestamped backup folders."""

    def __init__(self, clock: Callable[[], int] = now_millis) -> None:
        """Initialize the backup manager.

        Args:
            clock: Returns the current Unix time in milliseconds.
        """
        self._clock = clock

    def backup(self, profile: GameProfile) -> BackupResult:
        """Back up the save directory of ``profile``.

        Returns:
            BackupResult describing the new backup folder.

        Raises:
            DirectoryUnreadableError: If the save directory is missing.
            BackupDirectoryUnwritableError: If the backup folder cannot be created.
            CopyFailedError: If copying failed (the partial copy is removed).
        """
        source = profile.local_path
        if not source.is_dir():
            raise DirectoryUnreadableError(source, "not a directory")
        if profile.backup_path is None:
            raise BackupDirectoryUnwritableError(
                None, f"no backup path configured for {profile.name}"
            )

        root = profile.backup_path
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupDirectoryUnwritableError(root, str(e)) from e
        if not os.access(root, os.W_OK):
            raise BackupDirectoryUnwritableError(root, "permission denied")

        timestamp = self._next_timestamp(root)
        destination = root / str(timestamp)
        logger.info(f"Backing up {source} to {destination}")

        try:
            shutil.copytree(source, destination)
        except (shutil.Error, OSError) as e:
            if destination.exists():
                with contextlib.suppress(OSError):
                    shutil.rmtree(destination)
            raise CopyFailedError(f"Failed to copy {source} to {destination}: {e}") from e

        files_copied = sum(1 for p in destination.rglob("*") if p.is_file())
        logger.info(f"Backup complete: {files_copied} files in {destination}")
        return BackupResult(
            source=source,
            destination=destination,
            files_copied=files_copied,
            timestamp_ms=timestamp,
        )

    def _next_timestamp(self, root: Path) -> int:
        """Current time in ms, bumped past any existing backup folder."""
        timestamp = self._clock()
        latest = latest_backup_timestamp(root)
        if latest is not None and timestamp <= latest:
            timestamp = latest + 1
        return timestamp


def latest_backup_timestamp(root: Path) -> int | None:
    """Largest numeric backup folder name under ``root``."""
    stamps = list_backups(root)
    return stamps[-1] if stamps else None


def list_backups(root: Path) -> list[int]:
    """Numeric backup folder names under ``root``, oldest first."""
    if not root.is_dir():
        return []
    return sorted(int(p.name) for p in root.iterdir() if p.is_dir() and p.name.isdigit())
