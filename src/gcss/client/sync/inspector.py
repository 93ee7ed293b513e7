"""Local save directory inspection.

Only regular files directly inside the save directory count as saves;
sub-directories are ignored.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from gcss.client.sync.types import (
    DirectoryUnreadableError,
    NoSaveFilesError,
    SaveSnapshot,
)
from gcss.core.timestamps import from_mtime_ns

logger = logging.getLogger(__name__)


def list_saves(path: Path) -> list[SaveSnapshot]:
    """List the save files of a directory, newest first.

    Ties on modification time are ordered by file name, greatest first.

    Raises:
        DirectoryUnreadableError: If the directory is missing or unreadable.
    """
    if not path.is_dir():
        raise DirectoryUnreadableError(path, "not a directory")

    snapshots: list[SaveSnapshot] = []
    try:
        with os.scandir(path) as entries:
            for entry in entries:
                if not entry.is_file(follow_symlinks=True):
                    continue
                snapshots.append(
                    SaveSnapshot(
                        file_name=entry.name,
                        modified_at=from_mtime_ns(entry.stat().st_mtime_ns),
                    )
                )
    except OSError as e:
        raise DirectoryUnreadableError(path, str(e)) from e

    snapshots.sort(key=lambda s: (s.modified_at, s.file_name), reverse=True)
    return snapshots


def inspect(path: Path) -> SaveSnapshot:
    """Return the newest save file in ``path``.

    Raises:
        DirectoryUnreadableError: If the directory is missing or unreadable.
        NoSaveFilesError: If it holds no files.
    """
    saves = list_saves(path)
    if not saves:
        raise NoSaveFilesError(path)
    newest = saves[0]
    logger.debug(f"Newest save in {path}: {newest.file_name} ({newest.modified_at})")
    return newest
