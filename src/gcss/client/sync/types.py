"""Shared types and dataclasses for sync operations.

This module provides:
- SyncError and its subclasses: the engine's error taxonomy
- SaveSnapshot: a local save file and its modification time
- Manifest: the remote per-game manifest
- BackupResult, UploadResult, DownloadResult: operation results
- RunStatus, SyncOutcome: what a whole engine run returns
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from gcss.core.types import SyncAction

if TYPE_CHECKING:
    from gcss.client.sync.domain.decisions import SyncDecision

MANIFEST_NAME = "manifest.json"


class SyncError(Exception):
    """Base exception for sync errors."""


class DirectoryUnreadableError(SyncError):
    """Save directory does not exist or cannot be listed."""

    def __init__(self, path: Path, reason: str = "") -> None:
        self.path = path
        message = f"Could not access save directory {path}"
        super().__init__(f"{message}: {reason}" if reason else message)


class NoSaveFilesError(SyncError):
    """Save directory is empty."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No save files found in {path}")


class ManifestMissingError(SyncError):
    """The game has no manifest on the remote store."""

    def __init__(self, game: str) -> None:
        self.game = game
        super().__init__(
            f"No manifest found for '{game}'. Run 'gcss provision' to create it."
        )


class RemoteUnavailableError(SyncError):
    """Remote store unreachable, timed out or refused our credentials."""


class ConcurrentModificationError(SyncError):
    """A compare-and-swap write was rejected because the object changed.

    Attributes:
        path: Remote path whose hash no longer matched.
        stage: "manifest-check", "save" or "manifest" (which write was refused).
        save_written: True if the save object had already been stored.
    """

    def __init__(self, path: str, stage: str = "", save_written: bool = False) -> None:
        self.path = path
        self.stage = stage
        self.save_written = save_written
        message = f"{path} was modified by another writer"
        if save_written:
            message += " (save object was stored, manifest was not updated)"
        super().__init__(message + ". Run the sync again to re-read the remote state.")


class RemoteSaveNotFoundError(SyncError):
    """The remote game directory holds no save object."""

    def __init__(self, game: str) -> None:
        self.game = game
        super().__init__(f"No save file stored remotely for '{game}'")


class BackupDirectoryUnwritableError(SyncError):
    """Backup directory cannot be created or written."""

    def __init__(self, path: Path | None, reason: str = "") -> None:
        self.path = path
        message = f"Backup directory {path} is not writable"
        super().__init__(f"{message}: {reason}" if reason else message)


class CopyFailedError(SyncError):
    """Copying the save directory into the backup failed."""


class LocalWriteFailedError(SyncError):
    """Writing a downloaded save to disk failed."""


class UnsupportedActionError(SyncError):
    """The prompter answered with an action the decision does not offer."""

    def __init__(self, action: SyncAction) -> None:
        self.action = action
        super().__init__(
            f"Unsupported action {action.value!r}; expected upload, download or exit"
        )


@dataclass(frozen=True)
class SaveSnapshot:
    """A local save file and its modification time (UTC, millisecond precision)."""

    file_name: str
    modified_at: datetime


@dataclass(frozen=True)
class Manifest:
    """The remote per-game manifest.

    Attributes:
        game: Game the manifest belongs to.
        last_saved: Time of the last upload, None when never synced or unreadable.
        content_hash: Hash to pass back for a compare-and-swap write.
        file_name: Name of the uploaded save, when recorded.
        readable: False if ``lastSaved`` was present but could not be parsed.
    """

    game: str
    last_saved: datetime | None
    content_hash: str
    file_name: str | None = None
    readable: bool = True


@dataclass(frozen=True)
class ManifestWrite:
    """Result of a successful manifest write."""

    ok: bool
    new_hash: str


@dataclass
class BackupResult:
    """Result of a backup operation."""

    source: Path
    destination: Path
    files_copied: int
    timestamp_ms: int


@dataclass
class UploadResult:
    """Result of an upload."""

    path: str
    size: int
    last_saved: datetime
    save_hash: str
    manifest_hash: str


@dataclass
class DownloadResult:
    """Result of a download."""

    path: str
    local_path: Path
    size: int


class RunStatus(Enum):
    """How an engine run ended."""

    COMPLETED = auto()  # Action executed (or NOOP accepted)
    CANCELLED = auto()  # User declined before any mutation
    FAILED = auto()  # A SyncError aborted the run


@dataclass
class SyncOutcome:
    """Result of one engine run for one game."""

    game: str
    status: RunStatus
    decision: SyncDecision | None = None
    action: SyncAction = SyncAction.NOOP
    backup: BackupResult | None = None
    upload: UploadResult | None = None
    download: DownloadResult | None = None
    error: SyncError | None = None

    @property
    def ok(self) -> bool:
        return self.status is not RunStatus.FAILED
