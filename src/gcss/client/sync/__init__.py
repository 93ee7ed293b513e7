"""Synchronization and conflict-resolution engine.

Architecture:
    inspector + ManifestService -> decide() -> BackupManager -> SyncExecutor

Components:
- **inspector**: Finds the newest save file in a local directory
- **ManifestService**: Reads/writes the per-game manifest with compare-and-swap
- **decide**: Pure decision table (domain/decisions.py)
- **BackupManager**: Timestamped copy of the save directory before mutations
- **SyncExecutor**: Upload / Download against the content store
- **SyncEngine**: Sequential workflow tying the above together
- **Provisioner**: Creates empty manifests for new games

All public symbols are re-exported here.
"""

from gcss.client.sync.backup import BackupManager, list_backups
from gcss.client.sync.domain import (
    InvalidTransitionError,
    RunPhase,
    RunTracker,
    SyncDecision,
    decide,
)
from gcss.client.sync.engine import Confirmation, Evaluation, Prompter, SyncEngine
from gcss.client.sync.executor import SyncExecutor, select_save_entry
from gcss.client.sync.inspector import inspect, list_saves
from gcss.client.sync.manifest import ManifestService, manifest_path
from gcss.client.sync.provision import ProvisionResult, Provisioner, list_remote_games
from gcss.client.sync.types import (
    BackupDirectoryUnwritableError,
    BackupResult,
    ConcurrentModificationError,
    CopyFailedError,
    DirectoryUnreadableError,
    DownloadResult,
    LocalWriteFailedError,
    Manifest,
    ManifestMissingError,
    NoSaveFilesError,
    RemoteSaveNotFoundError,
    RemoteUnavailableError,
    RunStatus,
    SaveSnapshot,
    SyncError,
    SyncOutcome,
    UnsupportedActionError,
    UploadResult,
)

__all__ = [
    # Errors
    "BackupDirectoryUnwritableError",
    "ConcurrentModificationError",
    "CopyFailedError",
    "DirectoryUnreadableError",
    "LocalWriteFailedError",
    "ManifestMissingError",
    "NoSaveFilesError",
    "RemoteSaveNotFoundError",
    "RemoteUnavailableError",
    "SyncError",
    "UnsupportedActionError",
    # Types and dataclasses
    "BackupResult",
    "DownloadResult",
    "Manifest",
    "RunStatus",
    "SaveSnapshot",
    "SyncDecision",
    "SyncOutcome",
    "UploadResult",
    # Domain
    "InvalidTransitionError",
    "RunPhase",
    "RunTracker",
    "decide",
    # Components
    "BackupManager",
    "ManifestService",
    "Provisioner",
    "ProvisionResult",
    "SyncExecutor",
    "inspect",
    "list_backups",
    "list_remote_games",
    "list_saves",
    "manifest_path",
    "select_save_entry",
    # Engine
    "Confirmation",
    "Evaluation",
    "Prompter",
    "SyncEngine",
]
