"""Execution of sync actions.

This module provides:
- SyncExecutor: performs Upload, Download or NoOp for one game

Upload ordering: the save object is written before the manifest, so a
manifest never claims a save time for content that was not stored. Every
write is compare-and-swap against a hash fetched right before it, and a
rejected write is reported, never retried.
"""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from gcss.client.api import NotFoundError, commit_message
from gcss.client.sync.manifest import ManifestService, manifest_path
from gcss.client.sync.remote import remote_errors
from gcss.client.sync.types import (
    MANIFEST_NAME,
    ConcurrentModificationError,
    DirectoryUnreadableError,
    DownloadResult,
    LocalWriteFailedError,
    Manifest,
    RemoteSaveNotFoundError,
    RemoteUnavailableError,
    SaveSnapshot,
    UploadResult,
)
from gcss.core.timestamps import format_timestamp, to_epoch_ns

if TYPE_CHECKING:
    from gcss.client.api import ContentStore, RemoteEntry
    from gcss.core.config import GameProfile

logger = logging.getLogger(__name__)


class SyncExecutor:
    """Carries out a chosen sync action against the content store."""

    def __init__(
        self, store: ContentStore, manifests: ManifestService | None = None
    ) -> None:
        self._store = store
        self._manifests = manifests or ManifestService(store)

    # === Upload ===

    def upload(
        self,
        profile: GameProfile,
        snapshot: SaveSnapshot,
        manifest: Manifest,
    ) -> UploadResult:
        """Upload the newest local save and stamp the manifest.

        Args:
            profile: Game being synchronized.
            snapshot: Newest local save (as inspected).
            manifest: Manifest the decision was based on.

        Returns:
            UploadResult with the new hashes.

        Raises:
            DirectoryUnreadableError: If the save file cannot be read (the
                error names the save directory and the file).
            ConcurrentModificationError: If the manifest or save object changed
                since it was read.
            RemoteUnavailableError: If the store cannot be reached.
        """
        game = profile.name
        local_file = profile.local_path / snapshot.file_name
        try:
            content = local_file.read_bytes()
        except OSError as e:
            raise DirectoryUnreadableError(
                profile.local_path, f"could not read save file {snapshot.file_name}: {e}"
            ) from e

        # The manifest must still be the one the decision was made on
        current = self._manifests.read(game)
        if current.content_hash != manifest.content_hash:
            raise ConcurrentModificationError(manifest_path(game), stage="manifest-check")

        save_path = f"{game}/{snapshot.file_name}"
        with remote_errors(f"fetch the stored save for '{game}'"):
            existing = self._store.get(save_path)
        expected = existing.content_hash if existing.exists else None

        logger.info(f"Uploading {local_file} to {save_path}")
        with remote_errors(f"upload the save for '{game}'"):
            result = self._store.put(
                save_path, content, expected, commit_message("Uploading save file.")
            )
        if result.conflict:
            raise ConcurrentModificationError(save_path, stage="save")
        if not result.ok or result.new_hash is None:
            raise RemoteUnavailableError(f"Save upload for '{game}' was not accepted")

        try:
            written = self._manifests.write(
                game,
                snapshot.modified_at,
                current.content_hash,
                file_name=snapshot.file_name,
            )
        except ConcurrentModificationError as e:
            raise ConcurrentModificationError(
                e.path, stage="manifest", save_written=True
            ) from e
        except RemoteUnavailableError:
            logger.error(
                f"Save for {game} was stored but the manifest update failed; "
                "the next sync will offer the upload again"
            )
            raise

        logger.info(
            f"Uploaded {snapshot.file_name} for {game} "
            f"(lastSaved {format_timestamp(snapshot.modified_at)})"
        )
        return UploadResult(
            path=save_path,
            size=len(content),
            last_saved=snapshot.modified_at,
            save_hash=result.new_hash,
            manifest_hash=written.new_hash,
        )

    # === Download ===

    def download(
        self, profile: GameProfile, manifest: Manifest | None = None
    ) -> DownloadResult:
        """Download the remote save into the local save directory.

        Args:
            profile: Game being synchronized.
            manifest: Current manifest, used to pick the save object and to
                stamp the file's modification time.

        Returns:
            DownloadResult with the local path.

        Raises:
            RemoteSaveNotFoundError: If no save object is stored.
            LocalWriteFailedError: If the file cannot be written.
            RemoteUnavailableError: If the store cannot be reached.
        """
        game = profile.name
        with remote_errors(f"list the stored files for '{game}'"):
            entries = self._list_game(game)
        entry = select_save_entry(game, entries, manifest.file_name if manifest else None)

        with remote_errors(f"download the save for '{game}'"):
            obj = self._store.get(entry.path)
        if not obj.exists:
            raise RemoteSaveNotFoundError(game)

        local_file = profile.local_path / entry.name
        write_atomically(local_file, obj.content)
        if manifest is not None and manifest.last_saved is not None:
            stamp = to_epoch_ns(manifest.last_saved)
            try:
                os.utime(local_file, ns=(stamp, stamp))
            except OSError as e:
                raise LocalWriteFailedError(
                    f"Saved {local_file} but could not set its modification time: {e}"
                ) from e

        logger.info(f"Downloaded {entry.path} to {local_file}")
        return DownloadResult(path=entry.path, local_path=local_file, size=len(obj.content))

    def _list_game(self, game: str) -> list[RemoteEntry]:
        try:
            return self._store.list(game)
        except NotFoundError:
            return []


def select_save_entry(
    game: str, entries: list[RemoteEntry], preferred: str | None = None
) -> RemoteEntry:
    """Pick the save object among a game directory's entries.

    The manifest's recorded file name wins when present; otherwise the
    single non-manifest file is used.

    Raises:
        RemoteSaveNotFoundError: If only the manifest (or nothing) is stored.
    """
    saves = [e for e in entries if e.is_file and e.name != MANIFEST_NAME]
    if not saves:
        raise RemoteSaveNotFoundError(game)
    if preferred:
        for entry in saves:
            if entry.name == preferred:
                return entry
    if len(saves) > 1:
        chosen = max(saves, key=lambda e: e.name)
        logger.warning(
            f"{game} has {len(saves)} stored saves "
            f"({', '.join(e.name for e in saves)}); using {chosen.name}"
        )
        return chosen
    return saves[0]


def write_atomically(path: Path, content: bytes) -> None:
    """Write ``content`` through a temporary file renamed over ``path``.

    Raises:
        LocalWriteFailedError: If the write or rename fails (no partial
            file is left behind).
    """
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "wb") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path.exists():
            with contextlib.suppress(OSError):
                tmp_path.unlink()
        raise LocalWriteFailedError(f"Failed to write save file {path}: {e}") from e
