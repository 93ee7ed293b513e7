"""Per-game manifest stored on the remote content store.

The manifest lives at ``<game>/manifest.json``::

    {"lastSaved": "2024-05-01T10:20:30.123Z", "fileName": "slot1.sav"}

``lastSaved`` is "" until the first upload. Its content hash is the
compare-and-swap token for every write.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from gcss.client.api import commit_message
from gcss.client.sync.remote import remote_errors
from gcss.client.sync.types import (
    MANIFEST_NAME,
    ConcurrentModificationError,
    Manifest,
    ManifestMissingError,
    ManifestWrite,
    RemoteUnavailableError,
)
from gcss.core.timestamps import format_timestamp, parse_timestamp

if TYPE_CHECKING:
    from gcss.client.api import ContentStore

logger = logging.getLogger(__name__)


def manifest_path(game: str) -> str:
    """Remote path of a game's manifest."""
    return f"{game}/{MANIFEST_NAME}"


def encode_manifest(last_saved: datetime | None, file_name: str | None = None) -> bytes:
    """Serialize a manifest body."""
    data: dict[str, str] = {
        "lastSaved": format_timestamp(last_saved) if last_saved else ""
    }
    if file_name:
        data["fileName"] = file_name
    return json.dumps(data).encode("utf-8")


def decode_manifest(game: str, content: bytes, content_hash: str) -> Manifest:
    """Parse a manifest body.

    An unparseable body or timestamp gives a manifest with ``readable=False``
    rather than an error, so the caller can still offer a manual choice.
    """
    try:
        data = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        logger.warning(f"Manifest for {game} is not valid JSON")
        return Manifest(game=game, last_saved=None, content_hash=content_hash, readable=False)
    if not isinstance(data, dict):
        logger.warning(f"Manifest for {game} is not a JSON object")
        return Manifest(game=game, last_saved=None, content_hash=content_hash, readable=False)

    raw = data.get("lastSaved") or ""
    file_name = data.get("fileName") or None
    if not raw:
        return Manifest(game=game, last_saved=None, content_hash=content_hash, file_name=file_name)
    try:
        last_saved = parse_timestamp(str(raw))
    except ValueError:
        logger.warning(f"Manifest for {game} has unreadable lastSaved {raw!r}")
        return Manifest(
            game=game,
            last_saved=None,
            content_hash=content_hash,
            file_name=file_name,
            readable=False,
        )
    return Manifest(
        game=game, last_saved=last_saved, content_hash=content_hash, file_name=file_name
    )


class ManifestService:
    """Reads and writes game manifests with compare-and-swap semantics."""

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    def read(self, game: str) -> Manifest:
        """Fetch the current manifest.

        Raises:
            ManifestMissingError: If the game has no manifest.
            RemoteUnavailableError: If the store cannot be reached.
        """
        with remote_errors(f"fetch the manifest for '{game}'"):
            obj = self._store.get(manifest_path(game))
        if not obj.exists or obj.content_hash is None:
            raise ManifestMissingError(game)
        manifest = decode_manifest(game, obj.content, obj.content_hash)
        logger.debug(
            f"Manifest for {game}: lastSaved={manifest.last_saved} "
            f"hash={obj.content_hash[:8]}"
        )
        return manifest

    def write(
        self,
        game: str,
        last_saved: datetime,
        expected_hash: str,
        file_name: str | None = None,
    ) -> ManifestWrite:
        """Replace the manifest if it still has ``expected_hash``.

        Raises:
            ConcurrentModificationError: If another writer changed the manifest.
            RemoteUnavailableError: If the store cannot be reached.
        """
        path = manifest_path(game)
        with remote_errors(f"update the manifest for '{game}'"):
            result = self._store.put(
                path,
                encode_manifest(last_saved, file_name),
                expected_hash,
                commit_message(f"Updating manifest for {game}"),
            )
        if result.conflict:
            raise ConcurrentModificationError(path, stage="manifest")
        if not result.ok or result.new_hash is None:
            raise RemoteUnavailableError(f"Manifest write for '{game}' was not accepted")
        logger.info(f"Manifest for {game} set to {format_timestamp(last_saved)}")
        return ManifestWrite(ok=True, new_hash=result.new_hash)

    def create(self, game: str) -> Manifest:
        """Create the empty manifest of a game that has none.

        Raises:
            ConcurrentModificationError: If a manifest already exists.
            RemoteUnavailableError: If the store cannot be reached.
        """
        path = manifest_path(game)
        with remote_errors(f"create save storage for '{game}'"):
            result = self._store.put(
                path,
                encode_manifest(None),
                None,
                f"Creating save storage for game {game}",
            )
        if result.conflict:
            raise ConcurrentModificationError(path, stage="manifest")
        if not result.ok or result.new_hash is None:
            raise RemoteUnavailableError(f"Manifest creation for '{game}' was not accepted")
        logger.info(f"Created save storage for {game}")
        return Manifest(game=game, last_saved=None, content_hash=result.new_hash)
