"""Tests for the manifest service."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from gcss.client.api import TransportError
from gcss.client.sync import (
    ConcurrentModificationError,
    ManifestMissingError,
    ManifestService,
    RemoteUnavailableError,
)
from gcss.client.sync.manifest import decode_manifest, encode_manifest, manifest_path

if TYPE_CHECKING:
    from tests.conftest import InMemoryContentStore

STAMP = datetime(2024, 5, 1, 10, 20, 30, 123000, tzinfo=UTC)


class TestEncoding:
    """Tests for manifest (de)serialization."""

    def test_encode_empty(self) -> None:
        """A never-synced manifest has an empty lastSaved."""
        assert json.loads(encode_manifest(None)) == {"lastSaved": ""}

    def test_encode_with_file_name(self) -> None:
        """The uploaded file name is recorded."""
        data = json.loads(encode_manifest(STAMP, "slot1.sav"))
        assert data == {"lastSaved": "2024-05-01T10:20:30.123Z", "fileName": "slot1.sav"}

    def test_decode(self) -> None:
        """Should parse lastSaved and fileName."""
        manifest = decode_manifest("celeste", encode_manifest(STAMP, "slot1.sav"), "h")
        assert manifest.last_saved == STAMP
        assert manifest.file_name == "slot1.sav"
        assert manifest.readable

    def test_decode_empty(self) -> None:
        """An empty lastSaved means never synced."""
        manifest = decode_manifest("celeste", b'{"lastSaved": ""}', "h")
        assert manifest.readable
        assert manifest.last_saved is None

    def test_decode_missing_key(self) -> None:
        """A manifest without lastSaved is never synced too."""
        manifest = decode_manifest("celeste", b"{}", "h")
        assert manifest.readable
        assert manifest.last_saved is None

    @pytest.mark.parametrize(
        "content",
        [
            b"not json",
            b"[1, 2]",
            b'{"lastSaved": "last tuesday"}',
            b"\xff\xfe",
            b'{"lastSaved": "9999-12-31T23:59:59-05:00"}',
            b'{"lastSaved": "0001-01-01T00:00:00+05:00"}',
        ],
    )
    def test_decode_unreadable(self, content: bytes) -> None:
        """Garbage gives an unreadable manifest, not an error."""
        manifest = decode_manifest("celeste", content, "h")
        assert not manifest.readable
        assert manifest.last_saved is None
        assert manifest.content_hash == "h"


class TestManifestService:
    """Tests for ManifestService."""

    def test_read(self, store: InMemoryContentStore) -> None:
        """Should return the manifest with its hash."""
        store.objects["celeste/manifest.json"] = encode_manifest(STAMP)

        manifest = ManifestService(store).read("celeste")

        assert manifest.last_saved == STAMP
        assert manifest.content_hash == store.hash_of("celeste/manifest.json")

    def test_read_missing(self, store: InMemoryContentStore) -> None:
        """A game without manifest is not provisioned."""
        with pytest.raises(ManifestMissingError, match="gcss provision"):
            ManifestService(store).read("celeste")

    def test_write(self, store: InMemoryContentStore) -> None:
        """Should replace the manifest when the hash matches."""
        store.objects["celeste/manifest.json"] = encode_manifest(None)
        expected = store.hash_of("celeste/manifest.json")
        assert expected is not None

        written = ManifestService(store).write("celeste", STAMP, expected, "slot1.sav")

        assert written.new_hash == store.hash_of("celeste/manifest.json")
        data = json.loads(store.objects["celeste/manifest.json"])
        assert data["lastSaved"] == "2024-05-01T10:20:30.123Z"

    def test_write_stale_hash(self, store: InMemoryContentStore) -> None:
        """A changed manifest is not overwritten."""
        store.objects["celeste/manifest.json"] = encode_manifest(STAMP)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            ManifestService(store).write("celeste", STAMP, "stale", None)

        assert exc_info.value.stage == "manifest"
        assert store.objects["celeste/manifest.json"] == encode_manifest(STAMP)

    def test_create(self, store: InMemoryContentStore) -> None:
        """Creating writes an empty manifest."""
        manifest = ManifestService(store).create("celeste")

        assert manifest.readable
        assert manifest.last_saved is None
        assert json.loads(store.objects[manifest_path("celeste")]) == {"lastSaved": ""}

    def test_create_existing(self, store: InMemoryContentStore) -> None:
        """Creation never clobbers an existing manifest."""
        store.objects["celeste/manifest.json"] = encode_manifest(STAMP)

        with pytest.raises(ConcurrentModificationError):
            ManifestService(store).create("celeste")

    def test_transport_failure(self, store: InMemoryContentStore) -> None:
        """Client failures surface as RemoteUnavailableError."""

        def fail(path: str) -> None:
            raise TransportError("Request timed out")

        store.get = fail  # type: ignore[method-assign,assignment]
        with pytest.raises(RemoteUnavailableError, match="timed out"):
            ManifestService(store).read("celeste")
