"""Tests for remote storage provisioning."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from gcss.client.api import APIError, RemoteObject
from gcss.client.sync import Provisioner, RemoteUnavailableError, list_remote_games
from gcss.client.sync.manifest import encode_manifest

if TYPE_CHECKING:
    from tests.conftest import InMemoryContentStore


class TestListRemoteGames:
    """Tests for list_remote_games()."""

    def test_empty_repository(self, store: InMemoryContentStore) -> None:
        """A repository without commits has no games."""
        assert list_remote_games(store) == []

    def test_directories_only(self, store: InMemoryContentStore) -> None:
        """Top-level files are not games."""
        store.objects["README.md"] = b"saves"
        store.objects["hades/manifest.json"] = encode_manifest(None)
        store.objects["celeste/manifest.json"] = encode_manifest(None)

        assert list_remote_games(store) == ["celeste", "hades"]


class TestProvisioner:
    """Tests for Provisioner."""

    def test_creates_missing_manifests(self, store: InMemoryContentStore) -> None:
        """Every new game gets an empty manifest."""
        result = Provisioner(store).provision(["celeste", "hades"])

        assert result.ok
        assert sorted(result.created) == ["celeste", "hades"]
        for game in ("celeste", "hades"):
            assert json.loads(store.objects[f"{game}/manifest.json"]) == {"lastSaved": ""}

    def test_leaves_existing_manifests(self, store: InMemoryContentStore) -> None:
        """Provisioned games are not reset."""
        existing = encode_manifest(None, "slot1.sav")
        store.objects["celeste/manifest.json"] = existing

        result = Provisioner(store).provision(["celeste", "hades"])

        assert result.existing == ["celeste"]
        assert result.created == ["hades"]
        assert store.objects["celeste/manifest.json"] == existing

    def test_duplicates_ignored(self, store: InMemoryContentStore) -> None:
        """A game named twice is provisioned once."""
        result = Provisioner(store).provision(["celeste", "celeste"])

        assert result.created == ["celeste"]
        assert store.writes == ["celeste/manifest.json"]

    def test_nothing_to_do(self, store: InMemoryContentStore) -> None:
        """No games, no work."""
        result = Provisioner(store).provision([])
        assert result.ok
        assert result.created == []

    def test_errors_collected_per_game(self, store: InMemoryContentStore) -> None:
        """One failing game does not stop the others."""
        original_get = store.get

        def flaky_get(path: str) -> RemoteObject:
            if path.startswith("hades/"):
                raise APIError("Server Error", 502)
            return original_get(path)

        store.get = flaky_get  # type: ignore[method-assign]

        result = Provisioner(store, max_workers=2).provision(["celeste", "hades"])

        assert not result.ok
        assert result.created == ["celeste"]
        assert isinstance(result.errors["hades"], RemoteUnavailableError)
