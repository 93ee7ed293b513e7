"""Remote storage provisioning.

Creates the empty manifest of every configured game that has none yet.
The creations are independent, so they run concurrently.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from gcss.client.api import RepositoryEmptyError
from gcss.client.sync.manifest import ManifestService, manifest_path
from gcss.client.sync.remote import remote_errors
from gcss.client.sync.types import ConcurrentModificationError, SyncError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from gcss.client.api import ContentStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


@dataclass
class ProvisionResult:
    """Result of provisioning a set of games."""

    created: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    errors: dict[str, SyncError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def list_remote_games(store: ContentStore) -> list[str]:
    """Names of the game directories stored in the repository.

    An empty repository has no games.

    Raises:
        RemoteUnavailableError: If the store cannot be reached.
    """
    with remote_errors("list the repository contents"):
        try:
            entries = store.list("")
        except RepositoryEmptyError:
            logger.info("Repository is empty")
            return []
    return sorted(e.name for e in entries if e.type == "dir")


class Provisioner:
    """Creates per-game remote storage."""

    def __init__(
        self, store: ContentStore, max_workers: int = DEFAULT_MAX_WORKERS
    ) -> None:
        self._store = store
        self._manifests = ManifestService(store)
        self._max_workers = max_workers

    def provision(self, games: Iterable[str]) -> ProvisionResult:
        """Create the empty manifest of each game that lacks one.

        Failures for one game do not stop the others; they are collected
        in the result.
        """
        names = list(dict.fromkeys(games))
        result = ProvisionResult()
        if not names:
            return result

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(names))) as pool:
            futures = {name: pool.submit(self._provision_one, name) for name in names}

        for name, future in futures.items():
            try:
                created = future.result()
            except SyncError as e:
                logger.error(f"Failed to create save storage for {name}: {e}")
                result.errors[name] = e
                continue
            (result.created if created else result.existing).append(name)
        return result

    def _provision_one(self, game: str) -> bool:
        """Create the manifest of ``game``; False if it already had one."""
        with remote_errors(f"check save storage for '{game}'"):
            existing = self._store.get(manifest_path(game))
        if existing.exists:
            logger.debug(f"Save storage for {game} already exists")
            return False
        try:
            self._manifests.create(game)
        except ConcurrentModificationError:
            # Created by someone else in the meantime
            return False
        return True
