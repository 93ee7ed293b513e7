"""Shared pytest fixtures.

Provides an in-memory content store with the same compare-and-swap
semantics as the GitHub contents API, a scripted prompter, and helpers to
create save files with exact modification times.
"""

from __future__ import annotations

import hashlib
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

from gcss.client.api import (
    NotFoundError,
    PutResult,
    RemoteEntry,
    RemoteObject,
    RepositoryEmptyError,
)
from gcss.client.sync.domain.decisions import SyncDecision
from gcss.client.sync.engine import Confirmation
from gcss.core.config import GameProfile
from gcss.core.timestamps import to_epoch_ns
from gcss.core.types import SyncAction


def blob_hash(content: bytes) -> str:
    """Git blob SHA-1 of ``content``."""
    return hashlib.sha1(b"blob %d\0" % len(content) + content).hexdigest()


class InMemoryContentStore:
    """Content store keeping objects in a dict.

    Attributes:
        objects: path -> content.
        writes: Paths of accepted writes, in order.
        before_put: Called with the path before each write is checked,
            to simulate a concurrent writer.
    """

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.writes: list[str] = []
        self.rejected: list[str] = []
        self.before_put: Callable[[str], None] | None = None

    def hash_of(self, path: str) -> str | None:
        content = self.objects.get(path)
        return blob_hash(content) if content is not None else None

    def get(self, path: str) -> RemoteObject:
        path = path.strip("/")
        if path not in self.objects:
            return RemoteObject(path=path, exists=False)
        content = self.objects[path]
        return RemoteObject(
            path=path, exists=True, content=content, content_hash=blob_hash(content)
        )

    def put(
        self,
        path: str,
        content: bytes,
        expected_hash: str | None,
        message: str,
    ) -> PutResult:
        path = path.strip("/")
        if self.before_put:
            self.before_put(path)
        if self.hash_of(path) != expected_hash:
            self.rejected.append(path)
            return PutResult(ok=False, conflict=True, message="sha does not match")
        self.objects[path] = content
        self.writes.append(path)
        return PutResult(ok=True, new_hash=blob_hash(content))

    def list(self, path: str) -> list[RemoteEntry]:
        path = path.strip("/")
        if not self.objects:
            raise RepositoryEmptyError("This repository is empty.", 404)
        prefix = f"{path}/" if path else ""
        entries: dict[str, RemoteEntry] = {}
        for obj_path, content in self.objects.items():
            if not obj_path.startswith(prefix):
                continue
            name, _, rest = obj_path[len(prefix):].partition("/")
            if rest:
                entries[name] = RemoteEntry(
                    name=name, path=prefix + name, type="dir", content_hash="tree"
                )
            else:
                entries[name] = RemoteEntry(
                    name=name,
                    path=obj_path,
                    type="file",
                    content_hash=blob_hash(content),
                    size=len(content),
                )
        if not entries:
            raise NotFoundError("Not Found", 404)
        return sorted(entries.values(), key=lambda e: e.name)


@dataclass
class ScriptedPrompter:
    """Prompter answering from preset values and recording what it was asked."""

    confirmation: Confirmation = Confirmation.YES
    override: SyncAction = SyncAction.NOOP
    backup: bool = False
    asked: list[str] = field(default_factory=list)
    decisions: list[SyncDecision] = field(default_factory=list)

    def confirm_action(self, game: str, decision: SyncDecision) -> Confirmation:
        self.asked.append("confirm_action")
        self.decisions.append(decision)
        return self.confirmation

    def choose_override(self, game: str, decision: SyncDecision) -> SyncAction:
        self.asked.append("choose_override")
        self.decisions.append(decision)
        return self.override

    def confirm_backup(self, profile: GameProfile) -> bool:
        self.asked.append("confirm_backup")
        return self.backup


def write_save(directory: Path, name: str, content: bytes, modified_at: datetime) -> Path:
    """Create a save file with an exact modification time."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(content)
    stamp = to_epoch_ns(modified_at)
    os.utime(path, ns=(stamp, stamp))
    return path


@pytest.fixture
def store() -> InMemoryContentStore:
    """Empty in-memory content store."""
    return InMemoryContentStore()


@pytest.fixture
def prompter() -> ScriptedPrompter:
    """Prompter accepting the recommendation, declining backups."""
    return ScriptedPrompter()


@pytest.fixture
def profile(tmp_path: Path) -> GameProfile:
    """Game profile with an existing (empty) save directory and a backup path."""
    saves = tmp_path / "saves"
    saves.mkdir()
    return GameProfile(name="celeste", local_path=saves, backup_path=tmp_path / "backups")


@pytest.fixture
def save_file() -> Callable[..., Path]:
    """Factory creating save files with a given modification time."""
    return write_save


@pytest.fixture
def make_prompter() -> Callable[..., ScriptedPrompter]:
    """Factory for scripted prompters."""
    return ScriptedPrompter
