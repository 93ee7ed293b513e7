"""Shared types for gcss.

This module defines the enums used across the engine, the CLI and the tests.
"""

from __future__ import annotations

from enum import Enum


class SyncState(str, Enum):
    """Relationship between the local save and the remote manifest."""

    IN_SYNC = "in_sync"
    LOCAL_AHEAD = "local_ahead"
    REMOTE_AHEAD = "remote_ahead"
    UNKNOWN = "unknown"


class SyncAction(str, Enum):
    """Action recommended for (or taken on) a game."""

    NOOP = "noop"
    UPLOAD = "upload"
    DOWNLOAD = "download"
    ASK_USER = "ask_user"

    @property
    def is_mutating(self) -> bool:
        """Whether the action changes local or remote content."""
        return self in (SyncAction.UPLOAD, SyncAction.DOWNLOAD)
