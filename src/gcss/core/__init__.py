"""Core module - Shared configuration, types and timestamp helpers."""

from gcss.core.config import ConfigError, GameProfile, RemoteConfig, Settings
from gcss.core.timestamps import (
    format_timestamp,
    from_mtime_ns,
    now_millis,
    parse_timestamp,
    to_epoch_ns,
)
from gcss.core.types import SyncAction, SyncState

__all__ = [
    # Config
    "ConfigError",
    "GameProfile",
    "RemoteConfig",
    "Settings",
    # Timestamps
    "format_timestamp",
    "from_mtime_ns",
    "now_millis",
    "parse_timestamp",
    "to_epoch_ns",
    # Types
    "SyncAction",
    "SyncState",
]
