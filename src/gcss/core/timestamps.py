"""Timestamp conversions.

Manifests store ``lastSaved`` as an ISO-8601 UTC string with millisecond
precision (``2024-05-01T10:20:30.123Z``). Local modification times are
truncated to the same resolution so both sides compare exactly.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def from_mtime_ns(mtime_ns: int) -> datetime:
    """Convert a ``st_mtime_ns`` value to an aware UTC datetime, truncated to ms."""
    return EPOCH + timedelta(milliseconds=mtime_ns // 1_000_000)


def to_epoch_ns(value: datetime) -> int:
    """Convert an aware datetime back to nanoseconds since the epoch."""
    delta = value - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


def format_timestamp(value: datetime) -> str:
    """Format as ISO-8601 UTC with milliseconds and a ``Z`` suffix."""
    value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(raw: str) -> datetime:
    """Parse a manifest timestamp.

    Accepts the ``Z`` suffix and explicit offsets. Naive values are taken as
    UTC. The result is truncated to milliseconds.

    Raises:
        ValueError: If ``raw`` is not an ISO-8601 timestamp.
    """
    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    try:
        value = value.astimezone(UTC)
    except OverflowError as e:
        raise ValueError(f"{raw!r} is out of range once converted to UTC") from e
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def now_millis() -> int:
    """Current Unix time in milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)
