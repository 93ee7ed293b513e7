"""Reconciliation decision table.

Maps the newest local save time and the manifest's ``lastSaved`` to a sync
state and a recommended action.

Matrix:
| Manifest lastSaved      | State        | Action                    |
|-------------------------|--------------|---------------------------|
| empty (never synced)    | LOCAL_AHEAD  | Upload, after confirmation|
| older than local        | LOCAL_AHEAD  | Upload, after confirmation|
| newer than local        | REMOTE_AHEAD | Download, after confirm.  |
| equal to local          | IN_SYNC      | Nothing, override offered |
| unparseable             | UNKNOWN      | Ask the user              |

Comparison is exact; no clock-skew tolerance is applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from gcss.core.types import SyncAction, SyncState

# Always reachable, whatever the computed state
OVERRIDE_ACTIONS: tuple[SyncAction, ...] = (
    SyncAction.UPLOAD,
    SyncAction.DOWNLOAD,
    SyncAction.NOOP,
)


class Comparison(Enum):
    """How the manifest timestamp relates to the local one."""

    EMPTY = auto()
    OLDER = auto()
    NEWER = auto()
    EQUAL = auto()
    UNREADABLE = auto()


@dataclass(frozen=True)
class DecisionRule:
    """A rule in the decision table."""

    comparison: Comparison
    state: SyncState
    action: SyncAction
    requires_confirmation: bool
    reason: str


DECISION_RULES: list[DecisionRule] = [
    DecisionRule(
        comparison=Comparison.EMPTY,
        state=SyncState.LOCAL_AHEAD,
        action=SyncAction.UPLOAD,
        requires_confirmation=True,
        reason="Nothing has been uploaded for this game yet",
    ),
    DecisionRule(
        comparison=Comparison.OLDER,
        state=SyncState.LOCAL_AHEAD,
        action=SyncAction.UPLOAD,
        requires_confirmation=True,
        reason="Your local save is newer than the one stored in the repo",
    ),
    DecisionRule(
        comparison=Comparison.NEWER,
        state=SyncState.REMOTE_AHEAD,
        action=SyncAction.DOWNLOAD,
        requires_confirmation=True,
        reason="Your local save is older than the one stored in the repo",
    ),
    DecisionRule(
        comparison=Comparison.EQUAL,
        state=SyncState.IN_SYNC,
        action=SyncAction.NOOP,
        requires_confirmation=False,
        reason="Your save is up to date with the one in the cloud",
    ),
    DecisionRule(
        comparison=Comparison.UNREADABLE,
        state=SyncState.UNKNOWN,
        action=SyncAction.ASK_USER,
        requires_confirmation=True,
        reason="The remote manifest has an unreadable timestamp",
    ),
]

RULES_BY_COMPARISON: dict[Comparison, DecisionRule] = {
    rule.comparison: rule for rule in DECISION_RULES
}


@dataclass(frozen=True)
class SyncDecision:
    """Outcome of the decision table for one game."""

    state: SyncState
    action: SyncAction
    requires_confirmation: bool
    reason: str
    local_newest: datetime
    last_saved: datetime | None
    overrides: tuple[SyncAction, ...] = OVERRIDE_ACTIONS


def compare(
    local_newest: datetime, last_saved: datetime | None, *, readable: bool = True
) -> Comparison:
    """Classify the manifest timestamp against the newest local save."""
    if not readable:
        return Comparison.UNREADABLE
    if last_saved is None:
        return Comparison.EMPTY
    if last_saved < local_newest:
        return Comparison.OLDER
    if last_saved > local_newest:
        return Comparison.NEWER
    return Comparison.EQUAL


def decide(
    local_newest: datetime,
    last_saved: datetime | None,
    *,
    readable: bool = True,
) -> SyncDecision:
    """Decide the sync direction.

    Args:
        local_newest: Modification time of the newest local save.
        last_saved: Manifest ``lastSaved``, None if never synced.
        readable: False when the manifest carried an unparseable timestamp.

    Returns:
        The decision. It is only a recommendation; the caller confirms it.
    """
    rule = RULES_BY_COMPARISON[compare(local_newest, last_saved, readable=readable)]
    return SyncDecision(
        state=rule.state,
        action=rule.action,
        requires_confirmation=rule.requires_confirmation,
        reason=rule.reason,
        local_newest=local_newest,
        last_saved=last_saved,
    )
