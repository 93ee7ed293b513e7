"""Domain modules for sync business rules.

This package centralizes business logic for the sync engine:
- decisions: Decision table mapping timestamps to sync state and action
- runs: Engine run state machine

Architecture:
    domain/ contains pure business logic without external dependencies.
    Implementation details (filesystem, API calls) stay in the sibling modules.
"""

from gcss.client.sync.domain.decisions import (
    DECISION_RULES,
    OVERRIDE_ACTIONS,
    Comparison,
    DecisionRule,
    SyncDecision,
    compare,
    decide,
)
from gcss.client.sync.domain.runs import (
    VALID_TRANSITIONS,
    InvalidTransitionError,
    RunPhase,
    RunTracker,
)

__all__ = [
    # decisions
    "DECISION_RULES",
    "OVERRIDE_ACTIONS",
    "Comparison",
    "DecisionRule",
    "SyncDecision",
    "compare",
    "decide",
    # runs
    "VALID_TRANSITIONS",
    "InvalidTransitionError",
    "RunPhase",
    "RunTracker",
]
