"""Tests for the decision table and run state machine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from gcss.client.sync.domain import (
    DECISION_RULES,
    OVERRIDE_ACTIONS,
    VALID_TRANSITIONS,
    Comparison,
    InvalidTransitionError,
    RunPhase,
    RunTracker,
    compare,
    decide,
)
from gcss.core.types import SyncAction, SyncState

LOCAL = datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC)


class TestDecisionRules:
    """Tests for the decision table itself."""

    def test_every_comparison_has_one_rule(self) -> None:
        """The table covers each comparison exactly once."""
        comparisons = [rule.comparison for rule in DECISION_RULES]
        assert sorted(comparisons, key=lambda c: c.value) == list(Comparison)

    def test_mutating_rules_require_confirmation(self) -> None:
        """No rule moves files without asking."""
        for rule in DECISION_RULES:
            if rule.action.is_mutating:
                assert rule.requires_confirmation


class TestCompare:
    """Tests for compare()."""

    @pytest.mark.parametrize(
        "last_saved, expected",
        [
            (None, Comparison.EMPTY),
            (LOCAL - timedelta(milliseconds=1), Comparison.OLDER),
            (LOCAL + timedelta(milliseconds=1), Comparison.NEWER),
            (LOCAL, Comparison.EQUAL),
        ],
    )
    def test_classification(self, last_saved: datetime | None, expected: Comparison) -> None:
        """Timestamps are compared exactly."""
        assert compare(LOCAL, last_saved) is expected

    def test_unreadable_wins(self) -> None:
        """An unreadable manifest is never compared."""
        assert compare(LOCAL, None, readable=False) is Comparison.UNREADABLE


class TestDecide:
    """Tests for decide()."""

    def test_never_synced_uploads(self) -> None:
        """An empty manifest recommends an upload."""
        decision = decide(LOCAL, None)
        assert decision.state is SyncState.LOCAL_AHEAD
        assert decision.action is SyncAction.UPLOAD
        assert decision.requires_confirmation

    def test_local_newer_uploads(self) -> None:
        """A newer local save recommends an upload."""
        decision = decide(LOCAL, LOCAL - timedelta(hours=1))
        assert decision.state is SyncState.LOCAL_AHEAD
        assert decision.action is SyncAction.UPLOAD

    def test_remote_newer_downloads(self) -> None:
        """A newer manifest recommends a download."""
        decision = decide(LOCAL, LOCAL + timedelta(hours=1))
        assert decision.state is SyncState.REMOTE_AHEAD
        assert decision.action is SyncAction.DOWNLOAD
        assert decision.requires_confirmation

    def test_equal_is_in_sync(self) -> None:
        """Equal timestamps need nothing."""
        decision = decide(LOCAL, LOCAL)
        assert decision.state is SyncState.IN_SYNC
        assert decision.action is SyncAction.NOOP
        assert not decision.requires_confirmation

    def test_unreadable_asks(self) -> None:
        """An unreadable manifest leaves the choice to the user."""
        decision = decide(LOCAL, None, readable=False)
        assert decision.state is SyncState.UNKNOWN
        assert decision.action is SyncAction.ASK_USER

    def test_overrides_always_offered(self) -> None:
        """Manual upload and download are reachable from every state."""
        for last_saved in (None, LOCAL, LOCAL - timedelta(days=1), LOCAL + timedelta(days=1)):
            assert decide(LOCAL, last_saved).overrides == OVERRIDE_ACTIONS
        assert SyncAction.UPLOAD in OVERRIDE_ACTIONS
        assert SyncAction.DOWNLOAD in OVERRIDE_ACTIONS

    def test_deterministic(self) -> None:
        """Same inputs give the same decision."""
        last = LOCAL - timedelta(minutes=5)
        assert decide(LOCAL, last) == decide(LOCAL, last)

    def test_carries_inputs(self) -> None:
        """The decision records what it was computed from."""
        last = LOCAL + timedelta(seconds=3)
        decision = decide(LOCAL, last)
        assert decision.local_newest == LOCAL
        assert decision.last_saved == last


class TestRunTracker:
    """Tests for RunTracker."""

    def test_full_run(self) -> None:
        """A run with a backup visits every phase."""
        tracker = RunTracker("celeste")
        for phase in (
            RunPhase.INSPECTING,
            RunPhase.DECIDING,
            RunPhase.BACKING_UP,
            RunPhase.EXECUTING,
        ):
            tracker.transition_to(phase)
        tracker.finish()

        assert tracker.phase is RunPhase.IDLE
        assert tracker.history == [
            RunPhase.IDLE,
            RunPhase.INSPECTING,
            RunPhase.DECIDING,
            RunPhase.BACKING_UP,
            RunPhase.EXECUTING,
            RunPhase.IDLE,
        ]

    def test_cannot_execute_before_deciding(self) -> None:
        """Execution is only reachable after a decision."""
        tracker = RunTracker("celeste")
        tracker.transition_to(RunPhase.INSPECTING)
        with pytest.raises(InvalidTransitionError, match="INSPECTING to EXECUTING"):
            tracker.transition_to(RunPhase.EXECUTING)

    def test_cannot_start_twice(self) -> None:
        """IDLE only leads to INSPECTING."""
        assert VALID_TRANSITIONS[RunPhase.IDLE] == {RunPhase.INSPECTING}

    def test_finish_is_idempotent(self) -> None:
        """Finishing an idle tracker records nothing."""
        tracker = RunTracker("celeste")
        tracker.finish()
        assert tracker.history == [RunPhase.IDLE]

    def test_callback(self) -> None:
        """on_transition sees every transition."""
        seen: list[tuple[RunPhase, RunPhase]] = []
        tracker = RunTracker("celeste", on_transition=lambda a, b: seen.append((a, b)))
        tracker.transition_to(RunPhase.INSPECTING)
        tracker.finish()
        assert seen == [
            (RunPhase.IDLE, RunPhase.INSPECTING),
            (RunPhase.INSPECTING, RunPhase.IDLE),
        ]
