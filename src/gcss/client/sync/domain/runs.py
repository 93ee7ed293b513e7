"""Engine run state machine.

States:
    IDLE -> INSPECTING -> DECIDING -> BACKING_UP -> EXECUTING -> IDLE
                                   -> EXECUTING
                                   -> IDLE (declined / nothing to do)

Any phase may fall back to IDLE when the run aborts. All state transitions
are validated.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum, auto


class RunPhase(IntEnum):
    """Phase of an engine run."""

    IDLE = auto()
    INSPECTING = auto()
    DECIDING = auto()
    BACKING_UP = auto()
    EXECUTING = auto()


# Valid state transitions
VALID_TRANSITIONS: dict[RunPhase, set[RunPhase]] = {
    RunPhase.IDLE: {RunPhase.INSPECTING},
    RunPhase.INSPECTING: {RunPhase.DECIDING, RunPhase.IDLE},
    RunPhase.DECIDING: {RunPhase.BACKING_UP, RunPhase.EXECUTING, RunPhase.IDLE},
    RunPhase.BACKING_UP: {RunPhase.EXECUTING, RunPhase.IDLE},
    RunPhase.EXECUTING: {RunPhase.IDLE},
}


class InvalidTransitionError(Exception):
    """Raised when attempting invalid state transition."""

    pass


@dataclass
class RunTracker:
    """Tracks the phase of a single engine run.

    Attributes:
        game: Game being synchronized.
        phase: Current phase.
        history: Every phase entered, in order (starts with IDLE).
    """

    game: str
    phase: RunPhase = RunPhase.IDLE
    history: list[RunPhase] = field(default_factory=lambda: [RunPhase.IDLE])
    on_transition: Callable[[RunPhase, RunPhase], None] | None = field(
        default=None, repr=False
    )

    def transition_to(self, new_phase: RunPhase) -> None:
        """Transition to a new phase with validation."""
        if new_phase not in VALID_TRANSITIONS[self.phase]:
            raise InvalidTransitionError(
                f"Cannot transition from {self.phase.name} to {new_phase.name}"
            )
        old_phase = self.phase
        self.phase = new_phase
        self.history.append(new_phase)
        if self.on_transition:
            self.on_transition(old_phase, new_phase)

    def finish(self) -> None:
        """Return to IDLE (success, decline or abort)."""
        if self.phase is not RunPhase.IDLE:
            self.transition_to(RunPhase.IDLE)
