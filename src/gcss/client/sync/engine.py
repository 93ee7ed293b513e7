"""Sync engine: one game, one run.

Architecture:
    inspect + read manifest -> decide -> confirm -> (backup) -> execute

The engine never talks to the terminal. Every confirmation goes through a
``Prompter``; the CLI supplies one backed by click prompts, tests supply
scripted ones.

Errors from any step end the run and are returned in the SyncOutcome; the
caller decides what to show and which exit code to use.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Protocol

from gcss.client.sync import inspector
from gcss.client.sync.backup import BackupManager
from gcss.client.sync.domain.decisions import SyncDecision, decide
from gcss.client.sync.domain.runs import RunPhase, RunTracker
from gcss.client.sync.executor import SyncExecutor
from gcss.client.sync.manifest import ManifestService
from gcss.client.sync.types import (
    Manifest,
    RunStatus,
    SaveSnapshot,
    SyncError,
    SyncOutcome,
    UnsupportedActionError,
)
from gcss.core.types import SyncAction

if TYPE_CHECKING:
    from gcss.client.api import ContentStore
    from gcss.core.config import GameProfile

logger = logging.getLogger(__name__)


class Confirmation(Enum):
    """Answer to "proceed with the recommended action?"."""

    YES = auto()
    NO = auto()
    OVERRIDE = auto()  # Pick the action manually


class Prompter(Protocol):
    """Source of user decisions for the engine."""

    def confirm_action(self, game: str, decision: SyncDecision) -> Confirmation:
        """Accept, refuse or override the recommended Upload/Download."""
        ...

    def choose_override(self, game: str, decision: SyncDecision) -> SyncAction:
        """Pick UPLOAD, DOWNLOAD or NOOP (exit) manually."""
        ...

    def confirm_backup(self, profile: GameProfile) -> bool:
        """Whether to back up the save directory before a mutating action."""
        ...


@dataclass(frozen=True)
class Evaluation:
    """Local and remote state of a game plus the resulting decision."""

    snapshot: SaveSnapshot
    manifest: Manifest
    decision: SyncDecision


class SyncEngine:
    """Synchronizes one game at a time."""

    def __init__(
        self,
        store: ContentStore,
        prompter: Prompter,
        backup_manager: BackupManager | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Remote content store.
            prompter: Source of confirmations.
            backup_manager: Backup manager (default uses the wall clock).
        """
        self._prompter = prompter
        self._manifests = ManifestService(store)
        self._executor = SyncExecutor(store, self._manifests)
        self._backups = backup_manager or BackupManager()

    def evaluate(self, profile: GameProfile) -> Evaluation:
        """Inspect both sides and decide, without mutating anything.

        Raises:
            SyncError: If either side cannot be read.
        """
        snapshot = inspector.inspect(profile.local_path)
        manifest = self._manifests.read(profile.name)
        decision = decide(
            snapshot.modified_at, manifest.last_saved, readable=manifest.readable
        )
        logger.debug(f"{profile.name}: {decision.state.value} -> {decision.action.value}")
        return Evaluation(snapshot=snapshot, manifest=manifest, decision=decision)

    def run(self, profile: GameProfile) -> SyncOutcome:
        """Run a full read-decide-act cycle for ``profile``.

        Returns:
            SyncOutcome. ``error`` is set (and ``status`` is FAILED) when a
            SyncError aborted the run.
        """
        tracker = RunTracker(
            profile.name, on_transition=self._log_transition(profile.name)
        )
        outcome = SyncOutcome(game=profile.name, status=RunStatus.COMPLETED)
        try:
            tracker.transition_to(RunPhase.INSPECTING)
            evaluation = self.evaluate(profile)
            outcome.decision = evaluation.decision

            tracker.transition_to(RunPhase.DECIDING)
            action = self._choose_action(profile.name, evaluation.decision)
            if action is None:
                logger.info(f"{profile.name}: cancelled by user")
                outcome.status = RunStatus.CANCELLED
                return outcome
            outcome.action = action
            if not action.is_mutating:
                if evaluation.decision.action is not SyncAction.NOOP:
                    outcome.status = RunStatus.CANCELLED
                return outcome

            if profile.backup_path is not None and self._prompter.confirm_backup(profile):
                tracker.transition_to(RunPhase.BACKING_UP)
                outcome.backup = self._backups.backup(profile)

            tracker.transition_to(RunPhase.EXECUTING)
            if action is SyncAction.UPLOAD:
                outcome.upload = self._executor.upload(
                    profile, evaluation.snapshot, evaluation.manifest
                )
            else:
                outcome.download = self._executor.download(profile, evaluation.manifest)
        except SyncError as e:
            logger.error(f"Sync of {profile.name} failed during {tracker.phase.name}: {e}")
            outcome.status = RunStatus.FAILED
            outcome.error = e
        finally:
            tracker.finish()
        return outcome

    @staticmethod
    def _log_transition(game: str) -> Callable[[RunPhase, RunPhase], None]:
        def log(old: RunPhase, new: RunPhase) -> None:
            logger.debug(f"{game}: {old.name} -> {new.name}")

        return log

    def _choose_action(self, game: str, decision: SyncDecision) -> SyncAction | None:
        """Turn the recommendation into the action to execute.

        Returns:
            The action, or None if the user declined.

        Raises:
            UnsupportedActionError: If the prompter picked an action that is
                not offered.
        """
        if decision.action in (SyncAction.UPLOAD, SyncAction.DOWNLOAD):
            answer = self._prompter.confirm_action(game, decision)
            if answer is Confirmation.YES:
                return decision.action
            if answer is Confirmation.NO:
                return None
        choice = self._prompter.choose_override(game, decision)
        if choice not in decision.overrides:
            raise UnsupportedActionError(choice)
        return choice
