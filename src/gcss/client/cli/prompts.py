"""Terminal prompts for the sync engine."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gcss.client.sync.engine import Confirmation
from gcss.core.timestamps import format_timestamp
from gcss.core.types import SyncAction

if TYPE_CHECKING:
    from gcss.client.sync.domain.decisions import SyncDecision
    from gcss.core.config import GameProfile

_CONFIRMATIONS = {"y": Confirmation.YES, "n": Confirmation.NO, "e": Confirmation.OVERRIDE}
_OVERRIDES = {"u": SyncAction.UPLOAD, "d": SyncAction.DOWNLOAD, "e": SyncAction.NOOP}


def describe_decision(decision: SyncDecision) -> None:
    """Print the decision and both timestamps."""
    click.echo(f"{decision.reason}.")
    cloud = format_timestamp(decision.last_saved) if decision.last_saved else "never"
    click.echo(f"Cloud date: {cloud}")
    click.echo(f"Local date: {format_timestamp(decision.local_newest)}")


class ClickPrompter:
    """Prompter asking on the terminal.

    Args:
        backup: Pre-answered backup question (None asks each time).
        assume_yes: Accept the recommended Upload/Download without asking.
    """

    def __init__(self, backup: bool | None = None, assume_yes: bool = False) -> None:
        self._backup = backup
        self._assume_yes = assume_yes

    def confirm_action(self, game: str, decision: SyncDecision) -> Confirmation:
        describe_decision(decision)
        if self._assume_yes:
            return Confirmation.YES
        if decision.action is SyncAction.UPLOAD:
            question = "Would you like to upload it? (Y/N/E)"
        else:
            question = "Would you like to download the latest save? (Y/N/E)"
        answer = click.prompt(
            question,
            type=click.Choice(list(_CONFIRMATIONS), case_sensitive=False),
            show_choices=False,
        )
        return _CONFIRMATIONS[answer.lower()]

    def choose_override(self, game: str, decision: SyncDecision) -> SyncAction:
        # Upload/Download recommendations were already described by confirm_action
        if not decision.action.is_mutating:
            describe_decision(decision)
        answer = click.prompt(
            "Upload, download or exit? (U/D/E)",
            type=click.Choice(list(_OVERRIDES), case_sensitive=False),
            show_choices=False,
        )
        return _OVERRIDES[answer.lower()]

    def confirm_backup(self, profile: GameProfile) -> bool:
        if self._backup is not None:
            return self._backup
        return click.confirm(
            "Before we move any files, would you like to backup your saves?"
        )
