"""Carry out planned actions against the destination tree."""

from __future__ import annotations

import logging
from typing import Callable

from .config import Settings
from .filesystem import create_symlink, ensure_directory, remove_empty_directory, remove_symlink
from .models import Action, ActionKind, Outcome, ReportItem

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


class ActionExecutor:
    """Apply actions one at a time, honouring dry-run and interactive modes.

    A failing action is reported as ``FAILED`` and never raises, so the
    caller can carry on with the rest of the plan.
    """

    def __init__(self, settings: Settings, confirm: Confirm | None = None) -> None:
        self.settings = settings
        self.confirm = confirm

    def execute(self, action: Action) -> ReportItem:
        if action.kind is ActionKind.CONFLICT:
            logger.warning("[CONFLICT] %s (%s)", action.destination, action.reason)
        elif action.kind is ActionKind.SKIP:
            logger.info("[SKIP] %s (%s)", action.destination, action.reason)

        if self.settings.dry_run:
            if action.mutates:
                logger.info("(dry-run) %s", _log_line(action))
            return ReportItem(action, Outcome.WOULD_APPLY)

        if not action.mutates:
            return ReportItem(action, Outcome.APPLIED)

        if self.settings.interactive:
            if self.confirm is None or not self.confirm(action.describe()):
                logger.info("[DECLINED] %s", action.destination)
                return ReportItem(action, Outcome.DECLINED)

        try:
            self._apply(action)
        except OSError as exc:
            logger.warning("[FAILED] %s: %s", action.destination, exc)
            return ReportItem(action, Outcome.FAILED, str(exc))

        logger.info("%s", _log_line(action))
        return ReportItem(action, Outcome.APPLIED)

    def _apply(self, action: Action) -> None:
        if action.kind is ActionKind.LINK:
            create_symlink(action.source, action.destination, relative=self.settings.relative)
        elif action.kind is ActionKind.DESCEND:
            ensure_directory(action.destination)
        elif action.kind is ActionKind.UNLINK:
            remove_symlink(action.destination)
        elif action.kind is ActionKind.PRUNE_DIR:
            remove_empty_directory(action.destination)


def _log_line(action: Action) -> str:
    if action.kind is ActionKind.LINK:
        return f"[LINK] {action.destination} -> {action.source}"
    if action.kind is ActionKind.DESCEND:
        return f"[CREATE] {action.destination}"
    if action.kind is ActionKind.UNLINK:
        return f"[UNLINKED] {action.destination}"
    if action.kind is ActionKind.PRUNE_DIR:
        return f"[PRUNED] {action.destination}"
    return f"[{action.kind.value.upper()}] {action.destination}"
