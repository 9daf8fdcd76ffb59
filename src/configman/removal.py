"""Removal of links previously created for a source/destination pair."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .config import Settings
from .executor import ActionExecutor
from .filesystem import is_empty_directory, is_within, link_target
from .models import DIRECTORY_NOT_EMPTY, Action, ActionKind, EntryKind, Outcome, Report, ReportItem
from .walker import ErrorHandler, TreeWalker

logger = logging.getLogger(__name__)


class RemovalEngine:
    """Unlink destination symlinks that point into the source tree.

    Removal runs in two phases. :meth:`scan` walks the destination and builds
    the plan: an ``UNLINK`` for every symlink whose target lies inside the
    source root, followed by a ``PRUNE_DIR`` for every mirrored directory that
    would be left empty, deepest first. :meth:`apply` executes that plan.

    Only destination directories that also exist as real directories in the
    source are scanned, and the source root itself is never entered. Those
    mirrored directories are the ones a link run creates, so they are also
    the only prune candidates.
    """

    def __init__(self, settings: Settings, executor: ActionExecutor) -> None:
        self.settings = settings
        self.executor = executor

    def scan(self, on_error: ErrorHandler | None = None) -> list[Action]:
        source = self.settings.source
        destination = self.settings.destination
        exclude = [source] if is_within(source, destination) else []
        walker = TreeWalker(destination, exclude=exclude, on_error=on_error)

        unlinks: list[Action] = []
        mirrored: list[Path] = []
        for entry in walker:
            if entry.kind is EntryKind.DIRECTORY:
                counterpart = source / entry.relative_path
                if counterpart.is_symlink() or not counterpart.is_dir():
                    walker.prune(entry.relative_path)
                else:
                    mirrored.append(destination / entry.relative_path)
                continue

            if entry.kind is not EntryKind.SYMLINK or entry.symlink_target is None:
                continue

            link = destination / entry.relative_path
            target = link_target(link, entry.symlink_target)
            if target != source and is_within(target, source):
                unlinks.append(Action.unlink(link, entry.relative_path, entry.symlink_target))
            else:
                logger.debug("Leaving %s alone, it points outside the source", link)

        return unlinks + self._plan_prunes(unlinks, mirrored)

    def apply(self, plan: list[Action], report: Report | None = None) -> Report:
        report = report if report is not None else Report()
        for action in plan:
            if (
                action.kind is ActionKind.PRUNE_DIR
                and not self.settings.dry_run
                and not is_empty_directory(action.destination)
            ):
                skipped = Action.skip(action.destination, action.relative_path, DIRECTORY_NOT_EMPTY)
                report.add(ReportItem(skipped, Outcome.APPLIED))
                continue
            report.add(self.executor.execute(action))
        return report

    def _plan_prunes(self, unlinks: list[Action], mirrored: list[Path]) -> list[Action]:
        # Children sort before their parents, so a directory is only judged
        # once every mirrored directory below it has been.
        destination = self.settings.destination
        removed = {action.destination for action in unlinks}

        prunes: list[Action] = []
        for directory in sorted(mirrored, key=lambda path: (-len(path.parts), path)):
            try:
                children = [directory / name for name in os.listdir(directory)]
            except OSError as exc:
                logger.warning("Cannot list %s: %s", directory, exc)
                continue
            if all(child in removed for child in children):
                removed.add(directory)
                prunes.append(Action.prune_dir(directory, directory.relative_to(destination)))
        return prunes
