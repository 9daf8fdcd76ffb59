"""High level orchestration for configman runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from .config import DEFAULT_CONFIG_FILENAME, Settings
from .executor import ActionExecutor, Confirm
from .filesystem import UnreadableError, is_within, probe
from .ignore import IgnoreRules
from .models import UNREADABLE, Action, ActionKind, Outcome, Report, ReportItem
from .planner import plan_entry
from .removal import RemovalEngine
from .walker import TreeWalker

logger = logging.getLogger(__name__)

PlannedStep = tuple[Action, UnreadableError | None]


class LinkManager:
    """Coordinates the link and remove modes for one set of settings."""

    def __init__(self, settings: Settings, confirm: Confirm | None = None) -> None:
        self.settings = settings
        self.executor = ActionExecutor(settings, confirm)

    def run(self) -> Report:
        logger.debug(
            "Running in %s mode: %s -> %s",
            "remove" if self.settings.remove else "link",
            self.settings.source,
            self.settings.destination,
        )
        if self.settings.remove:
            return self.remove()
        return self.link()

    def plan(self) -> list[Action]:
        """Return the normal-mode plan without touching the filesystem."""

        return [action for action, _error in self._steps(self._new_walker_state())]

    def link(self) -> Report:
        """Walk the source, planning and executing one entry at a time."""

        report = Report()
        state = self._new_walker_state()

        for action, error in self._steps(state):
            if error is not None:
                report.add(ReportItem(action, Outcome.FAILED, str(error)))
                continue

            item = report.add(self.executor.execute(action))
            if action.kind is ActionKind.DESCEND and item.outcome in (Outcome.DECLINED, Outcome.FAILED):
                state.walker.prune(action.relative_path)

        return report

    def remove(self) -> Report:
        """Unlink every destination symlink pointing into the source."""

        report = Report()
        destination = self.settings.destination

        def on_error(relative: Path, error: UnreadableError) -> None:
            action = Action.skip(destination / relative, relative, UNREADABLE)
            report.add(ReportItem(action, Outcome.FAILED, str(error)))

        engine = RemovalEngine(self.settings, self.executor)
        plan = engine.scan(on_error=on_error)
        return engine.apply(plan, report)

    # ------------------------------------------------------------------
    # Internal helpers

    def _new_walker_state(self) -> "_SourceWalk":
        source = self.settings.source
        destination = self.settings.destination
        rules = IgnoreRules.for_root(source, self.settings.ignore)
        rules.extend([f"/{DEFAULT_CONFIG_FILENAME}"])
        exclude = [destination] if is_within(destination, source) else []
        return _SourceWalk(source, rules=rules, exclude=exclude)

    def _steps(self, walk: "_SourceWalk") -> Iterator[PlannedStep]:
        source = self.settings.source
        destination = self.settings.destination

        for entry in walk.walker:
            yield from walk.drain_errors(destination)

            target = destination / entry.relative_path
            try:
                state = probe(target)
            except UnreadableError as exc:
                walk.walker.prune(entry.relative_path)
                yield Action.skip(target, entry.relative_path, UNREADABLE), exc
                continue

            action = plan_entry(entry, state, source_root=source, destination_root=destination)
            if action.kind is ActionKind.CONFLICT:
                walk.walker.prune(entry.relative_path)
            yield action, None

        yield from walk.drain_errors(destination)


class _SourceWalk:
    """A source walker plus the unreadable paths it reported along the way."""

    def __init__(self, root: Path, *, rules: IgnoreRules, exclude: list[Path]) -> None:
        self._errors: list[tuple[Path, UnreadableError]] = []
        self.walker = TreeWalker(root, rules=rules, exclude=exclude, on_error=self.record_error)

    def record_error(self, relative: Path, error: UnreadableError) -> None:
        self._errors.append((relative, error))

    def drain_errors(self, destination: Path) -> Iterator[PlannedStep]:
        while self._errors:
            relative, error = self._errors.pop(0)
            yield Action.skip(destination / relative, relative, UNREADABLE), error
