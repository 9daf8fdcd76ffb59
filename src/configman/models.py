"""Shared models and enums for configman."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator

ALREADY_LINKED = "already linked"
FOREIGN_SYMLINK = "foreign symlink"
CONTENT_IN_THE_WAY = "real content in the way"
EXPECTED_DIRECTORY = "expected directory"
UNREADABLE = "unreadable"
DIRECTORY_NOT_EMPTY = "directory not empty"


class EntryKind(str, Enum):
    """Kinds of entries found while walking a tree."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True, slots=True)
class Entry:
    """A path relative to the walked root together with its kind."""

    relative_path: Path
    kind: EntryKind
    symlink_target: str | None = None


class StateKind(str, Enum):
    """What the probe found at a destination path."""

    ABSENT = "absent"
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True, slots=True)
class DestinationState:
    kind: StateKind
    symlink_target: str | None = None


ABSENT = DestinationState(StateKind.ABSENT)


class ActionKind(str, Enum):
    """Steps the planner and removal engine can produce."""

    LINK = "link"
    DESCEND = "descend"
    SKIP = "skip"
    CONFLICT = "conflict"
    UNLINK = "unlink"
    PRUNE_DIR = "prune_dir"


@dataclass(frozen=True, slots=True)
class Action:
    """A single planned step against the destination tree.

    ``destination`` is always the absolute destination path the action
    concerns. ``source`` is only set for links, ``reason`` for skips and
    conflicts, ``removed_target`` for unlinks and ``create`` for descends that
    still have to create the directory.
    """

    kind: ActionKind
    destination: Path
    relative_path: Path
    source: Path | None = None
    reason: str | None = None
    create: bool = False
    removed_target: str | None = None

    @classmethod
    def link(cls, source: Path, destination: Path, relative_path: Path) -> "Action":
        return cls(ActionKind.LINK, destination, relative_path, source=source)

    @classmethod
    def descend(cls, destination: Path, relative_path: Path, *, create: bool) -> "Action":
        return cls(ActionKind.DESCEND, destination, relative_path, create=create)

    @classmethod
    def skip(cls, destination: Path, relative_path: Path, reason: str) -> "Action":
        return cls(ActionKind.SKIP, destination, relative_path, reason=reason)

    @classmethod
    def conflict(cls, destination: Path, relative_path: Path, reason: str) -> "Action":
        return cls(ActionKind.CONFLICT, destination, relative_path, reason=reason)

    @classmethod
    def unlink(cls, destination: Path, relative_path: Path, removed_target: str) -> "Action":
        return cls(ActionKind.UNLINK, destination, relative_path, removed_target=removed_target)

    @classmethod
    def prune_dir(cls, destination: Path, relative_path: Path) -> "Action":
        return cls(ActionKind.PRUNE_DIR, destination, relative_path)

    @property
    def mutates(self) -> bool:
        if self.kind is ActionKind.DESCEND:
            return self.create
        return self.kind in (ActionKind.LINK, ActionKind.UNLINK, ActionKind.PRUNE_DIR)

    def describe(self) -> str:
        """Return a one-line, human readable description."""

        if self.kind is ActionKind.LINK:
            return f"Create symlink {self.destination} -> {self.source}?"
        if self.kind is ActionKind.DESCEND:
            if self.create:
                return f"Create dir {self.destination}?"
            return f"Merge into {self.destination}"
        if self.kind is ActionKind.UNLINK:
            return f"Remove {self.destination} (-> {self.removed_target})?"
        if self.kind is ActionKind.PRUNE_DIR:
            return f"Remove empty dir {self.destination}?"
        return f"{self.kind.value} {self.destination}: {self.reason}"


class Outcome(str, Enum):
    """What happened to an action when the plan was executed."""

    APPLIED = "applied"
    WOULD_APPLY = "would_apply"
    DECLINED = "declined"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ReportItem:
    action: Action
    outcome: Outcome
    error: str | None = None


@dataclass(slots=True)
class Report:
    """Ordered record of every action and its outcome for one run."""

    items: list[ReportItem] = field(default_factory=list)

    def add(self, item: ReportItem) -> ReportItem:
        self.items.append(item)
        return item

    def __iter__(self) -> Iterator[ReportItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def actions(self) -> list[Action]:
        return [item.action for item in self.items]

    @property
    def conflicts(self) -> list[ReportItem]:
        return [item for item in self.items if item.action.kind is ActionKind.CONFLICT]

    @property
    def failures(self) -> list[ReportItem]:
        return [item for item in self.items if item.outcome is Outcome.FAILED]

    @property
    def mutations(self) -> list[ReportItem]:
        return [item for item in self.items if item.action.mutates]

    @property
    def has_problems(self) -> bool:
        """``True`` when the run recorded a conflict or a failed action."""

        return any(
            item.action.kind is ActionKind.CONFLICT or item.outcome is Outcome.FAILED for item in self.items
        )

    def visible(self, verbose: bool = False) -> list[ReportItem]:
        """Return the items worth showing; everything when ``verbose``."""

        if verbose:
            return list(self.items)
        return [
            item
            for item in self.items
            if item.action.mutates
            or item.action.kind is ActionKind.CONFLICT
            or item.outcome in (Outcome.FAILED, Outcome.DECLINED)
        ]
