"""Decide what to do with each source entry."""

from __future__ import annotations

from pathlib import Path

from .filesystem import symlink_points_to
from .models import (
    ALREADY_LINKED,
    CONTENT_IN_THE_WAY,
    EXPECTED_DIRECTORY,
    FOREIGN_SYMLINK,
    Action,
    DestinationState,
    Entry,
    EntryKind,
    StateKind,
)


def plan_entry(entry: Entry, state: DestinationState, *, source_root: Path, destination_root: Path) -> Action:
    """Return the single action reconciling ``entry`` with the destination ``state``.

    Files and symlinks from the source are linked into free slots. Source
    directories are never linked: they are created at the destination when
    absent and merged into when a real directory already exists there.
    Anything else occupying the slot is a conflict.
    """

    source = source_root / entry.relative_path
    destination = destination_root / entry.relative_path

    if entry.kind is EntryKind.DIRECTORY:
        if state.kind is StateKind.ABSENT:
            return Action.descend(destination, entry.relative_path, create=True)
        if state.kind is StateKind.DIRECTORY:
            return Action.descend(destination, entry.relative_path, create=False)
        return Action.conflict(destination, entry.relative_path, EXPECTED_DIRECTORY)

    if state.kind is StateKind.ABSENT:
        return Action.link(source, destination, entry.relative_path)
    if state.kind is StateKind.SYMLINK:
        if state.symlink_target is not None and symlink_points_to(destination, state.symlink_target, source):
            return Action.skip(destination, entry.relative_path, ALREADY_LINKED)
        return Action.conflict(destination, entry.relative_path, FOREIGN_SYMLINK)
    return Action.conflict(destination, entry.relative_path, CONTENT_IN_THE_WAY)
