from __future__ import annotations

from pathlib import Path

import pytest

from configman.models import (
    ABSENT,
    ALREADY_LINKED,
    CONTENT_IN_THE_WAY,
    EXPECTED_DIRECTORY,
    FOREIGN_SYMLINK,
    ActionKind,
    DestinationState,
    Entry,
    EntryKind,
    StateKind,
)
from configman.planner import plan_entry

SOURCE = Path("/src")
DEST = Path("/dest")


def _plan(entry: Entry, state: DestinationState):
    return plan_entry(entry, state, source_root=SOURCE, destination_root=DEST)


@pytest.mark.parametrize("kind", [EntryKind.FILE, EntryKind.SYMLINK])
def test_leaf_into_absent_slot_is_linked(kind: EntryKind) -> None:
    action = _plan(Entry(Path("a/b.txt"), kind), ABSENT)

    assert action.kind is ActionKind.LINK
    assert action.source == SOURCE / "a/b.txt"
    assert action.destination == DEST / "a/b.txt"
    assert action.relative_path == Path("a/b.txt")
    assert action.mutates


def test_leaf_already_linked_is_skipped() -> None:
    absolute = _plan(Entry(Path("a/b.txt"), EntryKind.FILE), DestinationState(StateKind.SYMLINK, "/src/a/b.txt"))
    relative = _plan(Entry(Path("a/b.txt"), EntryKind.FILE), DestinationState(StateKind.SYMLINK, "../../src/a/b.txt"))

    for action in (absolute, relative):
        assert action.kind is ActionKind.SKIP
        assert action.reason == ALREADY_LINKED
        assert not action.mutates


def test_leaf_with_foreign_symlink_conflicts() -> None:
    action = _plan(Entry(Path(".zshrc"), EntryKind.FILE), DestinationState(StateKind.SYMLINK, "/elsewhere/.zshrc"))

    assert action.kind is ActionKind.CONFLICT
    assert action.reason == FOREIGN_SYMLINK


@pytest.mark.parametrize("state", [StateKind.FILE, StateKind.DIRECTORY])
def test_leaf_with_real_content_conflicts(state: StateKind) -> None:
    action = _plan(Entry(Path(".zshrc"), EntryKind.SYMLINK, "x"), DestinationState(state))

    assert action.kind is ActionKind.CONFLICT
    assert action.reason == CONTENT_IN_THE_WAY


def test_directory_into_absent_slot_is_created() -> None:
    action = _plan(Entry(Path(".config"), EntryKind.DIRECTORY), ABSENT)

    assert action.kind is ActionKind.DESCEND
    assert action.create
    assert action.mutates


def test_directory_into_existing_directory_is_merged() -> None:
    action = _plan(Entry(Path(".config"), EntryKind.DIRECTORY), DestinationState(StateKind.DIRECTORY))

    assert action.kind is ActionKind.DESCEND
    assert not action.create
    assert not action.mutates


@pytest.mark.parametrize(
    "state",
    [DestinationState(StateKind.FILE), DestinationState(StateKind.SYMLINK, "/src/.config")],
)
def test_directory_over_file_or_symlink_conflicts(state: DestinationState) -> None:
    action = _plan(Entry(Path(".config"), EntryKind.DIRECTORY), state)

    assert action.kind is ActionKind.CONFLICT
    assert action.reason == EXPECTED_DIRECTORY
