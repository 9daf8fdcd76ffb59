"""Lazy, deterministic walking of a directory tree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator

from .filesystem import UnreadableError
from .ignore import IgnoreRules
from .models import Entry, EntryKind

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Path, UnreadableError], None]


class TreeWalker:
    """Depth-first walk of ``root`` yielding :class:`Entry` values.

    Siblings are visited in name order and a directory is always yielded
    before its children. Symlinks are yielded as ``SYMLINK`` entries and never
    followed. Calling :meth:`prune` with the relative path of the directory
    that was just yielded keeps the walk from descending into it. When
    ``rules`` are given, each directory's own ignore files are loaded before
    its children are filtered.

    Each iteration re-reads the filesystem; nothing is cached between walks.
    """

    def __init__(
        self,
        root: Path,
        *,
        rules: IgnoreRules | None = None,
        exclude: Iterable[Path] = (),
        on_error: ErrorHandler | None = None,
    ) -> None:
        self.root = root
        self.rules = rules
        self.exclude = frozenset(exclude)
        self.on_error = on_error
        self._pruned: set[Path] = set()

    def __iter__(self) -> Iterator[Entry]:
        return self.walk()

    def walk(self) -> Iterator[Entry]:
        self._pruned.clear()
        yield from self._walk_directory(Path())

    def prune(self, relative_path: Path) -> None:
        self._pruned.add(relative_path)

    def _walk_directory(self, relative: Path) -> Iterator[Entry]:
        directory = self.root / relative
        try:
            with os.scandir(directory) as iterator:
                children = sorted(iterator, key=lambda item: item.name)
        except OSError as exc:
            self._report(relative, UnreadableError(directory, exc))
            return

        if self.rules is not None:
            self.rules.load_directory(self.root, relative)

        for child in children:
            child_relative = relative / child.name
            try:
                entry = self._make_entry(child, child_relative)
            except OSError as exc:
                self._report(child_relative, UnreadableError(Path(child.path), exc))
                continue

            if entry is None:
                continue

            yield entry

            if entry.kind is EntryKind.DIRECTORY and child_relative not in self._pruned:
                yield from self._walk_directory(child_relative)

    def _make_entry(self, child: os.DirEntry, relative: Path) -> Entry | None:
        if Path(child.path) in self.exclude:
            logger.debug("Not walking into excluded path %s", child.path)
            return None

        if child.is_symlink():
            kind = EntryKind.SYMLINK
        elif child.is_dir(follow_symlinks=False):
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.FILE

        if self.rules is not None and self.rules.is_ignored(relative, is_dir=kind is EntryKind.DIRECTORY):
            logger.debug("Ignoring %s", relative.as_posix())
            return None

        if kind is EntryKind.SYMLINK:
            return Entry(relative, kind, os.readlink(child.path))
        return Entry(relative, kind)

    def _report(self, relative: Path, error: UnreadableError) -> None:
        logger.warning("%s", error)
        if self.on_error is None:
            raise error
        self.on_error(relative, error)
