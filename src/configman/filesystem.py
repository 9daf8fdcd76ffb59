"""Filesystem helpers for configman."""

from __future__ import annotations

import errno
import os
import stat
from pathlib import Path

from .models import ABSENT, DestinationState, StateKind


class UnreadableError(RuntimeError):
    """Raised when a path cannot be inspected because of a permission or I/O error."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Cannot read '{path}': {cause.strerror or cause}")
        self.path = path
        self.cause = cause


def probe(path: Path) -> DestinationState:
    """Describe what exists at ``path`` without following a final symlink."""

    try:
        stat_result = os.lstat(path)
    except (FileNotFoundError, NotADirectoryError):
        return ABSENT
    except OSError as exc:
        raise UnreadableError(path, exc) from exc

    if stat.S_ISLNK(stat_result.st_mode):
        try:
            target = os.readlink(path)
        except OSError as exc:
            raise UnreadableError(path, exc) from exc
        return DestinationState(StateKind.SYMLINK, target)
    if stat.S_ISDIR(stat_result.st_mode):
        return DestinationState(StateKind.DIRECTORY)
    return DestinationState(StateKind.FILE)


def link_target(link: Path, raw_target: str) -> Path:
    """Return the absolute, lexically normalised path ``link`` points at."""

    return Path(os.path.normpath(link.parent / raw_target))


def symlink_points_to(link: Path, raw_target: str, expected: Path) -> bool:
    """Return ``True`` if a link at ``link`` with ``raw_target`` refers to ``expected``."""

    return link_target(link, raw_target) == Path(os.path.normpath(expected))


def is_within(path: Path, root: Path) -> bool:
    return path.is_relative_to(root)


def create_symlink(source: Path, link: Path, *, relative: bool = False) -> None:
    """Create ``link`` pointing at ``source``.

    With ``relative`` the stored target is relative to the link's directory,
    falling back to the absolute path when no relative path exists.
    """

    target: str | Path = source
    if relative:
        try:
            target = os.path.relpath(source, start=link.parent)
        except ValueError:
            target = source
    os.symlink(target, link)


def ensure_directory(path: Path) -> bool:
    """Create ``path`` as a directory; returns ``True`` if it was created."""

    try:
        path.mkdir()
    except FileExistsError:
        if path.is_dir() and not path.is_symlink():
            return False
        raise
    return True


def remove_symlink(path: Path) -> None:
    """Unlink ``path``, refusing to touch anything that is not a symlink."""

    if not path.is_symlink():
        raise OSError(errno.EEXIST, "Path is no longer a symlink", str(path))
    path.unlink()


def is_empty_directory(path: Path) -> bool:
    try:
        with os.scandir(path) as entries:
            return next(entries, None) is None
    except OSError:
        return False


def remove_empty_directory(path: Path) -> None:
    os.rmdir(path)
