"""Gitignore-style filtering of the source tree."""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable

logger = logging.getLogger(__name__)

IGNORE_FILENAMES = (".gitignore", ".ignore")
GIT_EXCLUDE = Path(".git") / "info" / "exclude"
BUILTIN_PATTERNS = (".git/",)


@functools.lru_cache(maxsize=None)
def _compile(pattern: str) -> re.Pattern[str]:
    """Translate a gitignore glob into a regular expression.

    ``*`` and ``?`` never match ``/``. ``**`` matches any number of path
    segments when it stands alone between slashes or at either end.
    """

    parts: list[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "\\" and index + 1 < length:
            parts.append(re.escape(pattern[index + 1]))
            index += 2
            continue
        if pattern.startswith("**", index):
            after = index + 2
            whole_segment = index == 0 or pattern[index - 1] == "/"
            if whole_segment and after < length and pattern[after] == "/":
                parts.append("(?:.*/)?")
                index = after + 1
                continue
            if whole_segment and after == length:
                parts.append(".*")
                index = after
                continue
            parts.append("[^/]*")
            index = after
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = index + 1
            if end < length and pattern[end] in "!^":
                end += 1
            if end < length and pattern[end] == "]":
                end += 1
            end = pattern.find("]", end)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : end].replace("\\", "\\\\").replace("[", "\\[")
                if body[0] == "!":
                    body = "^" + body[1:]
                parts.append(f"[{body}]")
                index = end + 1
                continue
        else:
            parts.append(re.escape(char))
        index += 1
    return re.compile("".join(parts), re.DOTALL)


@dataclass(frozen=True, slots=True)
class IgnorePattern:
    """One parsed line of an ignore file.

    ``base`` is the posix path, relative to the walked root, of the directory
    whose ignore file declared the pattern; it only applies below there.
    """

    pattern: str
    negated: bool = False
    directory_only: bool = False
    anchored: bool = False
    base: str = ""

    @classmethod
    def parse(cls, line: str, base: str = "") -> "IgnorePattern | None":
        text = line.rstrip("\n").rstrip()
        if not text or text.startswith("#"):
            return None

        negated = text.startswith("!")
        if negated:
            text = text[1:]
        elif text.startswith("\\"):
            text = text[1:]

        directory_only = text.endswith("/")
        text = text.rstrip("/")
        anchored = "/" in text
        text = text.lstrip("/")
        if not text:
            return None

        return cls(pattern=text, negated=negated, directory_only=directory_only, anchored=anchored, base=base)

    def matches(self, relative_path: PurePosixPath, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False

        path = relative_path.as_posix()
        if self.base:
            if not path.startswith(self.base + "/"):
                return False
            path = path[len(self.base) + 1 :]

        if not self.anchored:
            path = path.rsplit("/", 1)[-1]
        return _compile(self.pattern).fullmatch(path) is not None


class IgnoreRules:
    """Ordered ignore patterns; the last matching pattern wins, as in git.

    Patterns read from ignore files are consulted first, in the order the
    files were loaded, so a deeper directory's file overrides its parents.
    Patterns passed to the constructor or :meth:`extend` come last and
    override every ignore file.
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self._file_patterns: list[IgnorePattern] = []
        self._patterns: list[IgnorePattern] = []
        self._loaded: set[Path] = set()
        self.extend(patterns)

    @classmethod
    def for_root(cls, root: Path, extra: Iterable[str] = ()) -> "IgnoreRules":
        """Build the rules for a source root from built-ins, ignore files and ``extra``.

        ``.git/info/exclude`` and the root's own ignore files are read here;
        nested ones are picked up by :meth:`load_directory` during the walk.
        """

        rules = cls([*BUILTIN_PATTERNS, *extra])
        rules._read(root / GIT_EXCLUDE, "")
        rules.load_directory(root, Path())
        return rules

    def load_directory(self, root: Path, relative: Path) -> None:
        """Read the ignore files of ``root / relative``, scoped to that directory."""

        if relative in self._loaded:
            return
        self._loaded.add(relative)

        base = "" if relative == Path() else relative.as_posix()
        for filename in IGNORE_FILENAMES:
            self._read(root / relative / filename, base)

    def extend(self, lines: Iterable[str]) -> None:
        for line in lines:
            parsed = IgnorePattern.parse(line)
            if parsed is not None:
                self._patterns.append(parsed)

    def __len__(self) -> int:
        return len(self._file_patterns) + len(self._patterns)

    def is_ignored(self, relative_path: Path, *, is_dir: bool = False) -> bool:
        posix = PurePosixPath(relative_path.as_posix())
        ignored = False
        for pattern in (*self._file_patterns, *self._patterns):
            if pattern.matches(posix, is_dir):
                ignored = not pattern.negated
        return ignored

    def _read(self, path: Path, base: str) -> None:
        try:
            with path.open(encoding="utf-8", errors="replace") as handle:
                lines = handle.readlines()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return
        except OSError as exc:
            logger.warning("Cannot read ignore file %s: %s", path, exc)
            return

        logger.debug("Loaded ignore file %s", path)
        for line in lines:
            parsed = IgnorePattern.parse(line, base)
            if parsed is not None:
                self._file_patterns.append(parsed)
