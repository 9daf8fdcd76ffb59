from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from configman.config import Settings


@pytest.fixture
def fake_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "dotfiles"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    path = tmp_path / "target"
    path.mkdir()
    return path.resolve()


@pytest.fixture
def make_settings(source: Path, destination: Path) -> Callable[..., Settings]:
    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {"source": source, "destination": destination}
        values.update(overrides)
        return Settings(**values)

    return _make


def _snapshot(root: Path) -> dict[str, str]:
    """Describe every path below ``root`` so two trees can be compared."""

    result: dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root).as_posix()
        if path.is_symlink():
            result[relative] = f"link:{path.readlink()}"
        elif path.is_dir():
            result[relative] = "dir"
        else:
            result[relative] = f"file:{path.read_text()}"
    return result


@pytest.fixture
def snapshot() -> Callable[[Path], dict[str, str]]:
    return _snapshot
