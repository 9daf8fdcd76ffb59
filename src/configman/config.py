"""Configuration resolution for configman."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CONFIG_FILENAME = "configman.toml"


class ConfigError(RuntimeError):
    """Raised when the configuration is invalid and nothing can be planned."""


def _expand_path(raw: str | os.PathLike[str] | Path, *, base_dir: Path) -> Path:
    """Return an absolute ``Path`` by expanding env vars and user segments."""

    text = str(raw)
    expanded = Path(os.path.expandvars(text)).expanduser()
    if expanded.is_absolute():
        return expanded.resolve(strict=False)
    return (base_dir / expanded).resolve(strict=False)


class Settings(BaseModel):
    """Resolved options for a single run."""

    model_config = ConfigDict(frozen=True)

    source: Path
    destination: Path
    dry_run: bool = False
    interactive: bool = False
    remove: bool = False
    verbose: bool = False
    relative: bool = False
    ignore: tuple[str, ...] = Field(default_factory=tuple)


class FileSettings(BaseModel):
    """The ``[settings]`` table of an optional ``configman.toml``."""

    model_config = ConfigDict(frozen=True)

    destination: Path | None = None
    relative: bool | None = None
    ignore: tuple[str, ...] = ()

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], *, base_dir: Path) -> "FileSettings":
        destination_raw = raw.get("destination")
        destination = _expand_path(destination_raw, base_dir=base_dir) if destination_raw is not None else None

        ignore_raw = raw.get("ignore", [])
        if not isinstance(ignore_raw, list) or not all(isinstance(item, str) for item in ignore_raw):
            raise ConfigError("'ignore' must be a list of patterns")

        relative = raw.get("relative")
        if relative is not None and not isinstance(relative, bool):
            raise ConfigError("'relative' must be true or false")

        return cls(destination=destination, relative=relative, ignore=tuple(ignore_raw))


def load_file_settings(path: Path) -> FileSettings:
    """Parse ``path`` as a configman TOML file."""

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Configuration file '{path}' is not valid TOML: {exc}") from exc

    section = data.get("settings") or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Configuration file '{path}' must use a [settings] table")
    return FileSettings.from_raw(section, base_dir=path.parent)


def load_settings(
    source: Path | str | None = None,
    destination: Path | str | None = None,
    *,
    dry_run: bool = False,
    interactive: bool = False,
    remove: bool = False,
    verbose: bool = False,
    relative: bool | None = None,
    ignore: tuple[str, ...] = (),
    config_path: Path | None = None,
) -> Settings:
    """Resolve and validate the settings for a run.

    Args:
        source: Tree to mirror. Defaults to the current working directory.
        destination: Directory receiving the links. Defaults to the
            ``destination`` from the config file, then the home directory.
        config_path: Optional TOML file. When omitted, ``configman.toml`` in
            the source root is used if it exists.
    """

    if dry_run and interactive:
        raise ConfigError("--dry-run and --interactive cannot be combined")

    cwd = Path.cwd()
    source_path = _expand_path(source, base_dir=cwd) if source is not None else cwd.resolve()
    _require_directory(source_path, "Source")

    file_settings = _load_optional_file(config_path, source_path)

    if destination is not None:
        destination_path = _expand_path(destination, base_dir=cwd)
    elif file_settings.destination is not None:
        destination_path = file_settings.destination
    else:
        destination_path = Path.home().resolve()
    _require_directory(destination_path, "Destination")

    if source_path == destination_path:
        raise ConfigError(f"Source and destination are the same directory: '{source_path}'")

    return Settings(
        source=source_path,
        destination=destination_path,
        dry_run=dry_run,
        interactive=interactive,
        remove=remove,
        verbose=verbose,
        relative=relative if relative is not None else bool(file_settings.relative),
        ignore=file_settings.ignore + tuple(ignore),
    )


def _load_optional_file(config_path: Path | None, source: Path) -> FileSettings:
    if config_path is None:
        candidate = source / DEFAULT_CONFIG_FILENAME
        if not candidate.is_file():
            return FileSettings()
        return load_file_settings(candidate)

    path = Path(config_path).expanduser()
    if path.is_dir():
        path = path / DEFAULT_CONFIG_FILENAME
    if not path.is_file():
        raise ConfigError(f"Configuration file '{path}' does not exist")
    return load_file_settings(path.resolve(strict=False))


def _require_directory(path: Path, label: str) -> None:
    if not path.exists():
        raise ConfigError(f"{label} '{path}': No such file or directory")
    if not path.is_dir():
        raise ConfigError(f"{label} '{path}' is not a directory")
