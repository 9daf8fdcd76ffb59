"""Command-line interface for configman."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ConfigError, load_settings
from .manager import LinkManager
from .models import ActionKind, Outcome, Report, ReportItem

app = typer.Typer(help="Mirror a source tree into a destination directory with symlinks")
console = Console()
err_console = Console(stderr=True)

ACTION_STYLES = {
    ActionKind.LINK: "green",
    ActionKind.DESCEND: "cyan",
    ActionKind.SKIP: "dim",
    ActionKind.CONFLICT: "red",
    ActionKind.UNLINK: "yellow",
    ActionKind.PRUNE_DIR: "yellow",
}

OUTCOME_STYLES = {
    Outcome.APPLIED: "green",
    Outcome.WOULD_APPLY: "cyan",
    Outcome.DECLINED: "yellow",
    Outcome.FAILED: "red",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


def _confirm(description: str) -> bool:
    return typer.confirm(description, default=False)


def _handle_error(exc: Exception) -> None:
    if isinstance(exc, PermissionError):
        console.print("[red]Permission denied.[/red] Check that you can write to the destination directory.")
        raise typer.Exit(code=1)
    if isinstance(exc, ConfigError):
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    raise exc


def _detail(item: ReportItem) -> str:
    action = item.action
    if item.error:
        return item.error
    if action.kind is ActionKind.LINK:
        return f"-> {action.source}"
    if action.kind is ActionKind.UNLINK:
        return f"-> {action.removed_target}"
    if action.kind is ActionKind.DESCEND:
        return "create" if action.create else "merge"
    return action.reason or ""


def _format_report(items: Iterable[ReportItem]) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Action", no_wrap=True)
    table.add_column("Path", overflow="fold")
    table.add_column("Details", overflow="fold")
    table.add_column("Outcome", no_wrap=True)

    for item in items:
        action_style = ACTION_STYLES.get(item.action.kind, "white")
        outcome_style = OUTCOME_STYLES.get(item.outcome, "white")
        table.add_row(
            f"[{action_style}]{item.action.kind.value}[/{action_style}]",
            item.action.relative_path.as_posix(),
            _detail(item),
            f"[{outcome_style}]{item.outcome.value}[/{outcome_style}]",
        )

    console.print(table)


def _print_summary(report: Report, *, dry_run: bool) -> None:
    changes = len(report.mutations)
    verb = "would change" if dry_run else "changed"
    console.print(f"{changes} {'entry' if changes == 1 else 'entries'} {verb}.")
    if report.conflicts:
        console.print(f"[red]{len(report.conflicts)} conflict(s) left untouched.[/red]")
    if report.failures:
        console.print(f"[red]{len(report.failures)} action(s) failed.[/red]")


@app.command()
def main(
    source: Path | None = typer.Option(
        None,
        "--src",
        "--from",
        "-s",
        help="Source directory (default is the current directory)",
    ),
    destination: Path | None = typer.Option(
        None,
        "--dest",
        "--to",
        "-d",
        help="Destination directory (default is the home directory)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not do anything; just show what would happen."),
    interactive: bool = typer.Option(
        False,
        "--interactive",
        "-i",
        help="Prompt before every change to the filesystem.",
    ),
    remove: bool = typer.Option(
        False,
        "--remove",
        help="Unlink the symlinks in the destination that point into the source.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every entry, including skipped ones."),
    relative: bool = typer.Option(
        False,
        "--relative",
        help="Write link targets relative to the link's directory.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configman.toml (default is the one in the source directory, if any)",
    ),
) -> None:
    """Link every file of the source tree into the destination."""

    _configure_logging(verbose)

    try:
        settings = load_settings(
            source,
            destination,
            dry_run=dry_run,
            interactive=interactive,
            remove=remove,
            verbose=verbose,
            relative=relative or None,
            config_path=config,
        )
        if settings.dry_run:
            console.print("[yellow]`--dry-run` mode, no changes will be made.[/yellow]")

        report = LinkManager(settings, confirm=_confirm).run()
    except Exception as exc:  # noqa: BLE001
        _handle_error(exc)
        return

    visible = report.visible(settings.verbose)
    if visible:
        _format_report(visible)
    _print_summary(report, dry_run=settings.dry_run)

    if report.has_problems:
        raise typer.Exit(code=1)


def run() -> None:
    """Entry point used for console_script bindings."""

    app()
