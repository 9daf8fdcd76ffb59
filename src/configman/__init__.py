"""Core package for the configman project."""

from .cli import app, run
from .config import ConfigError, Settings, load_settings
from .executor import ActionExecutor
from .filesystem import UnreadableError, probe
from .ignore import IgnoreRules
from .manager import LinkManager
from .models import (
    Action,
    ActionKind,
    DestinationState,
    Entry,
    EntryKind,
    Outcome,
    Report,
    ReportItem,
    StateKind,
)
from .planner import plan_entry
from .removal import RemovalEngine
from .walker import TreeWalker

__all__ = [
    "Settings",
    "ConfigError",
    "load_settings",
    "LinkManager",
    "ActionExecutor",
    "RemovalEngine",
    "TreeWalker",
    "IgnoreRules",
    "UnreadableError",
    "probe",
    "plan_entry",
    "Action",
    "ActionKind",
    "DestinationState",
    "Entry",
    "EntryKind",
    "Outcome",
    "Report",
    "ReportItem",
    "StateKind",
    "app",
    "run",
]
