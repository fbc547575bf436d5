"""Shared helpers for the CLI command modules.

Provides the Rich console and the engine factory every command uses.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.console import Console

from .. import DOCFOLDER_HOME
from ..capability import GrantStore
from ..config import load_config, resolve_home
from ..document import EditorDocument
from ..engine import SyncEngine
from ..host import TerminalHost
from ..models import SaveStatus
from ..store import CapabilityStore

console = Console()

HOME_HELP = "docfolder home directory."


def build_engine(
    home: str,
    folder: Optional[Path] = None,
    assume_yes: bool = False,
) -> SyncEngine:
    """Wire an engine to a terminal host for one CLI invocation."""
    home_path = resolve_home(home)
    grants = GrantStore(home_path)
    host = TerminalHost(grants, folder=folder, assume_yes=assume_yes, console=console)
    return SyncEngine(
        host=host,
        document=EditorDocument(),
        store=CapabilityStore(home_path),
        config=load_config(home_path),
    )


def status_label(status: Optional[SaveStatus]) -> str:
    """Rich markup for a save status."""
    return {
        SaveStatus.SAVED: "[green]Saved[/]",
        SaveStatus.SAVING: "[cyan]Saving[/]",
        SaveStatus.UNSAVED: "[yellow]Unsaved[/]",
    }.get(status, "[dim]no file[/]")


__all__ = ["DOCFOLDER_HOME", "HOME_HELP", "build_engine", "console", "status_label"]
