"""
Host environment -- folder picker, prompts, and alerts.

The engine never talks to the user directly. It asks the host to pick
a folder, to name a new file, to confirm an overwrite, and to show
blocking alerts. :class:`TerminalHost` does this on a terminal.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from .capability import DirectoryCapability, GrantStore, LocalDirectoryCapability
from .errors import UserCancelled
from .models import PermissionMode, PersistedCapabilityRecord

logger = logging.getLogger("docfolder.host")


class Host(ABC):
    """Everything the engine needs from its surroundings."""

    @abstractmethod
    def supports_directory_access(self) -> bool:
        """Whether folders can be granted in this environment at all."""

    @abstractmethod
    async def pick_directory(self) -> DirectoryCapability:
        """Ask the user for a folder, requesting read-write access.

        Raises:
            UserCancelled: The picker was dismissed.
        """

    @abstractmethod
    async def restore_directory(
        self, record: PersistedCapabilityRecord
    ) -> DirectoryCapability:
        """Rebuild a capability from its stored record."""

    @abstractmethod
    async def prompt_filename(self, default: str) -> Optional[str]:
        """Ask for a file name. None or empty means cancelled."""

    @abstractmethod
    async def confirm(self, message: str) -> bool:
        """Ask a yes/no question."""

    @abstractmethod
    def alert(self, message: str) -> None:
        """Show a blocking message."""


class TerminalHost(Host):
    """Host backed by click prompts and a rich console.

    Args:
        grants: Grant registry shared by every capability this host creates.
        folder: Folder to hand out from the picker instead of prompting.
        assume_yes: Answer every confirmation with yes.
        console: Where alerts go.
    """

    def __init__(
        self,
        grants: GrantStore,
        folder: Optional[Path] = None,
        assume_yes: bool = False,
        console: Optional[Console] = None,
    ):
        self.grants = grants
        self.folder = folder
        self.assume_yes = assume_yes
        self.console = console or Console()

    def supports_directory_access(self) -> bool:
        return True

    async def pick_directory(self) -> DirectoryCapability:
        folder = self.folder
        if folder is None:
            try:
                raw = click.prompt("Folder", default="", show_default=False)
            except click.Abort:
                raise UserCancelled("Folder selection cancelled") from None
            if not raw.strip():
                raise UserCancelled("Folder selection cancelled")
            folder = Path(raw.strip())
        folder = Path(folder).expanduser()
        if not folder.is_dir():
            self.alert(f"Not a folder: {folder}")
            raise UserCancelled(f"{folder} is not a folder")

        # Picking a folder is the grant.
        self.grants.grant(folder, PermissionMode.READ_WRITE)
        return LocalDirectoryCapability(folder, self.grants, self._ask_permission)

    async def restore_directory(
        self, record: PersistedCapabilityRecord
    ) -> DirectoryCapability:
        if record.kind != "local":
            raise ValueError(f"Unsupported capability kind: {record.kind}")
        return LocalDirectoryCapability(
            Path(record.location), self.grants, self._ask_permission
        )

    async def prompt_filename(self, default: str) -> Optional[str]:
        try:
            raw = click.prompt("New file name", default=default)
        except click.Abort:
            return None
        return raw.strip() or None

    async def confirm(self, message: str) -> bool:
        if self.assume_yes:
            return True
        try:
            return click.confirm(message, default=False)
        except click.Abort:
            return False

    def alert(self, message: str) -> None:
        logger.debug("Alert: %s", message)
        self.console.print(f"[bold red]{escape(message)}[/]")

    async def _ask_permission(self, path: Path, mode: PermissionMode) -> bool:
        return await self.confirm(f"Allow {mode.value} access to {path}?")
