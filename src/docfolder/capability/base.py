"""
Capability contracts -- what the engine may do with a granted folder.

A directory capability is an opaque, revocable token for one folder.
It enumerates entries, hands out file capabilities, and answers
permission queries. A file capability reads its text and opens
exclusive write sessions that commit on ``close()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import AsyncIterator

from ..models import (
    DirectoryEntry,
    PermissionMode,
    PermissionState,
    PersistedCapabilityRecord,
)


class WriteSession(ABC):
    """One exclusive write into a file. Nothing is visible until ``close()``."""

    @abstractmethod
    async def write(self, data: str) -> None:
        """Stage the full new contents of the file."""

    @abstractmethod
    async def close(self) -> None:
        """Commit the staged contents and release the session."""

    @abstractmethod
    async def abort(self) -> None:
        """Discard the staged contents and release the session."""


class FileCapability(ABC):
    """Access token for one file within a directory capability."""

    @property
    @abstractmethod
    def name(self) -> str:
        """File name relative to its directory."""

    @abstractmethod
    async def read_text(self) -> str:
        """Read the full file contents as text."""

    @abstractmethod
    async def open_write_session(self) -> WriteSession:
        """Open the exclusive write session for this file."""


class DirectoryCapability(ABC):
    """Access token for one user-granted directory."""

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable folder name."""

    @abstractmethod
    def enumerate(self) -> AsyncIterator[DirectoryEntry]:
        """Yield every entry of the directory."""

    @abstractmethod
    async def get_file(self, name: str, create: bool = False) -> FileCapability:
        """Return the file capability for ``name``.

        Args:
            name: File name inside the directory.
            create: Create an empty file when it does not exist.

        Raises:
            FileNotFoundError: The file is missing and ``create`` is False.
        """

    @abstractmethod
    async def query_permission(self, mode: PermissionMode) -> PermissionState:
        """Report the current permission state without prompting."""

    @abstractmethod
    async def request_permission(self, mode: PermissionMode) -> PermissionState:
        """Ask for ``mode``; may prompt the user. Never downgrades a grant."""

    @abstractmethod
    def to_record(self) -> PersistedCapabilityRecord:
        """Serialize for the capability store."""
