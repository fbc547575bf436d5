"""
Local filesystem capabilities -- a granted folder on this machine.

Permission is not taken from the OS: a folder is usable only while the
grant registry holds an entry for it. File writes are staged in memory
and committed atomically (temp file + rename) when the session closes.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional

from ..errors import (
    CapabilityPermissionError,
    InvalidFileName,
    WriteFailure,
    WriteSessionBusy,
)
from ..models import (
    DirectoryEntry,
    EntryKind,
    PermissionMode,
    PermissionState,
    PersistedCapabilityRecord,
)
from .base import DirectoryCapability, FileCapability, WriteSession
from .grants import GrantStore

logger = logging.getLogger("docfolder.capability.local")

PermissionPrompter = Callable[[Path, PermissionMode], Awaitable[bool]]


def check_file_name(name: str) -> str:
    """Reject names that are empty or would leave the directory."""
    if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
        raise InvalidFileName(f"Invalid file name: {name!r}")
    return name


class LocalWriteSession(WriteSession):
    """Staged write into one local file."""

    def __init__(self, owner: "LocalFileCapability"):
        self._owner = owner
        self._data: Optional[str] = None
        self._closed = False

    async def write(self, data: str) -> None:
        if self._closed:
            raise WriteFailure("Write session already closed")
        self._data = data

    async def close(self) -> None:
        if self._closed:
            raise WriteFailure("Write session already closed")
        if self._data is None:
            self._release()
            raise WriteFailure(f"Nothing was written to {self._owner.name}")
        try:
            self._owner._require(PermissionMode.READ_WRITE)
            await asyncio.to_thread(self._commit, self._data)
        except CapabilityPermissionError as exc:
            raise WriteFailure(str(exc)) from exc
        except OSError as exc:
            raise WriteFailure(f"Could not write {self._owner.path}: {exc}") from exc
        finally:
            self._release()

    async def abort(self) -> None:
        if not self._closed:
            self._release()

    def _commit(self, data: str) -> None:
        target = self._owner.path
        temp = target.with_name(f".{target.name}.tmp")
        try:
            temp.write_text(data, encoding="utf-8")
            temp.replace(target)
        except OSError:
            if temp.exists():
                temp.unlink()
            raise

    def _release(self) -> None:
        self._closed = True
        self._owner._session = None


class LocalFileCapability(FileCapability):
    """One file inside a :class:`LocalDirectoryCapability`."""

    def __init__(self, directory: "LocalDirectoryCapability", name: str):
        self._directory = directory
        self._name = check_file_name(name)
        self._session: Optional[LocalWriteSession] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> Path:
        return self._directory.path / self._name

    def _require(self, mode: PermissionMode) -> None:
        self._directory._require(mode)

    async def read_text(self) -> str:
        self._require(PermissionMode.READ)
        return await asyncio.to_thread(self.path.read_text, encoding="utf-8")

    async def open_write_session(self) -> WriteSession:
        if self._session is not None:
            raise WriteSessionBusy(f"{self._name} already has an open write session")
        try:
            self._require(PermissionMode.READ_WRITE)
        except CapabilityPermissionError as exc:
            raise WriteFailure(str(exc)) from exc
        self._session = LocalWriteSession(self)
        return self._session

    def __repr__(self) -> str:
        return f"LocalFileCapability({str(self.path)!r})"


class LocalDirectoryCapability(DirectoryCapability):
    """A folder on the local filesystem, gated by the grant registry.

    Args:
        path: Folder location.
        grants: Registry consulted on every access.
        prompter: Async callback asked when permission must be requested.
            Without one, requests are denied.
    """

    def __init__(
        self,
        path: Path,
        grants: GrantStore,
        prompter: Optional[PermissionPrompter] = None,
    ):
        self.path = Path(path).expanduser().resolve()
        self.grants = grants
        self.prompter = prompter

    @property
    def display_name(self) -> str:
        return self.path.name or str(self.path)

    def _require(self, mode: PermissionMode) -> None:
        granted = self.grants.mode_for(self.path)
        if granted is None or not granted.covers(mode):
            raise CapabilityPermissionError(
                f"No {mode.value} permission for {self.path}"
            )

    async def enumerate(self) -> AsyncIterator[DirectoryEntry]:
        self._require(PermissionMode.READ)
        entries = await asyncio.to_thread(self._scan)
        for entry in entries:
            yield entry

    def _scan(self) -> list[DirectoryEntry]:
        entries = []
        with os.scandir(self.path) as it:
            for item in it:
                if item.is_file():
                    entries.append(DirectoryEntry(kind=EntryKind.FILE, name=item.name))
                elif item.is_dir():
                    entries.append(DirectoryEntry(kind=EntryKind.DIRECTORY, name=item.name))
        return entries

    async def get_file(self, name: str, create: bool = False) -> FileCapability:
        handle = LocalFileCapability(self, name)
        if create:
            self._require(PermissionMode.READ_WRITE)
            await asyncio.to_thread(handle.path.touch, exist_ok=True)
        else:
            self._require(PermissionMode.READ)
            if not await asyncio.to_thread(handle.path.is_file):
                raise FileNotFoundError(str(handle.path))
        return handle

    async def query_permission(self, mode: PermissionMode) -> PermissionState:
        if not await asyncio.to_thread(self.path.is_dir):
            return PermissionState.DENIED
        granted = self.grants.mode_for(self.path)
        if granted is not None and granted.covers(mode):
            return PermissionState.GRANTED
        return PermissionState.PROMPT

    async def request_permission(self, mode: PermissionMode) -> PermissionState:
        state = await self.query_permission(mode)
        if state is not PermissionState.PROMPT:
            return state
        if self.prompter is None or not await self.prompter(self.path, mode):
            logger.info("Permission %s on %s was not granted", mode.value, self.path)
            return PermissionState.DENIED
        self.grants.grant(self.path, mode)
        return PermissionState.GRANTED

    def to_record(self) -> PersistedCapabilityRecord:
        return PersistedCapabilityRecord(
            kind="local",
            name=self.display_name,
            location=str(self.path),
            mode=self.grants.mode_for(self.path) or PermissionMode.READ_WRITE,
        )

    def __repr__(self) -> str:
        return f"LocalDirectoryCapability({str(self.path)!r})"
