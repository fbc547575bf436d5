"""Shared test fixtures for docfolder."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import pytest

from docfolder.capability import GrantStore, LocalDirectoryCapability
from docfolder.config import EngineConfig
from docfolder.document import EditorDocument
from docfolder.engine import SyncEngine
from docfolder.errors import UserCancelled
from docfolder.host import Host
from docfolder.models import PermissionMode, PersistedCapabilityRecord
from docfolder.store import CapabilityStore

DEBOUNCE = 0.05


class FakeHost(Host):
    """Scripted host: no terminal, every answer preset, every prompt recorded."""

    def __init__(
        self,
        grants: GrantStore,
        folder: Optional[Path] = None,
        supported: bool = True,
        filename: Optional[str] = None,
        confirm_answer: bool = True,
        permission_answer: bool = False,
    ):
        self.grants = grants
        self.folder = folder
        self.supported = supported
        self.filename = filename
        self.confirm_answer = confirm_answer
        self.permission_answer = permission_answer
        self.alerts: list[str] = []
        self.filename_prompts: list[str] = []
        self.confirmations: list[str] = []
        self.permission_requests: list[Path] = []

    def supports_directory_access(self) -> bool:
        return self.supported

    async def pick_directory(self):
        if self.folder is None:
            raise UserCancelled("dismissed")
        self.grants.grant(self.folder, PermissionMode.READ_WRITE)
        return LocalDirectoryCapability(self.folder, self.grants, self._ask)

    async def restore_directory(self, record: PersistedCapabilityRecord):
        return LocalDirectoryCapability(Path(record.location), self.grants, self._ask)

    async def prompt_filename(self, default: str) -> Optional[str]:
        self.filename_prompts.append(default)
        return self.filename

    async def confirm(self, message: str) -> bool:
        self.confirmations.append(message)
        return self.confirm_answer

    def alert(self, message: str) -> None:
        self.alerts.append(message)

    async def _ask(self, path: Path, mode: PermissionMode) -> bool:
        self.permission_requests.append(path)
        return self.permission_answer


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Temporary docfolder home directory."""
    path = tmp_path / ".docfolder"
    path.mkdir()
    return path


@pytest.fixture
def folder(tmp_path: Path) -> Path:
    """A document folder with two documents and some noise."""
    path = tmp_path / "templates"
    path.mkdir()
    (path / "welcome.json").write_text(json.dumps({"root": {"type": "EmailLayout"}}))
    (path / "alpha.json").write_text(json.dumps({"title": "alpha"}))
    (path / "broken.json").write_text("{not json")
    (path / "readme.txt").write_text("not a document")
    (path / "nested.json").mkdir()
    return path


@pytest.fixture
def grants(home: Path) -> GrantStore:
    return GrantStore(home)


@pytest.fixture
def store(home: Path) -> CapabilityStore:
    return CapabilityStore(home)


@pytest.fixture
def make_engine(grants: GrantStore, store: CapabilityStore, folder: Path):
    """Factory for an unstarted engine wired to a FakeHost."""

    def _make(**host_kwargs) -> tuple[SyncEngine, FakeHost, EditorDocument]:
        host_kwargs.setdefault("folder", folder)
        host = FakeHost(grants, **host_kwargs)
        document = EditorDocument()
        engine = SyncEngine(
            host=host,
            document=document,
            store=store,
            config=EngineConfig(debounce_seconds=DEBOUNCE),
        )
        return engine, host, document

    return _make


@pytest.fixture
def commits(monkeypatch) -> list[tuple[str, str]]:
    """Record every committed write as (file name, text)."""
    from docfolder.capability.local import LocalWriteSession

    recorded: list[tuple[str, str]] = []
    original = LocalWriteSession._commit

    def _commit(self, data: str) -> None:
        original(self, data)
        recorded.append((self._owner.name, data))

    monkeypatch.setattr(LocalWriteSession, "_commit", _commit)
    return recorded
