"""
Data models for folder binding -- save status, permissions, records.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class SaveStatus(str, Enum):
    """Save state of the bound file. ``None`` means no file is bound."""

    SAVED = "saved"
    SAVING = "saving"
    UNSAVED = "unsaved"


class PermissionMode(str, Enum):
    """Access mode a capability can be granted."""

    READ = "read"
    READ_WRITE = "readwrite"

    def covers(self, other: "PermissionMode") -> bool:
        """True when a grant at this mode also satisfies ``other``."""
        return self is PermissionMode.READ_WRITE or other is PermissionMode.READ


class PermissionState(str, Enum):
    """Answer to a permission query."""

    GRANTED = "granted"
    DENIED = "denied"
    PROMPT = "prompt"


class EntryKind(str, Enum):
    """Kind of an entry inside a granted directory."""

    FILE = "file"
    DIRECTORY = "directory"


class DirectoryEntry(BaseModel):
    """One enumerated directory entry."""

    model_config = ConfigDict(frozen=True)

    kind: EntryKind
    name: str


class PersistedCapabilityRecord(BaseModel):
    """Serialized directory capability kept in the capability store."""

    kind: str = "local"
    name: str
    location: str
    mode: PermissionMode = PermissionMode.READ_WRITE
    saved_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ValidationResult(BaseModel):
    """Outcome of validating raw file text as a document."""

    data: Optional[Any] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


class SessionSnapshot(BaseModel):
    """Read-only view of the engine state for presentation layers."""

    model_config = ConfigDict(frozen=True)

    folder_name: Optional[str] = None
    files: tuple[str, ...] = ()
    active_file_name: str = ""
    save_status: Optional[SaveStatus] = None
