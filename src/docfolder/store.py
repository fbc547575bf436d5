"""
Capability store -- remembers one granted folder across sessions.

Storage layout:
    ~/.docfolder/handles.json    # {"directory": {<PersistedCapabilityRecord>}}

Single slot, fixed key. ``save`` overwrites, ``load`` returns None
when nothing was ever stored, ``clear`` removes the slot. Any I/O or
decoding problem surfaces as :class:`StorageUnavailable`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .errors import StorageUnavailable
from .models import PersistedCapabilityRecord

logger = logging.getLogger("docfolder.store")

STORE_FILE = "handles.json"
KEY = "directory"


class CapabilityStore:
    """Durable single-slot store for the remembered folder."""

    def __init__(self, home: Path):
        self.path = Path(home) / STORE_FILE

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageUnavailable(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageUnavailable(f"Unexpected content in {self.path}")
        return data

    def _write_all(self, data: dict) -> None:
        temp = self.path.with_suffix(".json.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            temp.replace(self.path)
        except OSError as exc:
            if temp.exists():
                temp.unlink()
            raise StorageUnavailable(f"Cannot write {self.path}: {exc}") from exc

    def _save(self, record: PersistedCapabilityRecord) -> None:
        data = self._read_all()
        data[KEY] = record.model_dump(mode="json")
        self._write_all(data)

    def _load(self) -> Optional[PersistedCapabilityRecord]:
        raw = self._read_all().get(KEY)
        if raw is None:
            return None
        try:
            return PersistedCapabilityRecord.model_validate(raw)
        except ValidationError as exc:
            raise StorageUnavailable(f"Corrupt capability record: {exc}") from exc

    def _clear(self) -> None:
        data = self._read_all()
        if data.pop(KEY, None) is not None:
            self._write_all(data)

    async def save(self, record: PersistedCapabilityRecord) -> None:
        """Store ``record``, replacing whatever was there."""
        await asyncio.to_thread(self._save, record)
        logger.debug("Remembered folder %s", record.location)

    async def load(self) -> Optional[PersistedCapabilityRecord]:
        """Return the remembered record, or None."""
        return await asyncio.to_thread(self._load)

    async def clear(self) -> None:
        """Forget the remembered folder."""
        await asyncio.to_thread(self._clear)
        logger.debug("Cleared remembered folder")
