"""
Tests for the capability store -- the single remembered-folder slot.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from docfolder.errors import StorageUnavailable
from docfolder.models import PersistedCapabilityRecord
from docfolder.store import KEY, CapabilityStore


def _record(location: str = "/tmp/templates") -> PersistedCapabilityRecord:
    return PersistedCapabilityRecord(name=Path(location).name, location=location)


class TestCapabilityStore:
    """Save, load and clear of the fixed-key record."""

    @pytest.mark.asyncio
    async def test_load_empty(self, store: CapabilityStore):
        """Nothing stored yet loads as None."""
        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_save_then_load(self, store: CapabilityStore):
        """A saved record comes back intact."""
        await store.save(_record())
        loaded = await store.load()

        assert loaded is not None
        assert loaded.location == "/tmp/templates"
        assert loaded.name == "templates"
        assert loaded.kind == "local"

    @pytest.mark.asyncio
    async def test_save_overwrites(self, store: CapabilityStore):
        """The slot holds only the latest record."""
        await store.save(_record("/tmp/one"))
        await store.save(_record("/tmp/two"))

        data = json.loads(store.path.read_text())
        assert list(data) == [KEY]
        assert (await store.load()).location == "/tmp/two"

    @pytest.mark.asyncio
    async def test_clear(self, store: CapabilityStore):
        """Clearing removes the record; clearing again is harmless."""
        await store.save(_record())
        await store.clear()
        await store.clear()

        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_corrupt_file_is_unavailable(self, store: CapabilityStore):
        """Malformed JSON surfaces as StorageUnavailable."""
        store.path.write_text("{{{")

        with pytest.raises(StorageUnavailable):
            await store.load()

    @pytest.mark.asyncio
    async def test_binary_file_is_unavailable(self, store: CapabilityStore):
        """Bytes that are not UTF-8 surface as StorageUnavailable."""
        store.path.write_bytes(b"\xff\xfe\x00garbage")

        with pytest.raises(StorageUnavailable):
            await store.load()
        with pytest.raises(StorageUnavailable):
            await store.clear()

    @pytest.mark.asyncio
    async def test_invalid_record_is_unavailable(self, store: CapabilityStore):
        """A record missing required fields surfaces as StorageUnavailable."""
        store.path.write_text(json.dumps({KEY: {"kind": "local"}}))

        with pytest.raises(StorageUnavailable):
            await store.load()

    @pytest.mark.asyncio
    async def test_unwritable_location(self, tmp_path: Path):
        """Saving under a path that is a file fails as StorageUnavailable."""
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = CapabilityStore(blocker)

        with pytest.raises(StorageUnavailable):
            await store.save(_record())
