"""Directory index -- the document files visible in a granted folder."""

from __future__ import annotations

from .capability import DirectoryCapability
from .models import EntryKind

DOCUMENT_SUFFIX = ".json"


async def list_documents(
    directory: DirectoryCapability, suffix: str = DOCUMENT_SUFFIX
) -> list[str]:
    """List regular files ending in ``suffix``, sorted ascending.

    A fresh snapshot on every call; nothing is cached.
    """
    names = []
    async for entry in directory.enumerate():
        if entry.kind is EntryKind.FILE and entry.name.endswith(suffix):
            names.append(entry.name)
    names.sort()
    return names
