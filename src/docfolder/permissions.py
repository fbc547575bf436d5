"""Permission verification for remembered folders."""

from __future__ import annotations

import logging

from .capability import DirectoryCapability
from .models import PermissionMode, PermissionState

logger = logging.getLogger("docfolder.permissions")


async def ensure_read_write(capability: DirectoryCapability) -> bool:
    """Make sure ``capability`` may be read and written.

    Queries first; only when that is not already granted does it request
    permission, which may prompt the user. An existing grant is never
    downgraded.

    Args:
        capability: Folder restored from durable storage.

    Returns:
        bool: True if read-write access is granted.
    """
    state = await capability.query_permission(PermissionMode.READ_WRITE)
    if state is PermissionState.GRANTED:
        return True
    state = await capability.request_permission(PermissionMode.READ_WRITE)
    granted = state is PermissionState.GRANTED
    if not granted:
        logger.info("Read-write access to %s denied", capability.display_name)
    return granted
