"""
Sync Engine -- keeps the editor document bound to a file in a granted folder.

This is the only stateful piece. It restores the remembered folder on
start, lists its documents, loads and validates the file the user picks,
and writes the document back after a quiet period.

    start()            ->  load record -> verify permission -> list files
    select_file(name)  ->  read -> validate -> bind -> reset document
    (document edit)    ->  unsaved -> debounce -> saving -> write -> saved

Save status per bound file:

    None --bind--> saved --edit--> unsaved --debounce--> saving --ok--> saved
                                                         saving --fail--> unsaved

A failed write is not retried on its own; the next edit schedules a
fresh save.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .capability import DirectoryCapability, FileCapability
from .config import EngineConfig
from .document import (
    DocumentValidator,
    EditorDocument,
    empty_document,
    serialize_document,
    validate_document,
)
from .errors import (
    DocFolderError,
    DocumentValidationError,
    NameCollision,
    PermissionDenied,
    StorageUnavailable,
    UnsupportedEnvironment,
    UserCancelled,
    WriteFailure,
)
from .host import Host
from .index import list_documents
from .models import SaveStatus, SessionSnapshot, ValidationResult
from .permissions import ensure_read_write
from .store import CapabilityStore

logger = logging.getLogger("docfolder.engine")

UNSUPPORTED_MESSAGE = (
    "Folder access is not available in this environment. "
    "Documents cannot be opened from or saved to a folder."
)

StateListener = Callable[[SessionSnapshot], None]

_NOTHING = object()


@dataclass(frozen=True)
class PendingSave:
    """Write target and document value captured when a save is scheduled."""

    target: FileCapability
    value: Any


class SyncEngine:
    """Binds an :class:`EditorDocument` to one file in one granted folder.

    Args:
        host: Folder picker, prompts and alerts.
        document: The editor document to observe and replace.
        store: Where the granted folder is remembered.
        validator: Turns file text into a document value.
        config: Debounce delay, suffix and indentation.
        template: Document written into newly created files.
    """

    def __init__(
        self,
        host: Host,
        document: EditorDocument,
        store: CapabilityStore,
        validator: DocumentValidator = validate_document,
        config: Optional[EngineConfig] = None,
        template: Any = None,
    ):
        self.host = host
        self.document = document
        self.store = store
        self.validator = validator
        self.config = config or EngineConfig()
        self.template = template if template is not None else empty_document()

        self.folder_name: Optional[str] = None
        self.files: list[str] = []
        self.active_file_name: str = ""
        self.save_status: Optional[SaveStatus] = None
        self.last_error: Optional[DocFolderError] = None

        self._directory: Optional[DirectoryCapability] = None
        self._active_file: Optional[FileCapability] = None
        self._last_synced: Any = _NOTHING
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._pending: Optional[PendingSave] = None
        self._inflight: set[asyncio.Task] = set()
        self._write_lock = asyncio.Lock()
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, restore: bool = True) -> None:
        """Observe the document and, unless told not to, restore the remembered folder."""
        self._loop = asyncio.get_running_loop()
        if self._unsubscribe is None:
            self._unsubscribe = self.document.subscribe(self._on_document_change)
        if restore:
            await self.restore()

    async def stop(self) -> None:
        """Stop observing, drop any pending save, wait for a running write."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._cancel_timer()
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def restore(self) -> bool:
        """Reopen the remembered folder if its permission still holds.

        Returns:
            bool: True if a folder is now active.
        """
        if not self.host.supports_directory_access():
            return False
        try:
            record = await self.store.load()
        except StorageUnavailable as exc:
            logger.warning("Capability store unavailable: %s", exc)
            return False
        if record is None:
            return False

        try:
            directory = await self.host.restore_directory(record)
            granted = await ensure_read_write(directory)
        except (DocFolderError, OSError, ValueError) as exc:
            logger.warning("Could not restore folder %s: %s", record.location, exc)
            granted = False

        if not granted:
            self.last_error = PermissionDenied(
                f"Access to {record.name} was not granted; choose the folder again"
            )
            logger.info("%s", self.last_error)
            await self._forget()
            return False

        try:
            files = await list_documents(directory, self.config.suffix)
        except (DocFolderError, OSError) as exc:
            logger.warning("Could not list %s: %s", record.location, exc)
            return False

        self._directory = directory
        self.folder_name = directory.display_name
        self.files = files
        logger.info("Restored folder %s (%d files)", record.location, len(files))
        self._notify()
        return True

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def open_folder(self) -> bool:
        """Ask the user for a folder, remember it, and list its documents.

        Returns:
            bool: True if a new folder is active.
        """
        if not self.host.supports_directory_access():
            self.last_error = UnsupportedEnvironment(UNSUPPORTED_MESSAGE)
            self.host.alert(UNSUPPORTED_MESSAGE)
            return False

        try:
            directory = await self.host.pick_directory()
        except UserCancelled:
            logger.debug("Folder picker dismissed")
            return False

        try:
            await self.store.save(directory.to_record())
        except StorageUnavailable as exc:
            logger.warning("Folder will not be remembered: %s", exc)

        try:
            files = await list_documents(directory, self.config.suffix)
        except (DocFolderError, OSError) as exc:
            logger.error("Could not list %s: %s", directory.display_name, exc)
            return False

        self._cancel_timer()
        self._directory = directory
        self.folder_name = directory.display_name
        self.files = files
        self.active_file_name = ""
        self._active_file = None
        self._last_synced = _NOTHING
        self.save_status = None
        logger.info("Opened folder %s (%d files)", directory.display_name, len(files))
        self._notify()
        return True

    async def refresh_files(self) -> None:
        """Re-list the active folder."""
        directory = self._directory
        if directory is None:
            return
        try:
            files = await list_documents(directory, self.config.suffix)
        except (DocFolderError, OSError) as exc:
            logger.warning("Could not refresh %s: %s", directory.display_name, exc)
            return
        if directory is self._directory:
            self.files = files
            self._notify()

    async def select_file(self, name: str) -> bool:
        """Load ``name`` into the editor if it validates.

        Returns:
            bool: True if the file is now bound.
        """
        directory = self._directory
        if directory is None:
            return False
        try:
            handle = await directory.get_file(name)
            text = await handle.read_text()
        except UnicodeDecodeError as exc:
            result = ValidationResult(error=f"Not UTF-8 text ({exc.reason})")
        except (DocFolderError, OSError) as exc:
            logger.error("Failed to load file %s: %s", name, exc)
            return False
        else:
            result = self.validator(text)

        if result.error or result.data is None:
            error = DocumentValidationError(name, result.error or "empty document")
            self.last_error = error
            logger.warning("%s", error)
            self.host.alert(str(error))
            return False

        if directory is not self._directory:
            return False
        self._bind(handle, name, result.data)
        return True

    async def create_file(self, name: Optional[str] = None) -> Optional[str]:
        """Create a document from the template and bind it.

        Prompts for a name unless one is given. The suffix is appended
        when missing. An existing file is only replaced after the host
        confirms the overwrite.

        Returns:
            Optional[str]: The created file name, or None if nothing changed.
        """
        directory = self._directory
        if directory is None:
            return None
        raw = name if name is not None else await self.host.prompt_filename(
            self.config.default_filename
        )
        if not raw:
            logger.debug("File name prompt dismissed")
            return None
        suffix = self.config.suffix
        file_name = raw if raw.endswith(suffix) else f"{raw}{suffix}"

        try:
            exists = await self._exists(directory, file_name)
        except (DocFolderError, OSError) as exc:
            logger.error("Failed to create file %s: %s", file_name, exc)
            return None
        if exists and not await self.host.confirm(
            f'"{file_name}" already exists. Overwrite it?'
        ):
            self.last_error = NameCollision(f'"{file_name}" already exists')
            logger.info("Kept existing file: %s", self.last_error)
            return None

        template = copy.deepcopy(self.template)
        try:
            handle = await directory.get_file(file_name, create=True)
            await self._write(handle, template)
        except (DocFolderError, OSError) as exc:
            self.last_error = exc if isinstance(exc, DocFolderError) else WriteFailure(str(exc))
            logger.error("Failed to create file %s: %s", file_name, exc)
            return None

        if directory is not self._directory:
            return None
        self.files = sorted(set(self.files) | {file_name})
        self._bind(handle, file_name, template)
        logger.info("Created %s", file_name)
        return file_name

    async def flush(self) -> bool:
        """Write the pending save now instead of after the debounce delay.

        Returns:
            bool: False if a write was attempted and failed.
        """
        pending = self._pending
        if pending is None:
            if self._inflight:
                await asyncio.gather(*self._inflight, return_exceptions=True)
            return self.save_status is not SaveStatus.UNSAVED
        self._cancel_timer()
        return await self._save(pending)

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        """Current state as an immutable value."""
        return SessionSnapshot(
            folder_name=self.folder_name,
            files=tuple(self.files),
            active_file_name=self.active_file_name,
            save_status=self.save_status,
        )

    def add_listener(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with a snapshot after every state change."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception("State listener failed")

    # ------------------------------------------------------------------
    # Auto-save
    # ------------------------------------------------------------------

    def _on_document_change(self, value: Any) -> None:
        if self._active_file is None or value is self._last_synced:
            return
        if self._loop is None:
            logger.warning("Document changed before the engine was started")
            return
        self.save_status = SaveStatus.UNSAVED
        self._cancel_timer()
        pending = PendingSave(target=self._active_file, value=value)
        self._pending = pending
        self._timer = self._loop.call_later(
            self.config.debounce_seconds, self._fire, pending
        )
        self._notify()

    def _fire(self, pending: PendingSave) -> None:
        self._timer = None
        self._pending = None
        task = self._loop.create_task(self._save(pending))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _save(self, pending: PendingSave) -> bool:
        if pending.target is self._active_file:
            self.save_status = SaveStatus.SAVING
            self._notify()
        try:
            await self._write(pending.target, pending.value)
        except (DocFolderError, OSError) as exc:
            self.last_error = exc if isinstance(exc, DocFolderError) else WriteFailure(str(exc))
            logger.warning("Auto-save of %s failed: %s", pending.target.name, exc)
            if pending.target is self._active_file:
                self.save_status = SaveStatus.UNSAVED
                self._notify()
            return False

        if pending.target is not self._active_file:
            logger.debug("Saved %s after it was unbound", pending.target.name)
            return True
        self._last_synced = pending.value
        # A newer edit may have been scheduled while this write ran.
        self.save_status = SaveStatus.UNSAVED if self._timer is not None else SaveStatus.SAVED
        logger.debug("Saved %s", pending.target.name)
        self._notify()
        return True

    async def _write(self, target: FileCapability, value: Any) -> None:
        text = serialize_document(value, self.config.indent)
        async with self._write_lock:
            session = await target.open_write_session()
            try:
                await session.write(text)
            except BaseException:
                await session.abort()
                raise
            await session.close()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._pending = None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _bind(self, handle: FileCapability, name: str, value: Any) -> None:
        self._cancel_timer()
        self._active_file = handle
        self._last_synced = value
        self.active_file_name = name
        self.save_status = SaveStatus.SAVED
        self.document.reset(value)
        self._notify()

    @staticmethod
    async def _exists(directory: DirectoryCapability, name: str) -> bool:
        try:
            await directory.get_file(name)
        except FileNotFoundError:
            return False
        return True

    async def _forget(self) -> None:
        try:
            await self.store.clear()
        except StorageUnavailable as exc:
            logger.warning("Could not clear remembered folder: %s", exc)
