"""Error taxonomy for folder binding and document synchronization."""

from __future__ import annotations


class DocFolderError(Exception):
    """Base class for every docfolder error."""


class UnsupportedEnvironment(DocFolderError):
    """The host cannot grant directory access at all."""


class PermissionDenied(DocFolderError):
    """Read-write permission for a remembered folder was not granted."""


class CapabilityPermissionError(DocFolderError):
    """A capability was used without the grant its operation needs."""


class DocumentValidationError(DocFolderError):
    """A file's content is not a valid document."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f'Could not load "{name}": {reason}')


class WriteFailure(DocFolderError):
    """A write session could not be opened, written or committed."""


class WriteSessionBusy(WriteFailure):
    """A second write session was requested while one is still open."""


class UserCancelled(DocFolderError):
    """The user dismissed a folder or filename prompt."""


class StorageUnavailable(DocFolderError):
    """The capability store could not be read or written."""


class NameCollision(DocFolderError):
    """A file with the requested name already exists."""


class InvalidFileName(DocFolderError):
    """A file name would escape its directory or is empty."""
