"""
Capabilities -- revocable access tokens for a folder and its files.
"""

from .base import DirectoryCapability, FileCapability, WriteSession
from .grants import GrantStore
from .local import LocalDirectoryCapability, LocalFileCapability

__all__ = [
    "DirectoryCapability",
    "FileCapability",
    "GrantStore",
    "LocalDirectoryCapability",
    "LocalFileCapability",
    "WriteSession",
]
