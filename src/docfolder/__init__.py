"""
docfolder — file-backed persistence for in-editor JSON documents.

Bind an editor document to a file in a user-granted folder, keep it
saved with debounced auto-save, and remember the folder across sessions.
"""

import os

__version__ = "0.1.0"

DOCFOLDER_HOME = os.environ.get("DOCFOLDER_HOME", "~/.docfolder")
