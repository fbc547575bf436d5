"""
Grant registry -- which folders the user has authorized, and how.

Storage layout:
    ~/.docfolder/grants.yaml     # {"/abs/path": "readwrite", ...}

Deleting an entry revokes the folder out-of-band; the next restore
has to ask the user again.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

import yaml

from ..models import PermissionMode

logger = logging.getLogger("docfolder.capability.grants")

GRANTS_FILE = "grants.yaml"


class GrantStore:
    """YAML-backed map of directory path to granted permission mode."""

    def __init__(self, home: Path):
        self.path = Path(home) / GRANTS_FILE
        self._lock = threading.Lock()

    @staticmethod
    def _key(directory: Path) -> str:
        return str(Path(directory).expanduser().resolve())

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (yaml.YAMLError, OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read grants %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, grants: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            yaml.dump(grants, default_flow_style=False), encoding="utf-8"
        )

    def mode_for(self, directory: Path) -> Optional[PermissionMode]:
        """Return the granted mode for ``directory``, if any."""
        raw = self._load().get(self._key(directory))
        if raw is None:
            return None
        try:
            return PermissionMode(raw)
        except ValueError:
            logger.warning("Ignoring unknown grant mode %r for %s", raw, directory)
            return None

    def grant(self, directory: Path, mode: PermissionMode) -> PermissionMode:
        """Record a grant. An existing broader grant is kept as is.

        Returns:
            PermissionMode: The mode in effect after the call.
        """
        with self._lock:
            grants = self._load()
            key = self._key(directory)
            current = grants.get(key)
            if current is not None:
                try:
                    if PermissionMode(current).covers(mode):
                        return PermissionMode(current)
                except ValueError:
                    pass
            grants[key] = mode.value
            self._save(grants)
        logger.info("Granted %s on %s", mode.value, key)
        return mode

    def revoke(self, directory: Path) -> bool:
        """Drop any grant for ``directory``. Returns True if one existed."""
        with self._lock:
            grants = self._load()
            removed = grants.pop(self._key(directory), None)
            if removed is None:
                return False
            self._save(grants)
        logger.info("Revoked grant on %s", directory)
        return True

    def all(self) -> dict[str, PermissionMode]:
        """Every recorded grant, unknown modes skipped."""
        out: dict[str, PermissionMode] = {}
        for key, raw in self._load().items():
            try:
                out[key] = PermissionMode(raw)
            except ValueError:
                continue
        return out
