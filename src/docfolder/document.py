"""
Editor document -- the observable JSON value the engine keeps on disk.

The editor owns the value; the synchronization engine only observes it.
Every ``update`` or ``reset`` replaces the value object and notifies
subscribers, so observers can tell changes apart by identity.
"""

from __future__ import annotations

import copy
import json
import logging
from typing import Any, Callable

from .models import ValidationResult

logger = logging.getLogger("docfolder.document")

DocumentObserver = Callable[[Any], None]
DocumentValidator = Callable[[str], ValidationResult]

EMPTY_DOCUMENT: dict[str, Any] = {
    "root": {
        "type": "EmailLayout",
        "data": {
            "backdropColor": "#F5F5F5",
            "canvasColor": "#FFFFFF",
            "textColor": "#262626",
            "fontFamily": "MODERN_SANS",
            "childrenIds": [],
        },
    }
}


def empty_document() -> dict[str, Any]:
    """A fresh copy of the canonical empty-document template."""
    return copy.deepcopy(EMPTY_DOCUMENT)


def serialize_document(value: Any, indent: int = 2) -> str:
    """Render a document the way it is stored on disk."""
    return json.dumps(value, indent=indent)


def validate_document(text: str) -> ValidationResult:
    """Parse raw file text into a document.

    The text must be JSON whose top-level value is an object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        return ValidationResult(error=f"Invalid JSON: {exc.msg} (line {exc.lineno})")
    if not isinstance(data, dict):
        return ValidationResult(error="Document must be a JSON object")
    return ValidationResult(data=data)


class EditorDocument:
    """Holds the current document and notifies observers on change."""

    def __init__(self, value: Any = None):
        self._value = value if value is not None else empty_document()
        self._observers: list[DocumentObserver] = []

    @property
    def value(self) -> Any:
        return self._value

    def subscribe(self, observer: DocumentObserver) -> Callable[[], None]:
        """Register ``observer``; returns a function that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def update(self, value: Any) -> None:
        """Apply an edit."""
        self._set(value)

    def reset(self, value: Any) -> None:
        """Replace the document wholesale, e.g. after loading a file."""
        logger.debug("Document reset")
        self._set(value)

    def _set(self, value: Any) -> None:
        self._value = value
        for observer in list(self._observers):
            observer(value)
