"""StoredFile — a single staged artifact (JSON or raw text) over a Storage backend."""

from __future__ import annotations

import json
import logging
from typing import Any

from folio.storage.backends import Storage

logger = logging.getLogger("folio.storage.file")


class StoredFile:
    """
    One artifact in storage with an in-memory staging slot.

    ``write`` only stages a value; ``save`` commits the staged value.
    ``load`` reads from storage and keeps the result staged, ``read`` reads
    from storage without touching the staging slot.
    """

    def __init__(self, storage: Storage, path: str, structured: bool = False):
        self._storage = storage
        self.path = path
        self.structured = structured
        self._staged: Any = None

    @property
    def exists(self) -> bool:
        return self._storage.is_file(self.path)

    @property
    def staged(self) -> Any:
        return self._staged

    def read(self) -> Any:
        raw = self._storage.read_text(self.path)
        return json.loads(raw) if self.structured else raw

    def load(self) -> Any:
        self._staged = self.read()
        return self._staged

    def write(self, value: Any) -> Any:
        self._staged = value
        return value

    def save(self) -> bool:
        if self._staged is None:
            return False
        if self.structured:
            text = json.dumps(self._staged, ensure_ascii=False, indent=2)
        else:
            text = self._staged
        self._storage.write_text(self.path, text)
        return True

    def delete(self) -> bool:
        return self._storage.remove(self.path)

    def relocate(self, path: str) -> None:
        """Point at a new location; staged value is kept, storage untouched."""
        self.path = path

    def __repr__(self) -> str:
        kind = "json" if self.structured else "text"
        return f"<StoredFile {kind} '{self.path}'>"
