"""Folio Storage — raw persistence backends and staged artifacts."""

from folio.storage.backends import LocalStorage, MemoryStorage, Storage
from folio.storage.file import StoredFile

__all__ = [
    "Storage",
    "LocalStorage",
    "MemoryStorage",
    "StoredFile",
]
