"""
Folio Library Context — state shared by every node of one document tree.

One LibraryContext is created per Library and handed down to each Folder
and Document it builds: the storage backend, the artifact layout, the
deletion tokens and the clock used to stamp saves.

Usage:
    from folio.engine.context import LibraryContext
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from folio.documents.tokens import DeletionTokens
from folio.engine.config import LayoutConfig
from folio.storage.backends import LocalStorage, Storage


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class LibraryContext:
    storage: Storage = field(default_factory=LocalStorage)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    tokens: DeletionTokens = field(default_factory=DeletionTokens)
    clock: Callable[[], datetime] = utc_now

    def now(self) -> datetime:
        """Current time as an aware UTC datetime truncated to milliseconds."""
        stamp = self.clock()
        if stamp.tzinfo is None:
            stamp = stamp.astimezone()
        stamp = stamp.astimezone(timezone.utc)
        return stamp.replace(microsecond=stamp.microsecond // 1000 * 1000)
