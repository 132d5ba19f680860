"""
Folio Document Models — Pydantic definitions of a document's metadata.

LogEntry: One save in a document's history.
DocumentInfo: Contents of a document's info.json (title, last author, log).
Recollection: A history entry together with its snapshot content.

Stored form of info.json:
    {"title": str, "author": str | null,
     "log": [{"author": str, "change": int, "date": <epoch milliseconds>}]}
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

TITLE_PATTERN = re.compile(r"[0-9A-Za-z가-힣(),! ]+")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def is_usable_title(title: Any) -> bool:
    """Alphanumerics, Hangul syllables, space, parentheses, comma, exclamation."""
    return isinstance(title, str) and TITLE_PATTERN.fullmatch(title) is not None


def to_epoch_ms(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.astimezone()
    return (value - _EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(value: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=int(value))


class LogEntry(BaseModel):
    """One committed save: who wrote it, the length delta, and when."""

    author: Optional[str] = Field(default=None, description="Writer of this save")
    change: int = Field(description="Content length minus the sum of earlier changes")
    date: datetime = Field(description="Save time (UTC)")

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return from_epoch_ms(int(v))
        return v

    @field_serializer("date")
    def serialize_date(self, v: datetime) -> int:
        return to_epoch_ms(v)


class DocumentInfo(BaseModel):
    """Metadata artifact of a document. Every instance gets its own log list."""

    title: Optional[str] = None
    author: Optional[str] = None
    log: List[LogEntry] = Field(default_factory=list)

    def total_length(self) -> int:
        """Content length reconstructed from the change log."""
        return sum(entry.change for entry in self.log)


class Recollection(BaseModel):
    """A past version of a document as returned by Library.reminisce."""

    title: str
    author: Optional[str] = None
    change: int
    date: datetime
    content: Optional[str] = None
