"""
Folio Document — versioned textual content split into metadata and content.

A document is a directory holding:
    info.json      title, last author, change log
    content.txt    current content, or the empty marker when nothing is pending
    history/       one snapshot per log entry: "<date>(by <author>).txt"

The in-memory draft is dropped back to the empty marker after every save so
the text is not held in memory once committed.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import List, Optional

from folio.documents.models import DocumentInfo, LogEntry, is_usable_title
from folio.documents.tokens import ConfirmationToken
from folio.engine.context import LibraryContext
from folio.engine.errors import (
    FolioConflictError,
    FolioIOError,
    FolioStateError,
    FolioTypeError,
    FolioValidationError,
)
from folio.engine.logging import log, log_document_event
from folio.storage.file import StoredFile

logger = logging.getLogger("folio.documents.document")

_ILLEGAL_AUTHOR_CHARS = re.compile(r'[\\/:*?"<>|]')


def sanitize_author(author: Optional[str]) -> str:
    """Replace every character a file name cannot hold with a space."""
    return _ILLEGAL_AUTHOR_CHARS.sub(" ", author or "")


class Document:
    """
    One document of the tree, loaded from its metadata or freshly created.

    Nothing is written to storage until ``materialize`` or ``save`` is called.
    """

    def __init__(self, path: str, context: Optional[LibraryContext] = None):
        if not isinstance(path, str):
            raise FolioTypeError("Document path must be a string", value=path, operation="load")
        if not path.strip("/"):
            raise FolioValidationError("Document path must not be empty", value=path, operation="load")

        self._ctx = context or LibraryContext()
        self.path = path.rstrip("/")
        self._deleted = False

        layout = self._ctx.layout
        self._info_file = StoredFile(self._ctx.storage, self._artifact(layout.info_file), structured=True)
        self._content_file = StoredFile(self._ctx.storage, self._artifact(layout.content_file))

        self._load_info()
        self._content_file.write(self._empty)

    # ── Properties ──

    @property
    def name(self) -> str:
        return self.path.split("/")[-1]

    @property
    def title(self) -> str:
        return self.info.title

    @property
    def author(self) -> Optional[str]:
        return self.info.author

    @property
    def exists(self) -> bool:
        return self._info_file.exists and self._content_file.exists

    @property
    def deleted(self) -> bool:
        return self._deleted

    @property
    def _empty(self) -> str:
        return self._ctx.layout.empty_marker

    @property
    def _history_dir(self) -> str:
        return f"{self.path}/{self._ctx.layout.history_dir}"

    def _artifact(self, name: str) -> str:
        return f"{self.path}/{name}"

    def _snapshot_path(self, author: Optional[str], date: datetime) -> str:
        stamp = date.strftime(self._ctx.layout.snapshot_date_format)
        return f"{self._history_dir}/{stamp}(by {sanitize_author(author)}).txt"

    def _ensure_alive(self, operation: str) -> None:
        if self._deleted:
            raise FolioStateError(
                f"Document '{self.path}' has been deleted",
                path=self.path,
                operation=operation,
            )

    def _load_info(self) -> None:
        if self._info_file.exists:
            self.info = DocumentInfo.model_validate(self._info_file.load())
        else:
            self.info = DocumentInfo()
        if not self.info.title:
            self.info.title = self.name

    def _persist_info(self) -> None:
        self._info_file.write(self.info.model_dump(mode="json"))
        self._info_file.save()

    # ── Metadata ──

    def set_title(self, title: str) -> None:
        self._ensure_alive("set_title")
        if not is_usable_title(title):
            raise FolioValidationError(
                "Title may only contain letters, digits, Hangul, spaces, '(', ')', ',' and '!'",
                path=self.path,
                operation="set_title",
                value=title,
            )
        self.info.title = title

    def reset_title(self) -> None:
        """Make the title match the directory name again and persist it."""
        self._ensure_alive("reset_title")
        self.info.title = self.name
        if self._info_file.exists:
            self._persist_info()

    # ── Content ──

    def write(self, content: str, author: str) -> None:
        """Replace the in-memory draft; nothing is committed until save()."""
        self._ensure_alive("write")
        if not isinstance(content, str) or not isinstance(author, str):
            raise FolioTypeError(
                "Document content and author must be strings",
                path=self.path,
                operation="write",
            )
        self._content_file.write(content)
        self.info.author = author

    def read(self) -> Optional[str]:
        """Pending draft if any, else the persisted content, else None."""
        self._ensure_alive("read")
        draft = self._content_file.staged
        if draft is not None and draft != self._empty:
            return draft
        if not self._content_file.exists:
            return None
        stored = self._content_file.read()
        return None if stored == self._empty else stored

    def save(self) -> bool:
        """
        Commit the pending draft.

        Appends a log entry whose change is the draft length minus the
        length the log already accounts for, writes a history snapshot,
        then persists metadata and content. Returns False when no draft
        is pending.
        """
        self._ensure_alive("save")
        content = self._content_file.staged
        if content is None or content == self._empty:
            return False

        entry = LogEntry(
            author=self.info.author,
            change=len(content) - self.info.total_length(),
            date=self._ctx.now(),
        )
        self.info.log.append(entry)

        snapshot = StoredFile(self._ctx.storage, self._snapshot_path(entry.author, entry.date))
        snapshot.write(content)
        snapshot.save()

        self._persist_info()
        self._content_file.save()
        self._content_file.write(self._empty)

        logger.info(f"Saved '{self.path}' by {entry.author} ({entry.change:+d} chars)")
        log(log_document_event("saved", self.path, author=entry.author, change=entry.change))
        return True

    def revert(self) -> None:
        """Drop the pending draft and reload metadata from storage."""
        self._ensure_alive("revert")
        self._content_file.write(self._empty)
        self._load_info()

    def materialize(self) -> bool:
        """Write metadata and an empty content artifact if not on disk yet."""
        self._ensure_alive("materialize")
        if self.exists:
            return False
        self._ctx.storage.make_dirs(self.path)
        self._persist_info()
        if not self._content_file.exists:
            self._ctx.storage.write_text(self._content_file.path, self._empty)
        logger.debug(f"Materialized document '{self.path}'")
        return True

    # ── History ──

    def get_log(self) -> List[LogEntry]:
        return [entry.model_copy() for entry in self.info.log]

    def _entry_index(self, id: int) -> Optional[int]:
        if isinstance(id, bool) or not isinstance(id, int):
            return None
        if 0 <= id < len(self.info.log):
            return len(self.info.log) - 1 - id
        return None

    def reminisce(self, id: int) -> Optional[str]:
        """Snapshot content of the id-th most recent save (0 = latest)."""
        self._ensure_alive("reminisce")
        index = self._entry_index(id)
        if index is None:
            return None
        entry = self.info.log[index]
        snapshot = StoredFile(self._ctx.storage, self._snapshot_path(entry.author, entry.date))
        if not snapshot.exists:
            logger.warning(f"Snapshot missing for '{self.path}' entry {id}: {snapshot.path}")
            return None
        return snapshot.read()

    def remove_log(self, id: int) -> bool:
        self._ensure_alive("remove_log")
        index = self._entry_index(id)
        if index is None:
            return False
        entry = self.info.log.pop(index)
        self._ctx.storage.remove(self._snapshot_path(entry.author, entry.date))
        if self._info_file.exists:
            self._persist_info()
        log(log_document_event("history_removed", self.path, author=entry.author, change=entry.change))
        return True

    def _clear_history(self) -> None:
        for entry in self.info.log:
            self._ctx.storage.remove(self._snapshot_path(entry.author, entry.date))
        self.info.log = []
        self._ctx.storage.remove(self._history_dir)

    def clear_log(self) -> None:
        self._ensure_alive("clear_log")
        self._clear_history()
        if self._info_file.exists:
            self._persist_info()
        log(log_document_event("history_cleared", self.path))

    # ── Structure ──

    def rename(self, name: str) -> None:
        """Move the document directory; the title follows the new name."""
        self._ensure_alive("rename")
        if not isinstance(name, str) or not name:
            raise FolioTypeError(
                "Document name must be a non-empty string",
                path=self.path,
                operation="rename",
                value=name,
            )
        if "/" in name:
            raise FolioValidationError(
                "Document name must be a single path segment",
                path=self.path,
                operation="rename",
                value=name,
            )

        target = self.path[: len(self.path) - len(self.name)] + name
        storage = self._ctx.storage
        if storage.exists(target):
            raise FolioConflictError(
                f"Cannot rename '{self.path}': '{target}' already exists",
                path=self.path,
                operation="rename",
            )

        previous = self.path
        on_disk = storage.is_dir(previous)
        if on_disk:
            storage.move(previous, target)
        self._relocate(target)
        self.info.title = name
        if on_disk:
            self._persist_info()

        logger.info(f"Renamed document '{previous}' -> '{target}'")
        log(log_document_event("renamed", target))

    def _relocate(self, path: str) -> None:
        """Rebind every artifact to a new directory; storage is not touched."""
        self.path = path
        self._info_file.relocate(self._artifact(self._ctx.layout.info_file))
        self._content_file.relocate(self._artifact(self._ctx.layout.content_file))

    def confirm_delete(self) -> ConfirmationToken:
        """Token authorizing delete_all on this library's documents."""
        return self._ctx.tokens.document

    def delete_all(self, token: ConfirmationToken) -> bool:
        """
        Permanently remove history, metadata, content and the directory.

        A wrong token refuses silently with False. Raises FolioIOError when
        the directory still holds something this document did not create.
        """
        self._ensure_alive("delete_all")
        if token is not self._ctx.tokens.document:
            logger.warning(f"Refused to delete '{self.path}': wrong confirmation token")
            log(log_document_event("delete_refused", self.path))
            return False

        storage = self._ctx.storage
        self._clear_history()
        self._info_file.delete()
        self._content_file.delete()
        if not storage.remove(self.path) and storage.exists(self.path):
            log(log_document_event("deleted", self.path, error="residue"))
            raise FolioIOError(
                f"Failed to delete document '{self.path}'; unexpected files remain in the directory",
                path=self.path,
                operation="delete_all",
            )

        self._deleted = True
        logger.info(f"Deleted document '{self.path}'")
        log(log_document_event("deleted", self.path))
        return True

    def __repr__(self) -> str:
        return f"<Document '{self.path}' title='{self.title}' log={len(self.info.log)}>"
