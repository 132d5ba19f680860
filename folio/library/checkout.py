"""
Checkout — exclusive, single-use edit handles for documents.

Per document path:   Free → Borrowed → Free
Per Lease instance:  Active → Returned (terminal)

The checkout set lives in process memory only. It is not persisted, so a
fresh process starts with every document Free.
"""

from __future__ import annotations

import logging
from typing import Callable, FrozenSet, Optional, Set

from folio.documents.document import Document
from folio.documents.models import is_usable_title
from folio.engine.errors import FolioError, FolioStateError, FolioValidationError
from folio.engine.logging import log, log_lease_event

logger = logging.getLogger("folio.library.checkout")

ReturnCallback = Callable[[str], None]
ReleaseHook = Callable[[str, bool], None]


class Lease:
    """
    Edit handle for one borrowed document.

    ``release`` saves the document and frees its path; ``abandon`` frees it
    without saving. After either, every call on this instance raises
    FolioStateError. Usable as a context manager: a clean exit releases,
    an exit through an exception abandons.
    """

    def __init__(self, path: str, document: Document, on_return: ReleaseHook):
        self._path = path
        self._document: Optional[Document] = document
        self._on_return: Optional[ReleaseHook] = on_return

    @property
    def path(self) -> str:
        return self._path

    @property
    def returned(self) -> bool:
        return self._document is None

    def _active(self, operation: str) -> Document:
        if self._document is None:
            raise FolioStateError(
                f"Lease for '{self._path}' has already been returned",
                path=self._path,
                operation=operation,
            )
        return self._document

    @property
    def title(self) -> str:
        return self._active("title").title

    def read(self) -> Optional[str]:
        return self._active("read").read()

    def edit(self, content: str, author: str) -> None:
        self._active("edit").write(content, author)

    def set_title(self, title: str) -> bool:
        """Change the title; the directory follows when the lease is released."""
        document = self._active("set_title")
        if not is_usable_title(title):
            raise FolioValidationError(
                f"Cannot use '{title}' as a title",
                path=self._path,
                operation="set_title",
                value=title,
            )
        document.set_title(title)
        return True

    def release(self) -> bool:
        """
        Save the document and give it back.

        The lease becomes Returned and the release callback runs even when
        saving raises; the error still reaches the caller. Returns whether
        a draft was committed.
        """
        document = self._active("release")
        saved = False
        try:
            saved = document.save()
        finally:
            self._finish(document, saved)
        return saved

    def abandon(self) -> None:
        """Give the document back without committing the draft or the title."""
        document = self._active("abandon")
        try:
            document.revert()
        finally:
            self._finish(document, False)

    def _finish(self, document: Document, saved: bool) -> None:
        callback = self._on_return
        self._document = None
        self._on_return = None
        callback(document.title, saved)

    def __enter__(self) -> "Lease":
        self._active("enter")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.returned:
            return
        if exc_type is None:
            self.release()
            return
        try:
            self.abandon()
        except FolioError as e:
            logger.warning(f"Could not abandon '{self._path}' while handling {exc_type.__name__}: {e.message}")

    def __repr__(self) -> str:
        state = "returned" if self.returned else "active"
        return f"<Lease '{self._path}' {state}>"


class CheckoutManager:
    """Tracks which document paths are lent out."""

    def __init__(self) -> None:
        self._borrowed: Set[str] = set()

    @property
    def borrowed(self) -> FrozenSet[str]:
        return frozenset(self._borrowed)

    def is_borrowed(self, path: str) -> bool:
        return path in self._borrowed

    def borrowed_under(self, path: str) -> FrozenSet[str]:
        """Borrowed paths equal to ``path`` or below it ("" means all)."""
        if not path:
            return self.borrowed
        prefix = path + "/"
        return frozenset(p for p in self._borrowed if p == path or p.startswith(prefix))

    def lend(
        self,
        path: str,
        document: Document,
        on_return: Optional[ReturnCallback] = None,
    ) -> Optional[Lease]:
        """Hand out a Lease, or None if the path is already borrowed."""
        if path in self._borrowed:
            logger.info(f"Refused to lend '{path}': already borrowed")
            log(log_lease_event("refused", path))
            return None
        self._borrowed.add(path)
        logger.info(f"Lent '{path}'")
        log(log_lease_event("borrowed", path, title=document.title))

        def _returned(title: str, saved: bool) -> None:
            self._borrowed.discard(path)
            logger.info(f"Returned '{path}' (saved={saved})")
            log(log_lease_event("returned", path, title=title, saved=saved))
            if on_return is not None:
                on_return(title)

        return Lease(path, document, _returned)

    def __len__(self) -> int:
        return len(self._borrowed)
