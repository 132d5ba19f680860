"""
Folio Library — the access point for a document tree.

Owns the root Folder, the Catalog mirroring it, and the CheckoutManager.
Callers address everything with slash-delimited paths relative to the
library root ("notes/daily/monday").

Usage:
    library = Library("/srv/library")
    library.create_document("notes/daily/monday")
    with library.borrow("notes/daily/monday") as lease:
        lease.edit("first draft", "alice")
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence

from folio.documents.document import Document
from folio.documents.folder import Folder, PathRequest, split_request
from folio.documents.models import LogEntry, Recollection, is_usable_title
from folio.documents.tokens import ConfirmationToken
from folio.engine.config import FolioConfig, get_config
from folio.engine.context import LibraryContext, utc_now
from folio.engine.errors import (
    FolioConflictError,
    FolioNotFoundError,
    FolioTypeError,
    FolioValidationError,
)
from folio.engine.logging import log, log_folder_event, log_system_event
from folio.library.catalog import Catalog
from folio.library.checkout import CheckoutManager, Lease
from folio.storage.backends import LocalStorage, Storage

logger = logging.getLogger("folio.library")


class Library:
    """
    Document tree with an existence catalog and exclusive checkouts.

    Args:
        path: Storage root. Defaults to ``config.root``.
        config: Loaded FolioConfig. Defaults to ``get_config()``.
        storage: Storage backend. Defaults to LocalStorage.
        clock: Callable returning the current datetime, used to stamp saves.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        config: Optional[FolioConfig] = None,
        storage: Optional[Storage] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if path is not None and (not isinstance(path, str) or not path):
            raise FolioTypeError("Library path must be a non-empty string or None", value=path)
        self._config = config or get_config()
        self.path = path or self._config.root
        self._ctx = LibraryContext(
            storage=storage or LocalStorage(),
            layout=self._config.layout,
            clock=clock or utc_now,
        )
        self._burn_token = ConfirmationToken("library")
        self.root = Folder(self.path, self._ctx)
        self.catalog = Catalog(self.root.snapshot(titles=False))
        self._checkout = CheckoutManager()

        logger.info(f"Opened library at '{self.path}'")
        log(log_system_event("library_opened", details={"path": self.path}))

    # ── Tree access ──

    @property
    def tree(self) -> Dict[str, Any]:
        return self.root.tree

    @property
    def checkout(self) -> CheckoutManager:
        return self._checkout

    @staticmethod
    def _segments(req: PathRequest, operation: str) -> List[str]:
        segments = split_request(req, operation)
        if not segments or any(not segment for segment in segments):
            raise FolioValidationError(
                f"Invalid path {req!r}",
                operation=operation,
                value=req,
            )
        return segments

    def search(self, req: PathRequest):
        """Resolve a path to a Document or Folder; None when absent."""
        return self.root.search(self._segments(req, "search"))

    def exists(self, req: PathRequest) -> bool:
        if not isinstance(req, (str, list, tuple)):
            raise FolioTypeError("Path must be a string or a sequence of strings", value=req)
        return self.catalog.exists(req)

    def is_free(self, req: str) -> bool:
        """True if the path is a Document that nobody has borrowed."""
        key = "/".join(self._segments(req, "is_free"))
        if self._checkout.is_borrowed(key):
            return False
        try:
            return isinstance(self.root.search(key), Document)
        except FolioTypeError:
            return False

    def load(self, req: Optional[PathRequest] = None) -> None:
        """
        Rescan storage below the narrowest folder containing ``req`` and
        refresh the matching part of the catalog. No argument reloads the
        whole tree.
        """
        segments = [] if req is None else self._segments(req, "load")
        node = self.root.search(segments) if segments else self.root
        while segments and not isinstance(node, Folder):
            segments = segments[:-1]
            node = self.root.search(segments) if segments else self.root
        node.load()
        self.catalog.graft(segments, node.snapshot(titles=False))

    def _document(self, req: PathRequest, operation: str) -> Document:
        segments = self._segments(req, operation)
        node = self.root.search(segments) if self.catalog.exists(segments) else None
        if not isinstance(node, Document):
            raise FolioNotFoundError(
                f"No document at '{'/'.join(segments)}'",
                path="/".join(segments),
                operation=operation,
            )
        return node

    # ── Lending ──

    def borrow(self, req: str) -> Optional[Lease]:
        """
        Lend the document at ``req`` exclusively.

        Returns None if the path is missing, is a folder, or is already
        borrowed. When the lease is returned with a changed title the
        document directory is renamed to match.
        """
        if not isinstance(req, str):
            raise FolioTypeError("Borrow path must be a string", value=req, operation="borrow")
        if not self.exists(req) or not self.is_free(req):
            return None
        key = "/".join(self._segments(req, "borrow"))
        document = self.root.search(key)

        def _on_return(title: str) -> None:
            name = key.split("/")[-1]
            if not title or title == name:
                return
            try:
                self.rename(key, title)
            except FolioConflictError:
                document.reset_title()
                raise

        return self._checkout.lend(key, document, _on_return)

    # ── Read-only delegations ──

    def read(self, req: PathRequest) -> Optional[str]:
        return self._document(req, "read").read()

    def history(self, req: PathRequest) -> List[LogEntry]:
        return self._document(req, "history").get_log()

    def reminisce(self, req: PathRequest, id: int) -> Optional[Recollection]:
        """A past version with its log entry; None if ``id`` is out of range."""
        document = self._document(req, "reminisce")
        log_entries = document.get_log()
        if isinstance(id, bool) or not isinstance(id, int) or not 0 <= id < len(log_entries):
            return None
        entry = log_entries[len(log_entries) - 1 - id]
        return Recollection(
            title=document.title,
            author=entry.author,
            change=entry.change,
            date=entry.date,
            content=document.reminisce(id),
        )

    # ── Structure ──

    @staticmethod
    def _check_titles(segments: Sequence[str], operation: str) -> None:
        for segment in segments:
            if not is_usable_title(segment):
                raise FolioValidationError(
                    f"Cannot use '{segment}' as a name",
                    operation=operation,
                    value=segment,
                )

    def _ensure_folder(self, segments: Sequence[str]) -> Folder:
        """Walk down ``segments`` creating missing folders; return the last one."""
        parent = self.root
        for segment in segments:
            child = parent.children.get(segment)
            if child is None:
                child = Folder(f"{parent.path}/{segment}", self._ctx)
                parent.add(child)
                child.mkdir()
                log(log_folder_event("created", child.path))
            elif not isinstance(child, Folder):
                raise FolioConflictError(
                    f"'{child.path}' is a document; cannot create a folder below it",
                    path=child.path,
                    operation="create_folder",
                )
            parent = child
        return parent

    def _reject_taken(self, req: str, segments: Sequence[str], operation: str) -> None:
        try:
            taken = self.root.search(segments) is not None
        except FolioTypeError as e:
            raise FolioConflictError(
                f"'{req}' lies below a document",
                path=req,
                operation=operation,
            ) from e
        if taken:
            raise FolioConflictError(
                f"'{req}' already exists",
                path=req,
                operation=operation,
            )

    def create_folder(self, req: str) -> None:
        """Create a folder, auto-creating missing ancestors."""
        if not isinstance(req, str):
            raise FolioTypeError("Folder path must be a string", value=req, operation="create_folder")
        segments = self._segments(req, "create_folder")
        self._check_titles(segments, "create_folder")
        self._reject_taken(req, segments, "create_folder")
        self.root.mkdir()
        self._ensure_folder(segments)
        logger.info(f"Created folder '{req}'")
        self.load(segments[:-1] or None)

    def create_document(self, req: str) -> None:
        """Create an empty document, auto-creating missing ancestor folders."""
        if not isinstance(req, str):
            raise FolioTypeError("Document path must be a string", value=req, operation="create_document")
        segments = self._segments(req, "create_document")
        self._check_titles(segments, "create_document")
        parent_segments, name = segments[:-1], segments[-1]
        self._reject_taken(req, segments, "create_document")
        self.root.mkdir()
        parent = self._ensure_folder(parent_segments)
        document = Document(f"{parent.path}/{name}", self._ctx)
        document.materialize()
        parent.add(document)
        logger.info(f"Created document '{req}'")
        self.load(parent_segments or None)

    def rename(self, req: str, name: str) -> bool:
        """Rename a folder or document in place. False if ``req`` is absent."""
        if not isinstance(req, str) or not req:
            return False
        segments = self._segments(req, "rename")
        self._check_titles([name], "rename")
        key = "/".join(segments)
        if self._checkout.borrowed_under(key):
            raise FolioConflictError(
                f"Cannot rename '{key}' while it (or something below it) is borrowed",
                path=key,
                operation="rename",
            )
        parent_segments = segments[:-1]
        parent = self.root.search(parent_segments) if parent_segments else self.root
        if parent is None:
            return False
        if not isinstance(parent, Folder):
            raise FolioNotFoundError(
                f"'{'/'.join(parent_segments)}' is not a folder",
                path=key,
                operation="rename",
            )
        renamed = parent.rename_sub(segments[-1], name)
        self.load(parent_segments or None)
        return renamed

    def confirm_burn(self) -> ConfirmationToken:
        """Token authorizing ``burn`` on this library."""
        return self._burn_token

    def burn(self, req: PathRequest, token: ConfirmationToken) -> bool:
        """
        Permanently delete a folder or document ("" deletes the whole library).

        A wrong token refuses with False. Borrowed documents cannot be
        burned. Not transactional: re-inspect the tree after a failure.
        """
        if token is not self._burn_token:
            logger.warning("Refused to burn: wrong confirmation token")
            return False
        segments = split_request(req, "burn")
        key = "/".join(segments)
        if self._checkout.borrowed_under(key):
            raise FolioConflictError(
                f"Cannot burn '{key or self.path}' while documents below it are borrowed",
                path=key,
                operation="burn",
            )
        try:
            self.root.delete(segments, self._ctx.tokens.folder)
        finally:
            self.load(segments[:-1] or None)
        logger.info(f"Burned '{key or self.path}'")
        return True

    def __repr__(self) -> str:
        return f"<Library '{self.path}' borrowed={len(self._checkout)}>"
