"""
Folio Folder — recursive container of named Documents and Folders.

Any directory that holds both a metadata and a content artifact is a
Document; every other directory is a Folder. Children are keyed by their
directory name.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from folio.documents.document import Document
from folio.documents.tokens import ConfirmationToken
from folio.engine.context import LibraryContext
from folio.engine.errors import (
    FolioConflictError,
    FolioIOError,
    FolioNotFoundError,
    FolioTypeError,
    FolioValidationError,
)
from folio.engine.logging import log, log_folder_event

logger = logging.getLogger("folio.documents.folder")

Node = Union[Document, "Folder"]
PathRequest = Union[str, Sequence[str]]


def split_request(req: PathRequest, operation: str) -> List[str]:
    """Turn "a/b/c" or ["a", "b", "c"] into a segment list."""
    if isinstance(req, str):
        return req.split("/") if req else []
    if isinstance(req, (list, tuple)) and all(isinstance(seg, str) for seg in req):
        return list(req)
    raise FolioTypeError(
        "Path request must be a string or a sequence of strings",
        operation=operation,
        value=req,
    )


class Folder:
    """
    A directory of the tree. Constructing a Folder loads it (and, through
    its child Folders, the whole subtree below it).
    """

    def __init__(self, path: str, context: Optional[LibraryContext] = None):
        if not isinstance(path, str):
            raise FolioTypeError("Folder path must be a string", value=path)
        self._ctx = context or LibraryContext()
        self.path = path.rstrip("/") or path
        self.children: Dict[str, Node] = {}
        self.load()

    @property
    def name(self) -> str:
        return self.path.split("/")[-1]

    @property
    def list(self) -> List[str]:
        return list(self.children)

    @property
    def docs(self) -> List[str]:
        return [name for name, child in self.children.items() if isinstance(child, Document)]

    @property
    def folders(self) -> List[str]:
        return [name for name, child in self.children.items() if isinstance(child, Folder)]

    def __contains__(self, name: str) -> bool:
        return name in self.children

    def _is_document_dir(self, path: str) -> bool:
        storage, layout = self._ctx.storage, self._ctx.layout
        return (
            storage.is_file(f"{path}/{layout.info_file}")
            and storage.is_file(f"{path}/{layout.content_file}")
        )

    def load(self) -> bool:
        """
        Add every directory entry not already tracked.

        Tracked children are never replaced or removed, so repeated loads
        keep in-memory drafts intact. Returns False if the path is not a
        directory.
        """
        storage = self._ctx.storage
        if not storage.is_dir(self.path):
            return False
        added = 0
        for name in storage.list_dir(self.path):
            child_path = f"{self.path}/{name}"
            if name in self.children or not storage.is_dir(child_path):
                continue
            if self._is_document_dir(child_path):
                self.children[name] = Document(child_path, self._ctx)
            else:
                self.children[name] = Folder(child_path, self._ctx)
            added += 1
        if added:
            logger.debug(f"Loaded {added} new entries into '{self.path}'")
        return True

    def rename(self, name: str) -> bool:
        """Move this folder's directory. Returns False if it was never created."""
        if not isinstance(name, str) or not name:
            raise FolioTypeError(
                "Folder name must be a non-empty string",
                path=self.path,
                operation="rename",
                value=name,
            )
        if "/" in name:
            raise FolioValidationError(
                "Folder name must be a single path segment",
                path=self.path,
                operation="rename",
                value=name,
            )
        storage = self._ctx.storage
        target = self.path[: len(self.path) - len(self.name)] + name
        if storage.exists(target):
            raise FolioConflictError(
                f"Cannot rename '{self.path}': '{target}' already exists",
                path=self.path,
                operation="rename",
            )
        previous = self.path
        moved = storage.is_dir(previous)
        if moved:
            storage.move(previous, target)
        self._relocate(target)
        logger.info(f"Renamed folder '{previous}' -> '{target}'")
        return moved

    def _relocate(self, path: str) -> None:
        self.path = path
        for name, child in self.children.items():
            child._relocate(f"{path}/{name}")

    def rename_sub(self, sub: str, name: str) -> bool:
        """Rename a direct child on disk and re-key it. False if absent."""
        if sub not in self.children:
            return False
        if not isinstance(name, str) or not name:
            raise FolioTypeError(
                "New name must be a non-empty string",
                path=self.path,
                operation="rename_sub",
                value=name,
            )
        if name == sub:
            return True
        if name in self.children:
            raise FolioConflictError(
                f"'{name}' already exists in '{self.path}'",
                path=self.path,
                operation="rename_sub",
            )
        child = self.children[sub]
        child.rename(name)
        del self.children[sub]
        self.children[name] = child
        log(log_folder_event("renamed", self.path, target=f"{sub} -> {name}"))
        return True

    @property
    def tree(self) -> Dict[str, Any]:
        """
        Serializable snapshot of the subtree:

            {"name": "folder", "branches": ["doc title", {"name": "sub", "branches": [...]}]}
        """
        return self.snapshot()

    def snapshot(self, titles: bool = True) -> Dict[str, Any]:
        """Same shape as ``tree``; with ``titles=False`` documents appear under their directory name."""
        branches: List[Any] = []
        for name, child in self.children.items():
            if isinstance(child, Folder):
                branches.append(child.snapshot(titles))
            else:
                branches.append(child.title if titles else name)
        return {"name": self.name, "branches": branches}

    def add(self, child: Node) -> None:
        """Attach a Document or Folder directly below this folder."""
        if not isinstance(child, (Document, Folder)):
            raise FolioTypeError(
                "Can only add a Folder or a Document",
                path=self.path,
                operation="add",
                value=child,
            )
        if child.name in self.children:
            raise FolioConflictError(
                f"'{child.name}' already exists in '{self.path}'",
                path=self.path,
                operation="add",
            )
        self.children[child.name] = child

    def mkdir(self) -> None:
        self._ctx.storage.make_dirs(self.path)

    def save(self) -> None:
        """Create the directory, then save every child recursively."""
        self.mkdir()
        for child in self.children.values():
            if isinstance(child, Document):
                child.materialize()
            child.save()

    def search(self, req: PathRequest) -> Optional[Node]:
        """
        Resolve a slash path or segment list below this folder.

        Returns None when a segment is absent. Raises FolioTypeError when an
        existing intermediate segment is a Document.
        """
        segments = split_request(req, "search")
        if not segments:
            raise FolioValidationError(
                "Search needs at least one path segment",
                path=self.path,
                operation="search",
            )
        head = self.children.get(segments[0])
        if len(segments) == 1 or head is None:
            return head
        if isinstance(head, Folder):
            return head.search(segments[1:])
        raise FolioTypeError(
            f"'{segments[0]}' in '{self.path}' is not a folder; cannot search below it",
            path=self.path,
            operation="search",
        )

    def confirm_delete(self) -> ConfirmationToken:
        """Token authorizing delete on this library's folders."""
        return self._ctx.tokens.folder

    def delete(self, req: PathRequest, token: ConfirmationToken) -> bool:
        """
        Permanently delete a subtree.

        An empty path deletes everything below this folder and then the
        folder's own directory. Otherwise the addressed entry is detached
        from its parent and deleted. A wrong token refuses with False and
        touches nothing. Not transactional: a failure deep in the tree
        leaves the entries already removed gone.
        """
        if token is not self._ctx.tokens.folder:
            logger.warning(f"Refused to delete below '{self.path}': wrong confirmation token")
            log(log_folder_event("delete_refused", self.path))
            return False

        segments = split_request(req, "delete")
        if not segments:
            return self._delete_self(token)

        target = self.children.get(segments[0])
        if target is None:
            raise FolioNotFoundError(
                f"'{segments[0]}' does not exist in '{self.path}'",
                path=self.path,
                operation="delete",
            )
        if len(segments) > 1:
            if not isinstance(target, Folder):
                raise FolioNotFoundError(
                    f"'{segments[0]}' in '{self.path}' is not a folder",
                    path=self.path,
                    operation="delete",
                )
            return target.delete(segments[1:], token)

        del self.children[segments[0]]
        if isinstance(target, Folder):
            return target.delete([], token)
        return target.delete_all(self._ctx.tokens.document)

    def _delete_self(self, token: ConfirmationToken) -> bool:
        for name in list(self.children):
            child = self.children.pop(name)
            if isinstance(child, Folder):
                child.delete([], token)
            else:
                child.delete_all(self._ctx.tokens.document)

        storage = self._ctx.storage
        if not storage.remove(self.path) and storage.exists(self.path):
            log(log_folder_event("deleted", self.path, error="residue"))
            raise FolioIOError(
                f"Failed to delete folder '{self.path}'; unexpected files remain in the directory",
                path=self.path,
                operation="delete",
            )
        logger.info(f"Deleted folder '{self.path}'")
        log(log_folder_event("deleted", self.path))
        return True

    def __repr__(self) -> str:
        return f"<Folder '{self.path}' children={len(self.children)}>"
