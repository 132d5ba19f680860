"""
Folio — hierarchical document store with per-document edit history.

Documents live in nested folders on disk; every save keeps a timestamped
snapshot, and a checkout layer lends each document to one editor at a time.

    from folio import Library

    library = Library("library")
    library.create_document("notes/monday")
    lease = library.borrow("notes/monday")
    lease.edit("hello", "alice")
    lease.release()
"""

__version__ = "0.1.0"

from folio.library import Library  # noqa: E402

__all__ = ["Library", "engine", "documents", "library", "storage"]
