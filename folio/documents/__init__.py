"""
Folio Documents & Folders.

The tree model: versioned Documents inside recursively nested Folders.
Storage layout: <root>/<folder>/.../<document>/{info.json, content.txt, history/}
"""

from folio.documents.document import Document
from folio.documents.folder import Folder
from folio.documents.models import DocumentInfo, LogEntry, Recollection, is_usable_title
from folio.documents.tokens import ConfirmationToken, DeletionTokens

__all__ = [
    "Document",
    "Folder",
    "DocumentInfo",
    "LogEntry",
    "Recollection",
    "is_usable_title",
    "ConfirmationToken",
    "DeletionTokens",
]
