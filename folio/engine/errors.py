"""
Folio Error Hierarchy — Structured exceptions for every library operation.

All errors carry the storage path and operation they were raised from so a
failed call can be logged as JSON and inspected later.

Hierarchy:
    FolioError
    ├── FolioValidationError   — Invalid argument (bad title, empty path)
    │   └── FolioTypeError     — Wrong argument type / not a folder
    ├── FolioNotFoundError     — Path does not resolve
    ├── FolioConflictError     — Duplicate name, already-borrowed document
    ├── FolioStateError        — Returned lease, deleted document
    └── FolioIOError           — Removal left residue on disk
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class FolioError(Exception):
    """
    Base error for all Folio failures.
    All context is serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.path: Optional[str] = context.get("path")
        self.operation: Optional[str] = context.get("operation")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "path": self.path,
            "operation": self.operation,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("path", "operation")
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str, ensure_ascii=False)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.path:
            parts.append(f"path={self.path}")
        if self.operation:
            parts.append(f"operation={self.operation}")
        return " | ".join(parts)


class FolioValidationError(FolioError, ValueError):
    """
    Argument failed validation (title rule, empty path, empty request).
    Includes the rejected value when one is available.
    """

    def __init__(self, message: str, **context: Any):
        self.value: Any = context.get("value")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["value"] = None if self.value is None else str(self.value)
        return d


class FolioTypeError(FolioValidationError, TypeError):
    """Argument has the wrong type, or a path segment is not a folder."""
    pass


class FolioNotFoundError(FolioError, LookupError):
    """Path does not resolve to a folder or document."""
    pass


class FolioConflictError(FolioError):
    """Name already taken, or document currently borrowed."""
    pass


class FolioStateError(FolioError):
    """Operation on a returned lease or a deleted document."""
    pass


class FolioIOError(FolioError):
    """
    Removal left residue in storage.

    Signals an unexpected foreign artifact inside a document or folder
    directory, not a normal precondition failure.
    """
    pass
