"""
Folio Logging — Structured JSON-lines event files next to stdlib logging.

Implements:
- FileLogger: Per-object-type, per-category log files (daily rotation)
- Log entry builders for document, folder, lease and system events
- Module-level init/log/shutdown helpers

Layout: {log_dir}/{object_type}/{category}/{YYYY-MM-DD}.jsonl
"""

from __future__ import annotations

import json
import logging
import threading
from collections import defaultdict
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger("folio.engine.logging")

# Valid object types and their permitted categories
OBJECT_TYPE_CATEGORIES = {
    "documents": ["execution", "security"],
    "folders": ["execution", "security"],
    "leases": ["execution"],
    "system": ["execution"],
}


class LogEntry:
    """A structured log entry destined for a specific file."""

    __slots__ = ("object_type", "category", "data")

    def __init__(self, object_type: str, category: str, data: Dict[str, Any]):
        self.object_type = object_type
        self.category = category
        self.data = data

    def to_json(self) -> str:
        return json.dumps(self.data, default=str, ensure_ascii=False, separators=(",", ":"))


class FileLogger:
    """
    Writes structured JSON log entries to per-object-type, per-category files.
    Files rotate daily: logs/{object_type}/{category}/{YYYY-MM-DD}.jsonl
    """

    def __init__(self, log_dir: str = ".folio/logs"):
        self._log_dir = Path(log_dir)
        self._file_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._ensure_directories()

    @property
    def log_dir(self) -> Path:
        return self._log_dir

    def _ensure_directories(self) -> None:
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                (self._log_dir / obj_type / cat).mkdir(parents=True, exist_ok=True)

    def write(self, entry: LogEntry) -> None:
        """Write a single log entry to the appropriate file."""
        if entry.category not in OBJECT_TYPE_CATEGORIES.get(entry.object_type, []):
            raise ValueError(
                f"Unknown log target {entry.object_type}/{entry.category}"
            )
        file_path = self._resolve_path(entry.object_type, entry.category)
        key = str(file_path)

        with self._file_locks[key]:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(entry.to_json())
                f.write("\n")

    def read(self, object_type: str, category: str, day: Optional[date] = None) -> List[Dict[str, Any]]:
        """Read back the entries of one log file; missing file gives []."""
        path = self._resolve_path(object_type, category, day)
        if not path.exists():
            return []
        results = []
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        results.append(json.loads(line))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Could not read log file %s: %s", path, exc)
        return results

    def _resolve_path(self, object_type: str, category: str, day: Optional[date] = None) -> Path:
        day = day or date.today()
        return self._log_dir / object_type / category / f"{day.isoformat()}.jsonl"


# ---------------------------------------------------------------------------
# Log Entry Builders
# ---------------------------------------------------------------------------

def _base_entry(
    event: str,
    level: str,
    path: str,
    **extra: Any,
) -> Dict[str, Any]:
    """Build a base log entry with common fields."""
    entry: Dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": level,
        "event": event,
        "path": path,
    }
    entry.update({k: v for k, v in extra.items() if v is not None})
    return entry


def log_document_event(
    event: str,
    path: str,
    author: Optional[str] = None,
    change: Optional[int] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """Build a document event entry (saved/renamed/history_removed/deleted)."""
    data = _base_entry(
        event=event,
        level="ERROR" if error else "INFO",
        path=path,
        author=author,
        change=change,
        error=error,
    )
    category = "security" if event in ("deleted", "delete_refused") else "execution"
    return LogEntry("documents", category, data)


def log_folder_event(
    event: str,
    path: str,
    target: Optional[str] = None,
    error: Optional[str] = None,
) -> LogEntry:
    """Build a folder event entry (created/renamed/deleted)."""
    data = _base_entry(
        event=event,
        level="ERROR" if error else "INFO",
        path=path,
        target=target,
        error=error,
    )
    category = "security" if event in ("deleted", "delete_refused") else "execution"
    return LogEntry("folders", category, data)


def log_lease_event(
    event: str,
    path: str,
    title: Optional[str] = None,
    saved: Optional[bool] = None,
) -> LogEntry:
    """Build a lease event entry (borrowed/refused/returned)."""
    data = _base_entry(
        event=event,
        level="INFO",
        path=path,
        title=title,
        saved=saved,
    )
    return LogEntry("leases", "execution", data)


def log_system_event(
    event: str,
    level: str = "INFO",
    details: Optional[Dict[str, Any]] = None,
) -> LogEntry:
    """Build a system event entry (library opened, config loaded)."""
    data = _base_entry(event=event, level=level, path="system")
    if details:
        data["details"] = details
    return LogEntry("system", "execution", data)


# ---------------------------------------------------------------------------
# Convenience: Global File Logger Singleton
# ---------------------------------------------------------------------------

_file_logger: Optional[FileLogger] = None


def init_logging(log_dir: str = ".folio/logs", level: str = "INFO") -> FileLogger:
    """Initialize the global structured file logger and the stdlib level."""
    global _file_logger
    logging.getLogger("folio").setLevel(level)
    _file_logger = FileLogger(log_dir=log_dir)
    return _file_logger


def get_file_logger() -> Optional[FileLogger]:
    return _file_logger


def log(entry: LogEntry) -> bool:
    """Write an entry through the global file logger. False when not initialized."""
    if _file_logger is None:
        return False
    try:
        _file_logger.write(entry)
    except OSError as e:
        logger.error(f"Structured log write failed: {e}")
        return False
    return True


def shutdown_logging() -> None:
    global _file_logger
    _file_logger = None
