"""Unit tests for folio.engine.logging — FileLogger, entry builders, global helpers."""

import json
from datetime import date

import pytest

from folio.engine.config import FolioConfig
from folio.engine.logging import (
    OBJECT_TYPE_CATEGORIES,
    FileLogger,
    LogEntry,
    get_file_logger,
    init_logging,
    log,
    log_document_event,
    log_folder_event,
    log_lease_event,
    log_system_event,
)


class TestLogEntry:
    def test_to_json(self):
        entry = LogEntry("documents", "execution", {"path": "library/한글"})
        parsed = json.loads(entry.to_json())
        assert parsed["path"] == "library/한글"
        assert "한글" in entry.to_json()


class TestFileLogger:
    def test_creates_category_directories(self, tmp_path):
        FileLogger(log_dir=str(tmp_path / "logs"))
        for obj_type, categories in OBJECT_TYPE_CATEGORIES.items():
            for cat in categories:
                assert (tmp_path / "logs" / obj_type / cat).is_dir()

    def test_write_and_read(self, tmp_path):
        fl = FileLogger(log_dir=str(tmp_path))
        fl.write(LogEntry("leases", "execution", {"event": "borrowed"}))
        fl.write(LogEntry("leases", "execution", {"event": "returned"}))
        entries = fl.read("leases", "execution")
        assert [e["event"] for e in entries] == ["borrowed", "returned"]
        assert (tmp_path / "leases" / "execution" / f"{date.today().isoformat()}.jsonl").exists()

    def test_unknown_target_rejected(self, tmp_path):
        fl = FileLogger(log_dir=str(tmp_path))
        with pytest.raises(ValueError):
            fl.write(LogEntry("leases", "security", {}))

    def test_read_missing_file(self, tmp_path):
        assert FileLogger(log_dir=str(tmp_path)).read("system", "execution") == []


class TestBuilders:
    def test_document_saved(self):
        entry = log_document_event("saved", "library/doc", author="alice", change=5)
        assert entry.object_type == "documents"
        assert entry.category == "execution"
        assert entry.data["event"] == "saved"
        assert entry.data["author"] == "alice"
        assert entry.data["change"] == 5
        assert entry.data["level"] == "INFO"

    def test_document_deleted_is_security(self):
        assert log_document_event("deleted", "library/doc").category == "security"

    def test_document_error_level(self):
        entry = log_document_event("deleted", "library/doc", error="residue")
        assert entry.data["level"] == "ERROR"

    def test_none_fields_dropped(self):
        entry = log_folder_event("created", "library/a")
        assert "target" not in entry.data
        assert "error" not in entry.data

    def test_lease_event(self):
        entry = log_lease_event("returned", "a/doc", title="doc", saved=True)
        assert entry.object_type == "leases"
        assert entry.data["saved"] is True

    def test_system_event(self):
        entry = log_system_event("library_opened", details={"path": "library"})
        assert entry.data["path"] == "system"
        assert entry.data["details"] == {"path": "library"}


class TestGlobalLogger:
    def test_log_without_init_returns_false(self):
        assert get_file_logger() is None
        assert log(log_system_event("x")) is False

    def test_log_after_init(self, tmp_path):
        fl = init_logging(str(tmp_path))
        assert get_file_logger() is fl
        assert log(log_system_event("x")) is True
        assert fl.read("system", "execution")[0]["event"] == "x"

    def test_library_operations_are_logged(self, tmp_path, memory_storage, clock):
        from folio.library import Library

        fl = init_logging(str(tmp_path / "logs"))
        library = Library("library", config=FolioConfig(), storage=memory_storage, clock=clock)
        library.create_document("notes/monday")
        lease = library.borrow("notes/monday")
        lease.edit("hello", "alice")
        lease.release()

        saved = [e for e in fl.read("documents", "execution") if e["event"] == "saved"]
        assert saved[0]["author"] == "alice"
        assert saved[0]["change"] == 5
        lease_events = fl.read("leases", "execution")
        assert [e["event"] for e in lease_events] == ["borrowed", "returned"]
        assert lease_events[1]["saved"] is True
        created = [e["path"] for e in fl.read("folders", "execution") if e["event"] == "created"]
        assert created == ["library/notes"]
