"""
Folio Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from folio.engine.config import FolioConfig
from folio.engine.context import LibraryContext
from folio.storage.backends import MemoryStorage


class FakeClock:
    """Deterministic clock: every call advances one second."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


# ---------------------------------------------------------------------------
# Global state isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset config and structured logging singletons between tests."""
    import folio.engine.config as cfg_mod
    import folio.engine.logging as log_mod

    cfg_mod._config = None
    log_mod.shutdown_logging()
    yield
    cfg_mod._config = None
    log_mod.shutdown_logging()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def context(memory_storage, clock):
    """LibraryContext over in-memory storage with a fake clock."""
    return LibraryContext(storage=memory_storage, clock=clock)


@pytest.fixture
def library(memory_storage, clock):
    """A Library rooted at 'library' on in-memory storage."""
    from folio.library import Library

    return Library("library", config=FolioConfig(), storage=memory_storage, clock=clock)


@pytest.fixture
def local_library(tmp_path, clock):
    """A Library on the real filesystem under tmp_path."""
    from folio.library import Library

    return Library(str(tmp_path / "library"), config=FolioConfig(), clock=clock)
