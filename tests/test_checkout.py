"""Unit tests for folio.library.checkout — CheckoutManager and Lease state machines."""

import pytest

from folio.documents.document import Document
from folio.engine.errors import FolioIOError, FolioStateError, FolioValidationError
from folio.library.checkout import CheckoutManager, Lease


@pytest.fixture
def doc(context):
    d = Document("library/doc", context)
    d.materialize()
    return d


@pytest.fixture
def manager():
    return CheckoutManager()


class TestCheckoutManager:
    def test_lend_once(self, manager, doc):
        lease = manager.lend("doc", doc)
        assert isinstance(lease, Lease)
        assert manager.is_borrowed("doc")
        assert manager.lend("doc", doc) is None
        assert len(manager) == 1

    def test_release_frees_path(self, manager, doc):
        manager.lend("doc", doc).release()
        assert not manager.is_borrowed("doc")
        second = manager.lend("doc", doc)
        assert second is not None
        second.release()

    def test_callback_receives_title(self, manager, doc):
        seen = []
        lease = manager.lend("doc", doc, seen.append)
        lease.set_title("New Title")
        lease.release()
        assert seen == ["New Title"]

    def test_borrowed_under(self, manager, context):
        for path in ("a/x", "a/b/y", "ab/z"):
            manager.lend(path, Document(f"library/{path}", context))
        assert manager.borrowed_under("a") == frozenset({"a/x", "a/b/y"})
        assert manager.borrowed_under("a/x") == frozenset({"a/x"})
        assert manager.borrowed_under("") == manager.borrowed
        assert manager.borrowed_under("c") == frozenset()


class TestLease:
    def test_edit_read_release(self, manager, doc):
        lease = manager.lend("doc", doc)
        assert lease.read() is None
        lease.edit("draft", "alice")
        assert lease.read() == "draft"
        assert lease.release() is True
        assert doc.read() == "draft"
        assert len(doc.get_log()) == 1

    def test_release_without_edit(self, manager, doc):
        assert manager.lend("doc", doc).release() is False
        assert doc.get_log() == []

    def test_returned_is_terminal(self, manager, doc):
        lease = manager.lend("doc", doc)
        lease.release()
        assert lease.returned is True
        for call in (
            lambda: lease.read(),
            lambda: lease.edit("x", "a"),
            lambda: lease.set_title("x"),
            lambda: lease.release(),
            lambda: lease.title,
        ):
            with pytest.raises(FolioStateError):
                call()

    def test_invalid_title(self, manager, doc):
        lease = manager.lend("doc", doc)
        with pytest.raises(FolioValidationError):
            lease.set_title("bad.title")
        assert lease.title == "doc"

    def test_context_manager(self, manager, doc):
        with manager.lend("doc", doc) as lease:
            lease.edit("inside", "bob")
        assert lease.returned
        assert not manager.is_borrowed("doc")
        assert doc.read() == "inside"

    def test_context_manager_after_manual_release(self, manager, doc):
        with manager.lend("doc", doc) as lease:
            lease.release()
        assert lease.returned

    def test_failed_save_still_returns(self, manager, doc, monkeypatch):
        lease = manager.lend("doc", doc)

        def _boom():
            raise FolioIOError("disk full", path=doc.path)

        monkeypatch.setattr(doc, "save", _boom)
        with pytest.raises(FolioIOError):
            lease.release()
        assert lease.returned
        assert not manager.is_borrowed("doc")

    def test_repr(self, manager, doc):
        lease = manager.lend("doc", doc)
        assert "active" in repr(lease)
        lease.release()
        assert "returned" in repr(lease)


class TestAbandon:
    def test_exception_in_block_discards_draft(self, manager, doc):
        with pytest.raises(RuntimeError):
            with manager.lend("doc", doc) as lease:
                lease.edit("partial", "bob")
                raise RuntimeError("boom")
        assert lease.returned
        assert not manager.is_borrowed("doc")
        assert doc.read() is None
        assert doc.get_log() == []

    def test_original_error_not_replaced(self, manager, doc):
        def _refuse(title):
            raise FolioIOError("would have renamed", path=doc.path)

        lease = manager.lend("doc", doc, _refuse)
        with pytest.raises(KeyError):
            with lease:
                lease.set_title("Changed")
                raise KeyError("first")
        assert lease.returned

    def test_abandon_reverts_title(self, manager, doc):
        seen = []
        lease = manager.lend("doc", doc, seen.append)
        lease.set_title("Changed")
        lease.abandon()
        assert doc.title == "doc"
        assert seen == ["doc"]
        with pytest.raises(FolioStateError):
            lease.abandon()
