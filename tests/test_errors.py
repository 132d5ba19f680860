"""Unit tests for folio.engine.errors — Error hierarchy & serialization."""

import json

import pytest

from folio.engine.errors import (
    FolioConflictError,
    FolioError,
    FolioIOError,
    FolioNotFoundError,
    FolioStateError,
    FolioTypeError,
    FolioValidationError,
)


class TestFolioError:
    """Base error class tests."""

    def test_basic_creation(self):
        err = FolioError("something broke")
        assert err.message == "something broke"
        assert str(err) == "something broke"
        assert err.error_type == "FolioError"
        assert err.path is None
        assert err.operation is None

    def test_context_fields(self):
        err = FolioError("fail", path="library/notes", operation="rename")
        assert err.path == "library/notes"
        assert err.operation == "rename"

    def test_to_dict(self):
        err = FolioError("fail", path="library/doc", operation="save")
        d = err.to_dict()
        assert d["error_type"] == "FolioError"
        assert d["message"] == "fail"
        assert d["path"] == "library/doc"
        assert d["operation"] == "save"
        assert "timestamp" in d

    def test_to_json(self):
        parsed = json.loads(FolioError("fail").to_json())
        assert parsed["error_type"] == "FolioError"
        assert parsed["message"] == "fail"

    def test_repr(self):
        r = repr(FolioError("fail", path="library/doc", operation="save"))
        assert "FolioError" in r
        assert "library/doc" in r
        assert "save" in r

    def test_extra_context_serialized(self):
        d = FolioError("fail", custom_field="hello").to_dict()
        assert d["context"]["custom_field"] == "hello"


class TestSubclasses:
    """Each taxonomy class is a FolioError and keeps its builtin base."""

    @pytest.mark.parametrize("cls", [
        FolioValidationError,
        FolioTypeError,
        FolioNotFoundError,
        FolioConflictError,
        FolioStateError,
        FolioIOError,
    ])
    def test_is_folio_error(self, cls):
        err = cls("x")
        assert isinstance(err, FolioError)
        assert err.error_type == cls.__name__

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            raise FolioValidationError("bad title", value="a.b")

    def test_type_error_is_both(self):
        err = FolioTypeError("not a string", value=3)
        assert isinstance(err, TypeError)
        assert isinstance(err, ValueError)
        assert isinstance(err, FolioValidationError)

    def test_not_found_is_lookup_error(self):
        assert isinstance(FolioNotFoundError("gone"), LookupError)

    def test_validation_value_serialized(self):
        d = FolioValidationError("bad", value=42).to_dict()
        assert d["value"] == "42"
