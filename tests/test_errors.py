"""Unit tests for trekprep.engine.errors — Error hierarchy & serialization."""

import json

import pytest

from trekprep.engine.errors import (
    TrekPrepConfigError,
    TrekPrepError,
    TrekPrepLoadError,
    TrekPrepNavigationError,
    TrekPrepNotFoundError,
    TrekPrepPersistenceError,
    TrekPrepValidationError,
)


class TestTrekPrepError:
    """Base error class tests."""

    def test_basic_creation(self):
        err = TrekPrepError("something broke")
        assert err.message == "something broke"
        assert str(err) == "something broke"
        assert err.error_type == "TrekPrepError"
        assert err.trek_name is None
        assert err.task_id is None

    def test_context_fields(self):
        err = TrekPrepError("fail", trek_name="Markha Valley Trek", task_id="mv-permit-1", attempt=2)
        assert err.trek_name == "Markha Valley Trek"
        assert err.task_id == "mv-permit-1"
        assert err.context["attempt"] == 2

    def test_to_dict(self):
        err = TrekPrepError("fail", task_id="mv-permit-1", attempt=2)
        d = err.to_dict()
        assert d["error_type"] == "TrekPrepError"
        assert d["message"] == "fail"
        assert d["task_id"] == "mv-permit-1"
        assert d["context"] == {"attempt": "2"}
        assert "timestamp" in d

    def test_to_json(self):
        parsed = json.loads(TrekPrepError("fail").to_json())
        assert parsed["error_type"] == "TrekPrepError"
        assert parsed["message"] == "fail"

    def test_repr(self):
        err = TrekPrepError("fail", trek_name="Hampta Pass Trek", task_id="hp-team-1")
        assert repr(err) == "TrekPrepError: fail | trek_name=Hampta Pass Trek | task_id=hp-team-1"


class TestSubclasses:

    @pytest.mark.parametrize("cls", [
        TrekPrepValidationError,
        TrekPrepNotFoundError,
        TrekPrepPersistenceError,
        TrekPrepConfigError,
        TrekPrepNavigationError,
        TrekPrepLoadError,
    ])
    def test_inherits_base(self, cls):
        err = cls("x")
        assert isinstance(err, TrekPrepError)
        assert err.error_type == cls.__name__

    def test_validation_errors_serialized(self):
        err = TrekPrepValidationError("bad", validation_errors=[{"field": "title"}])
        assert err.to_dict()["validation_errors"] == [{"field": "title"}]

    def test_persistence_details(self):
        err = TrekPrepPersistenceError(
            "PUT failed",
            status_code=404,
            error="Trek not found",
            details="trek-9",
            method="PUT",
            url="http://kv/treks/trek-9",
        )
        assert err.is_not_found
        d = err.to_dict()
        assert d["status_code"] == 404
        assert d["error"] == "Trek not found"
        assert d["details"] == "trek-9"

    def test_persistence_transport_failure_has_no_status(self):
        assert TrekPrepPersistenceError("timeout").is_not_found is False

    def test_navigation_page(self):
        assert TrekPrepNavigationError("no", page="detail").page == "detail"
