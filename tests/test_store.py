"""Unit tests for trekprep.store — the versioned task store."""

import pytest

from conftest import make_task
from trekprep.engine.errors import TrekPrepNotFoundError, TrekPrepValidationError
from trekprep.store import TaskStore


@pytest.fixture
def store():
    return TaskStore([
        make_task(id="permit", category="Permits", input_type="file"),
        make_task(id="kitchen", category="Kitchen", section="Kitchen", input_type="file"),
        make_task(id="budget", category="Field Accounts", section="Field Accounts",
                  input_type="budget-with-voucher"),
    ])


class TestLoad:

    def test_load_bumps_revision(self):
        store = TaskStore()
        assert store.revision == 0
        store.load([make_task()])
        assert store.revision == 1
        assert len(store) == 1

    def test_duplicate_ids_rejected(self):
        with pytest.raises(TrekPrepValidationError):
            TaskStore([make_task(id="x"), make_task(id="x")])

    def test_get_missing(self, store):
        with pytest.raises(TrekPrepNotFoundError) as exc:
            store.get("nope")
        assert exc.value.task_id == "nope"
        assert store.find("nope") is None


class TestUpdate:

    def test_input_value_derives_status(self, store):
        task = store.update("permit", {"inputValue": "permit.pdf"})
        assert task.status == "completed"
        task = store.update("permit", {"input_value": "  "})
        assert task.status == "not-started"

    def test_explicit_status_wins(self, store):
        task = store.update("permit", {"inputValue": "x", "status": "in-progress"})
        assert task.status == "in-progress"

    def test_na_budget_voucher_leave_status(self, store):
        before = store.get("budget").status
        task = store.update("budget", {"budgetAmount": 500, "voucherFile": "r.pdf"})
        assert task.status == before
        task = store.update("permit", {"isNA": True})
        assert task.status == before

    def test_idempotent(self, store):
        first = store.update("permit", {"inputValue": "abc"})
        revision = store.revision
        second = store.update("permit", {"inputValue": "abc"})
        assert second == first
        assert store.revision == revision

    def test_revision_bumps_on_change(self, store):
        revision = store.revision
        store.update("permit", {"inputValue": "abc"})
        assert store.revision == revision + 1

    def test_unknown_task(self, store):
        with pytest.raises(TrekPrepNotFoundError):
            store.update("ghost", {"inputValue": "x"})

    @pytest.mark.parametrize("field", ["title", "trekName", "category", "colour"])
    def test_non_updatable_fields_rejected(self, store, field):
        with pytest.raises(TrekPrepValidationError) as exc:
            store.update("permit", {field: "x"})
        assert exc.value.validation_errors[0]["field"] == field

    def test_invalid_value_rejected(self, store):
        with pytest.raises(TrekPrepValidationError):
            store.update("budget", {"budgetAmount": "lots"})

    def test_na_ignored_where_not_offered(self, store):
        revision = store.revision
        task = store.update("kitchen", {"isNA": True})
        assert task.is_na is False
        assert store.revision == revision

    def test_payload_reparsed(self, store):
        task = store.update("permit", {"inputValue": "permit.pdf"})
        assert task.payload.text == "permit.pdf"


class TestMergeRemote:

    def test_value_fields_overlay_templates(self, store):
        changed = store.merge_remote([
            {"taskTemplateId": "permit", "inputValue": "imf.pdf", "status": "completed",
             "title": "Renamed", "trekId": "trek-1", "updatedAt": "2025-01-01T00:00:00Z"},
        ])
        task = store.get("permit")
        assert changed == 1
        assert task.input_value == "imf.pdf"
        assert task.status == "completed"
        assert task.title == "Task"

    def test_unknown_ids_ignored(self, store):
        assert store.merge_remote([{"taskTemplateId": "elsewhere", "inputValue": "x"}]) == 0

    def test_malformed_record_skipped(self, store):
        changed = store.merge_remote([
            {"id": "budget", "budgetAmount": "lots"},
            {"id": "permit", "inputValue": "ok"},
        ])
        assert changed == 1
        assert store.get("budget").budget_amount is None

    def test_unchanged_state_keeps_revision(self, store):
        revision = store.revision
        store.merge_remote([{"id": "permit", "status": "not-started"}])
        assert store.revision == revision
