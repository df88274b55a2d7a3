"""
TrekPrep Test Suite — Shared fixtures and configuration.

Run:  pytest tests/ -v
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Callable, Dict, List

import httpx
import pytest

from trekprep.records.task import Task
from trekprep.records.trek import Trek
from trekprep.rules.aggregation import SelectionContext


# ---------------------------------------------------------------------------
# Global singletons: never leak config or the file logger between tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_globals(monkeypatch):
    """Reset global singletons between tests."""
    import trekprep.engine.config as cfg_mod
    import trekprep.engine.logging as log_mod

    monkeypatch.delenv("TREKPREP_API_URL", raising=False)
    monkeypatch.delenv("TREKPREP_API_KEY", raising=False)
    cfg_mod.reset_config()
    log_mod.shutdown_logging()
    yield
    cfg_mod.reset_config()
    log_mod.shutdown_logging()


# ---------------------------------------------------------------------------
# Record builders
# ---------------------------------------------------------------------------

def make_task(**overrides: Any) -> Task:
    """A text task on Markha Valley unless overridden."""
    data: Dict[str, Any] = {
        "id": "t-1",
        "title": "Task",
        "input_type": "text",
        "section": "Permits",
        "section_number": 1,
        "task_number": 1,
        "category": "Permits",
        "trek_name": "Markha Valley Trek",
        "base_name": "Ladakh",
    }
    data.update(overrides)
    return Task(**data)


def make_trek(name: str = "Markha Valley Trek", base_name: str = "Ladakh", **overrides: Any) -> Trek:
    data: Dict[str, Any] = {
        "name": name,
        "start_date": date(2030, 6, 15),
        "end_date": date(2030, 6, 22),
        "number_of_clients": 12,
        "base_name": base_name,
    }
    data.update(overrides)
    return Trek(**data)


@pytest.fixture
def ctx() -> SelectionContext:
    return SelectionContext(trek_type="treks", team="support")


@pytest.fixture
def six_category_trek() -> List[Task]:
    """One not-started task per category for a single trek."""
    categories = ["Transport", "Permits", "Equipment", "Kitchen", "Team Assigned", "Field Accounts"]
    return [
        make_task(
            id=f"mv-{i}",
            category=cat,
            section=cat,
            section_number=i + 1,
            task_number=1,
        )
        for i, cat in enumerate(categories)
    ]


# ---------------------------------------------------------------------------
# Fake key-value API
# ---------------------------------------------------------------------------

class FakeKVServer:
    """
    In-memory stand-in for the external key-value API, mounted through
    httpx.MockTransport. Records every request for assertions.
    """

    def __init__(self) -> None:
        self.treks: Dict[str, Dict[str, Any]] = {}
        self.tasks: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.staff: Dict[str, Any] = {}
        self.requests: List[httpx.Request] = []
        self.fail_with: Dict[str, int] = {}
        self._next_id = 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str, prefix: str = "") -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and self._path(r).startswith(prefix)
        ]

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        return path[path.index("/treks"):] if "/treks" in path else path[path.rindex("/"):]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)
        status = self.fail_with.get(f"{request.method} {path}") or self.fail_with.get(request.method)
        if status:
            return httpx.Response(status, json={"error": "Simulated failure", "details": path})

        body = json.loads(request.content) if request.content else {}
        parts = [p for p in path.split("/") if p]

        if parts == ["staff"]:
            if request.method == "PUT":
                self.staff = body
            return httpx.Response(200, json={"staff": self.staff})

        if parts == ["treks"]:
            if request.method == "POST":
                trek_id = f"trek-{self._next_id}"
                self._next_id += 1
                self.treks[trek_id] = {**body, "id": trek_id}
                return httpx.Response(200, json={"trek": self.treks[trek_id]})
            return httpx.Response(200, json={"treks": list(self.treks.values())})

        trek_id = parts[1]
        if trek_id not in self.treks:
            return httpx.Response(404, json={"error": "Trek not found"})

        if len(parts) == 2:
            if request.method == "DELETE":
                del self.treks[trek_id]
                self.tasks.pop(trek_id, None)
                return httpx.Response(200, json={"message": "Trek deleted successfully"})
            if request.method == "PUT":
                self.treks[trek_id].update(body)
            return httpx.Response(200, json={"trek": self.treks[trek_id]})

        stored = self.tasks.setdefault(trek_id, {})
        if len(parts) == 3:
            return httpx.Response(200, json={"tasks": list(stored.values())})
        if parts[3] == "bulk":
            for task in body["tasks"]:
                stored[task["id"]] = {**task, "taskTemplateId": task["id"]}
            return httpx.Response(200, json={"message": "ok", "count": len(body["tasks"])})

        task_id = parts[3]
        stored[task_id] = {**stored.get(task_id, {}), **body, "taskTemplateId": task_id}
        return httpx.Response(200, json={"task": stored[task_id]})


@pytest.fixture
def kv_server() -> FakeKVServer:
    return FakeKVServer()


@pytest.fixture
def api_client_factory(kv_server) -> Callable:
    from trekprep.connected_systems.client import TrekPrepAPIClient
    from trekprep.engine.config import APIConfig

    def factory(**config: Any) -> TrekPrepAPIClient:
        cfg = APIConfig(base_url="http://kv.test/functions/v1/trekprep", api_key="anon-key", **config)
        return TrekPrepAPIClient(cfg, transport=kv_server.transport())

    return factory
