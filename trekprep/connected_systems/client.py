"""
TrekPrep API Client — async access to the external key-value HTTP API.

Endpoints (all JSON; failures come back as {"error", "details"} with non-2xx):
    GET    /treks                          → {"treks": [...]}
    GET    /treks/:id                      → {"trek": {...}}
    POST   /treks                          → {"trek": {...}}
    PUT    /treks/:id                      → {"trek": {...}}
    DELETE /treks/:id                      (cascades to the trek's tasks)
    GET    /treks/:trekId/tasks            → {"tasks": [...]}
    PUT    /treks/:trekId/tasks/:taskId    → {"task": {...}}   (partial merge)
    POST   /treks/:trekId/tasks/bulk       body {"tasks": [...]}
    GET    /staff / PUT /staff             → {"staff": {...}}

Every call is timed and written to persistence/execution (or /errors).
A non-2xx status, a transport failure or a malformed 2xx payload raises
TrekPrepPersistenceError;
deciding whether that is fatal is left to the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from trekprep.engine.config import APIConfig
from trekprep.engine.errors import TrekPrepPersistenceError
from trekprep.engine.logging import log, log_persistence_call
from trekprep.records.staff import StaffDatabase
from trekprep.records.trek import Trek

logger = logging.getLogger("trekprep.connected_systems.client")

ModelT = TypeVar("ModelT", bound=BaseModel)


class TrekPrepAPIClient:
    """
    Thin async wrapper over one pooled httpx.AsyncClient.

    ``transport`` is passed straight to httpx; tests hand in an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: Optional[APIConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config or APIConfig()
        headers = {"Content-Type": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=httpx.Timeout(self._config.timeout_seconds, connect=10.0),
            limits=httpx.Limits(max_connections=self._config.max_connections),
            transport=transport,
        )
        logger.debug(f"API client for {self._config.base_url}")

    @property
    def base_url(self) -> str:
        return self._config.base_url

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "TrekPrepAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # -----------------------------------------------------------------------
    # Treks
    # -----------------------------------------------------------------------

    async def get_treks(self) -> List[Trek]:
        data = await self._request("GET", "/treks")
        return self._parse_list(Trek, data, "treks", "GET", "/treks")

    async def get_trek(self, trek_id: str) -> Trek:
        path = f"/treks/{trek_id}"
        data = await self._request("GET", path)
        return self._parse(Trek, data, "trek", "GET", path)

    async def create_trek(self, trek: Trek) -> Trek:
        data = await self._request("POST", "/treks", json=trek.to_create_payload())
        return self._parse(Trek, data, "trek", "POST", "/treks")

    async def update_trek(self, trek_id: str, updates: Dict[str, Any]) -> Trek:
        path = f"/treks/{trek_id}"
        data = await self._request("PUT", path, json=updates)
        return self._parse(Trek, data, "trek", "PUT", path)

    async def delete_trek(self, trek_id: str) -> None:
        await self._request("DELETE", f"/treks/{trek_id}")

    # -----------------------------------------------------------------------
    # Tasks
    # -----------------------------------------------------------------------

    async def get_tasks(self, trek_id: str) -> List[Dict[str, Any]]:
        """Persisted task records of a trek, as raw camelCase dicts."""
        path = f"/treks/{trek_id}/tasks"
        data = await self._request("GET", path)
        records = data.get("tasks") or []
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise self._malformed("GET", path, "tasks", TypeError("expected a list of task records"))
        return records

    async def update_task(self, trek_id: str, task_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request(
            "PUT", f"/treks/{trek_id}/tasks/{task_id}", json=updates, task_id=task_id,
        )
        return data.get("task") or {}

    async def bulk_update_tasks(self, trek_id: str, tasks: List[Dict[str, Any]]) -> int:
        data = await self._request("POST", f"/treks/{trek_id}/tasks/bulk", json={"tasks": tasks})
        return int(data.get("count", len(tasks)))

    # -----------------------------------------------------------------------
    # Staff
    # -----------------------------------------------------------------------

    async def get_staff(self) -> StaffDatabase:
        data = await self._request("GET", "/staff")
        return self._parse(StaffDatabase, data, "staff", "GET", "/staff", default={})

    async def update_staff(self, staff: StaffDatabase) -> StaffDatabase:
        data = await self._request("PUT", "/staff", json=staff.to_wire())
        return self._parse(StaffDatabase, data, "staff", "PUT", "/staff", default={})

    # -----------------------------------------------------------------------
    # Response parsing
    # -----------------------------------------------------------------------

    def _parse(
        self,
        model: Type[ModelT],
        data: Dict[str, Any],
        key: str,
        method: str,
        path: str,
        default: Optional[Dict[str, Any]] = None,
    ) -> ModelT:
        """Validate ``data[key]``; a missing or malformed record is a persistence failure."""
        try:
            record = data[key] if default is None else (data.get(key) or default)
            return model.model_validate(record)
        except (KeyError, ValidationError) as e:
            raise self._malformed(method, path, key, e) from e

    def _parse_list(
        self,
        model: Type[ModelT],
        data: Dict[str, Any],
        key: str,
        method: str,
        path: str,
    ) -> List[ModelT]:
        records = data.get(key) or []
        if not isinstance(records, list):
            raise self._malformed(method, path, key, TypeError(f"expected a list, got {type(records).__name__}"))
        try:
            return [model.model_validate(r) for r in records]
        except ValidationError as e:
            raise self._malformed(method, path, key, e) from e

    def _malformed(self, method: str, path: str, key: str, cause: Exception) -> TrekPrepPersistenceError:
        url = f"{self._config.base_url}{path}"
        logger.warning(f"{method} {path} returned a malformed '{key}' payload: {cause}")
        return TrekPrepPersistenceError(
            f"{method} {path} returned a malformed '{key}' payload",
            error="Malformed response",
            details=str(cause),
            method=method,
            url=url,
        )

    # -----------------------------------------------------------------------
    # Transport
    # -----------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        task_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        url = f"{self._config.base_url}{path}"
        start = time.monotonic()
        try:
            response = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            duration_ms = (time.monotonic() - start) * 1000
            log(log_persistence_call(method, url, 0, duration_ms, False, task_id=task_id, error=str(e)))
            logger.warning(f"{method} {path} failed: {e}")
            raise TrekPrepPersistenceError(
                f"{method} {path} failed: {e}",
                method=method,
                url=url,
                task_id=task_id,
            ) from e

        duration_ms = (time.monotonic() - start) * 1000
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.is_success:
            log(log_persistence_call(method, url, response.status_code, duration_ms, True, task_id=task_id))
            return body

        error = body.get("error") or f"HTTP {response.status_code}"
        details = body.get("details")
        log(log_persistence_call(
            method, url, response.status_code, duration_ms, False, task_id=task_id, error=error,
        ))
        logger.warning(f"{method} {path} -> {response.status_code}: {error}")
        raise TrekPrepPersistenceError(
            f"{method} {path} returned {response.status_code}: {error}",
            status_code=response.status_code,
            error=error,
            details=details,
            method=method,
            url=url,
            task_id=task_id,
        )
