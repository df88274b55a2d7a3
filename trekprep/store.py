"""
TrekPrep Task Record Store — the versioned, in-memory task collection.

The store owns every Task of the session and is mutated through one entry
point, ``update(task_id, fields)``. Each mutation that actually changes state
bumps ``revision``; aggregation memos compare revisions instead of object
identity. Applying the same update twice leaves both the task and the
revision where the first call left them.

Status side effect: an update carrying ``input_value`` without an explicit
``status`` re-derives status from the merged value. NA, budget and voucher
updates leave status alone; completion for those is read live.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from pydantic import ValidationError

from trekprep.engine.errors import TrekPrepNotFoundError, TrekPrepValidationError
from trekprep.records.task import UPDATABLE_FIELDS, Task, field_name_for
from trekprep.rules.completion import derive_status, na_offered

logger = logging.getLogger("trekprep.store")


class TaskStore:
    """Ordered task collection keyed by id, with a monotonically increasing revision."""

    def __init__(self, tasks: Iterable[Task] = ()):
        self._tasks: Dict[str, Task] = {}
        self._revision = 0
        tasks = list(tasks)
        if tasks:
            self.load(tasks)

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    @property
    def revision(self) -> int:
        return self._revision

    def all(self) -> List[Task]:
        return list(self._tasks.values())

    def find(self, task_id: str) -> Optional[Task]:
        return self._tasks.get(task_id)

    def get(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise TrekPrepNotFoundError(f"Task not found: {task_id}", task_id=task_id)
        return task

    def for_trek(self, trek_name: str) -> List[Task]:
        return [t for t in self._tasks.values() if t.trek_name == trek_name]

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def load(self, tasks: Iterable[Task]) -> int:
        """Replace the whole collection (seed / reload). Duplicate ids are rejected."""
        loaded: Dict[str, Task] = {}
        for task in tasks:
            if task.id in loaded:
                raise TrekPrepValidationError(
                    f"Duplicate task id: {task.id}",
                    task_id=task.id,
                    trek_name=task.trek_name,
                )
            loaded[task.id] = task
        self._tasks = loaded
        self._revision += 1
        logger.info(f"Loaded {len(loaded)} tasks (revision {self._revision})")
        return self._revision

    def update(self, task_id: str, fields: Dict[str, Any]) -> Task:
        """
        Merge a partial update onto a task and return the resulting task.

        ``fields`` may use snake_case names or camelCase wire names. Only the
        value fields in UPDATABLE_FIELDS are accepted.

        Raises:
            TrekPrepNotFoundError: no task with ``task_id``.
            TrekPrepValidationError: unknown/non-updatable field or invalid value.
        """
        task = self.get(task_id)
        changes = self.normalize_fields(fields, task_id=task_id)
        changes = self._drop_unoffered_na(task, changes)

        if "input_value" in changes and "status" not in changes:
            changes["status"] = derive_status(changes["input_value"])

        return self._apply(task, changes)

    def merge_remote(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Overlay persisted task state onto the loaded templates.

        Records are matched by ``taskTemplateId`` (falling back to ``id``).
        Only value fields are taken; classification stays as seeded and the
        remote status is kept as stored. Returns the number of tasks changed.
        """
        changed = 0
        for record in records:
            task_id = record.get("taskTemplateId") or record.get("id")
            task = self._tasks.get(task_id) if task_id else None
            if task is None:
                logger.debug(f"Ignoring persisted state for unknown task '{task_id}'")
                continue

            changes: Dict[str, Any] = {}
            for key, value in record.items():
                name = field_name_for(key)
                if name in UPDATABLE_FIELDS:
                    changes[name] = value
            changes = self._drop_unoffered_na(task, changes)
            if not changes:
                continue

            before = self._revision
            try:
                self._apply(task, changes)
            except TrekPrepValidationError as e:
                logger.warning(f"Skipping malformed persisted state for '{task_id}': {e.message}")
                continue
            if self._revision != before:
                changed += 1

        if changed:
            logger.info(f"Merged persisted state into {changed} tasks (revision {self._revision})")
        return changed

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    @staticmethod
    def normalize_fields(fields: Dict[str, Any], task_id: Optional[str] = None) -> Dict[str, Any]:
        """Map wire/snake names to field names; reject anything outside UPDATABLE_FIELDS."""
        normalized: Dict[str, Any] = {}
        rejected: List[str] = []
        for key, value in fields.items():
            name = field_name_for(key)
            if name is None or name not in UPDATABLE_FIELDS:
                rejected.append(key)
                continue
            normalized[name] = value

        if rejected:
            raise TrekPrepValidationError(
                f"Fields cannot be updated: {', '.join(sorted(rejected))}",
                task_id=task_id,
                validation_errors=[{"field": k, "error": "not updatable"} for k in rejected],
            )
        return normalized

    @staticmethod
    def _drop_unoffered_na(task: Task, changes: Dict[str, Any]) -> Dict[str, Any]:
        if changes.get("is_na") and not na_offered(task):
            logger.debug(f"NA is not offered for task '{task.id}'; ignoring")
            changes = {k: v for k, v in changes.items() if k != "is_na"}
        return changes

    def _apply(self, task: Task, changes: Dict[str, Any]) -> Task:
        try:
            updated = task.merged(changes)
        except ValidationError as e:
            raise TrekPrepValidationError(
                f"Invalid update for task {task.id}",
                task_id=task.id,
                trek_name=task.trek_name,
                validation_errors=e.errors(),
            ) from e

        if updated == task:
            return task

        self._tasks[task.id] = updated
        self._revision += 1
        return updated
