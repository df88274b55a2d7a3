"""
TrekPrep Checklist Session — store, rules, navigation and persistence wired together.

Lifecycle:
    session = ChecklistSession(config, client)
    await session.load()          # seed if needed, fetch staff/treks, hydrate tasks
    session.update_task(...)      # local optimistic update + debounced persistence
    session.trek_progress()       # memoized views for the current selection
    await session.close()         # flush pending writes

Without a client the session runs offline on the seed templates and nothing
is persisted.

Failure handling:
    load()          → TrekPrepLoadError (the one hard failure)
    update_task()   → unknown task / locked trek / calculated field: logged, returns None
    persistence     → logged by the write queue, local state kept
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from trekprep.connected_systems.client import TrekPrepAPIClient
from trekprep.connected_systems.seed_data import (
    BASES,
    INITIAL_STAFF,
    build_seed_tasks,
    initial_treks,
)
from trekprep.connected_systems.seeding import check_if_seeded, seed_database
from trekprep.connected_systems.writer import CoalescingWriter
from trekprep.engine.config import TrekPrepConfig, get_config
from trekprep.engine.errors import (
    TrekPrepError,
    TrekPrepLoadError,
    TrekPrepNotFoundError,
)
from trekprep.engine.logging import log, log_system_event, log_task_update
from trekprep.navigation import Navigator
from trekprep.records.enums import InputType
from trekprep.records.staff import StaffDatabase
from trekprep.records.task import UPDATABLE_FIELDS, Task
from trekprep.records.trek import Base, Trek
from trekprep.rules.aggregation import (
    AggregationCache,
    BaseProgress,
    CategoryProgress,
    Section,
    SelectionContext,
    TrekProgress,
    base_progress,
    category_progress,
    category_tasks,
    group_by_section,
    trek_progress,
)
from trekprep.rules.calculated import resolve_calculated_total
from trekprep.rules.completion import na_offered
from trekprep.rules.read_only import is_read_only
from trekprep.rules.subforms import SubForm
from trekprep.store import TaskStore

logger = logging.getLogger("trekprep.session")

_UNSET: Any = object()


class ChecklistSession:
    """One user's view of the checklists: a task store plus the current selection."""

    def __init__(
        self,
        config: Optional[TrekPrepConfig] = None,
        client: Optional[TrekPrepAPIClient] = None,
        today: Optional[date] = None,
    ):
        self.config = config or get_config()
        self._client = client
        self._today = today

        self.store = TaskStore()
        self.cache = AggregationCache()
        self.treks: List[Trek] = []
        self.staff: StaffDatabase = INITIAL_STAFF
        self.bases: List[Base] = list(BASES)
        self.base_names: List[str] = [b.name for b in self.bases]
        self.context = SelectionContext(
            trek_type=self.config.selection.trek_type,
            team=self.config.selection.team,
        )
        self.navigator = Navigator(self.base_names, self.trek_names)
        self._writer: Optional[CoalescingWriter] = None
        if client is not None:
            self._writer = CoalescingWriter(self._persist, debounce_ms=self.config.persistence.debounce_ms)
        self.loaded = False

    @property
    def offline(self) -> bool:
        return self._client is None

    @property
    def writer(self) -> Optional[CoalescingWriter]:
        return self._writer

    # -----------------------------------------------------------------------
    # Loading
    # -----------------------------------------------------------------------

    async def load(self) -> None:
        """
        Seed the store when it is empty, then fetch staff and treks and merge
        persisted task state onto the templates.

        Raises:
            TrekPrepLoadError: any step failed; the caller shows the error page.
        """
        try:
            if self._client is None:
                staff, treks, persisted = INITIAL_STAFF, initial_treks(), {}
            else:
                staff, treks, persisted = await self._fetch_remote()

            tasks = build_seed_tasks(staff)

            self.staff = staff
            self.treks = treks
            self.store.load(tasks)
            for records in persisted.values():
                self.store.merge_remote(records)
        except TrekPrepLoadError as e:
            log(log_system_event("load_failed", level="ERROR", details=e.to_dict()))
            raise
        except TrekPrepError as e:
            log(log_system_event("load_failed", level="ERROR", details=e.to_dict()))
            raise TrekPrepLoadError(f"Could not load checklists: {e.message}") from e

        self.loaded = True
        self.navigator.revalidate()
        logger.info(f"Loaded {len(self.treks)} treks, {len(self.store)} tasks{' (offline)' if self.offline else ''}")
        log(log_system_event("session_loaded", details={
            "treks": len(self.treks),
            "tasks": len(self.store),
            "offline": self.offline,
        }))

    async def _fetch_remote(self):
        client = self._client
        if not await check_if_seeded(client):
            logger.info("Store is empty, seeding")
            await seed_database(client)

        staff = await client.get_staff()
        treks = await client.get_treks()
        persisted: Dict[str, List[Dict[str, Any]]] = {}
        for trek in treks:
            if trek.id:
                persisted[trek.name] = await client.get_tasks(trek.id)
        return staff, treks, persisted

    async def reload(self) -> None:
        """The error page's reload action; pending writes go out first."""
        if self._writer is not None:
            await self._writer.flush()
        await self.load()

    async def flush(self) -> None:
        if self._writer is not None:
            await self._writer.flush()

    async def close(self) -> None:
        if self._writer is not None:
            await self._writer.close()

    # -----------------------------------------------------------------------
    # Lookups
    # -----------------------------------------------------------------------

    def base_named(self, name: str) -> Optional[Base]:
        for base in self.bases:
            if base.name == name:
                return base
        return None

    def trek_named(self, name: str) -> Optional[Trek]:
        for trek in self.treks:
            if trek.name == name:
                return trek
        return None

    def trek_names(self, base_name: Optional[str] = None) -> List[str]:
        """Trek listing of the selection page for a base filter (None = all)."""
        return [p.name for p in self.trek_progress(base_name)]

    def is_read_only(self, trek_name: str) -> bool:
        return is_read_only(self.trek_named(trek_name), self._today)

    def set_selection(self, trek_type: Optional[str] = None, team: Optional[str] = None) -> None:
        """Change the trek-type / team filter; a trek it hides is deselected."""
        self.context = SelectionContext(
            trek_type=trek_type or self.context.trek_type,
            team=team or self.context.team,
        )
        self.navigator.revalidate()

    # -----------------------------------------------------------------------
    # Views (memoized per store revision + selection)
    # -----------------------------------------------------------------------

    def base_progress(self) -> List[BaseProgress]:
        return self.cache.get_or_compute(
            self.store.revision,
            ("bases", self.context),
            lambda: base_progress(self.store.all(), self.base_names, self.context),
        )

    def trek_progress(self, base_name: Optional[str] = _UNSET) -> List[TrekProgress]:
        """Defaults to the navigator's base filter."""
        if base_name is _UNSET:
            base_name = self.navigator.base_name
        ctx = self.context.with_base(base_name)
        return self.cache.get_or_compute(
            self.store.revision,
            ("treks", ctx, tuple(t.name for t in self.treks)),
            lambda: trek_progress(self.store.all(), self.treks, ctx),
        )

    def category_progress(self, trek_name: str) -> List[CategoryProgress]:
        return self.cache.get_or_compute(
            self.store.revision,
            ("categories", self.context, trek_name),
            lambda: category_progress(self.store.all(), trek_name, self.context),
        )

    def category_sections(self, trek_name: str, category: str) -> List[Section]:
        return self.cache.get_or_compute(
            self.store.revision,
            ("sections", self.context, trek_name, category),
            lambda: group_by_section(category_tasks(self.store.all(), trek_name, category, self.context)),
        )

    def calculated_total(self, task_id: str) -> float:
        task = self.store.get(task_id)
        return resolve_calculated_total(task, self.store.for_trek(task.trek_name))

    # -----------------------------------------------------------------------
    # Mutation
    # -----------------------------------------------------------------------

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        """
        Apply a partial update locally and queue it for persistence.

        Returns the updated task, or None when the update was refused: unknown
        task, locked trek, or a calculated field. Unknown field names raise
        TrekPrepValidationError.
        """
        task = self.store.find(task_id)
        if task is None:
            logger.warning(f"Update for unknown task '{task_id}' ignored")
            return None
        if self.is_read_only(task.trek_name):
            logger.warning(f"Trek '{task.trek_name}' has started; '{task_id}' is read-only")
            return None
        if task.is_calculated:
            logger.warning(f"'{task_id}' is a calculated field and takes no input")
            return None

        changes = self._with_side_effects(task, TaskStore.normalize_fields(fields, task_id=task_id))
        updated = self.store.update(task_id, changes)
        if updated is task:
            return task

        wire = self._changed_fields(task, updated)
        log(log_task_update(
            task_id=task_id,
            trek_name=task.trek_name,
            fields_changed=sorted(wire),
            revision=self.store.revision,
            status=updated.status,
        ))
        if self._writer is not None:
            self._writer.submit(task_id, wire)
        return updated

    def commit_subform(self, task_id: str, form: SubForm) -> Optional[Task]:
        """Promote a fully valid sub-form to ``inputValue``; a partial form commits nothing."""
        value = form.commit_value()
        if value is None:
            logger.debug(f"Sub-form for '{task_id}' is incomplete; nothing committed")
            return None
        return self.update_task(task_id, {"input_value": value})

    @staticmethod
    def _with_side_effects(task: Task, changes: Dict[str, Any]) -> Dict[str, Any]:
        changes = dict(changes)
        if changes.get("is_na") is True and na_offered(task):
            # checking NA clears the entered value
            changes.setdefault("input_value", None)
        elif task.is_na and "is_na" not in changes and _supplies_value(task, changes):
            changes["is_na"] = False
        return changes

    @staticmethod
    def _changed_fields(before: Task, after: Task) -> Dict[str, Any]:
        wire: Dict[str, Any] = {}
        for name in UPDATABLE_FIELDS:
            value = getattr(after, name)
            if getattr(before, name) != value:
                alias = Task.model_fields[name].alias or name
                wire[alias] = value
        return wire

    async def _persist(self, task_id: str, fields: Dict[str, Any]) -> None:
        task = self.store.get(task_id)
        trek = self.trek_named(task.trek_name)
        if trek is None or not trek.id:
            raise TrekPrepNotFoundError(
                f"No stored trek for '{task.trek_name}'",
                trek_name=task.trek_name,
                task_id=task_id,
            )
        await self._client.update_task(trek.id, task_id, fields)


def _supplies_value(task: Task, changes: Dict[str, Any]) -> bool:
    """File uploads, budget amounts and vouchers take a task back out of NA."""
    if changes.get("voucher_file") or changes.get("budget_amount") is not None:
        return True
    return task.input_type == InputType.FILE.value and bool(changes.get("input_value"))
