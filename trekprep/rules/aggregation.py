"""
Aggregation rules — progress views computed from the flat task list.

Three independent views, each built by filtering then counting:

    category_progress  — per category of one trek          (completion rate)
    trek_progress      — per trek, optionally one base      (completion rate)
    base_progress      — per base, distinct treks / active  (activity rate)

The base view deliberately measures something else: the share of a base's
treks with any started or finished task, not how many tasks are done.

All functions are pure. AggregationCache memoizes them per
(store revision, selection context); a new revision drops every entry.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Set

from trekprep.records.enums import ACTIVE_STATUSES, CATEGORY_NAMES
from trekprep.records.task import Task
from trekprep.records.trek import Trek
from trekprep.rules.completion import is_complete

logger = logging.getLogger("trekprep.rules.aggregation")


# ---------------------------------------------------------------------------
# Selection context + result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectionContext:
    """Which slice of the task list the views look at. ``base_name=None`` means all bases."""
    trek_type: str
    team: str
    base_name: Optional[str] = None

    def matches(self, task: Task) -> bool:
        return task.trek_type == self.trek_type and task.team == self.team

    def with_base(self, base_name: Optional[str]) -> "SelectionContext":
        return replace(self, base_name=base_name)


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when there is nothing to count."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))


def progress_band(pct: int) -> str:
    """Colour band used by the progress rings and bars."""
    if pct <= 25:
        return "red"
    if pct <= 50:
        return "amber"
    if pct <= 75:
        return "blue"
    return "green"


@dataclass(frozen=True)
class CategoryProgress:
    name: str
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return percentage(self.completed, self.total)


@dataclass(frozen=True)
class TrekProgress:
    name: str
    start_date: date
    end_date: date
    number_of_clients: int
    base_name: str
    completed: int
    total: int

    @property
    def percentage(self) -> int:
        return percentage(self.completed, self.total)


@dataclass(frozen=True)
class BaseProgress:
    name: str
    active_trips: int
    total_trips: int

    @property
    def region(self) -> str:
        return self.name

    @property
    def percentage(self) -> int:
        """Activity rate — active treks over all treks — not task completion."""
        return percentage(self.active_trips, self.total_trips)


@dataclass(frozen=True)
class Section:
    number: int
    name: str
    tasks: List[Task] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Views
# ---------------------------------------------------------------------------

def _count(tasks: Iterable[Task]) -> tuple:
    completed = total = 0
    for t in tasks:
        total += 1
        if is_complete(t):
            completed += 1
    return completed, total


def category_progress(
    tasks: Sequence[Task],
    trek_name: str,
    ctx: SelectionContext,
) -> List[CategoryProgress]:
    """One entry per fixed category, in display order, for a single trek."""
    results = []
    for cat in CATEGORY_NAMES:
        completed, total = _count(
            t for t in tasks
            if t.trek_name == trek_name and t.category == cat and ctx.matches(t)
        )
        results.append(CategoryProgress(name=cat, completed=completed, total=total))
    return results


def _trek_tasks(tasks: Sequence[Task], trek_name: str, ctx: SelectionContext) -> List[Task]:
    return [
        t for t in tasks
        if t.trek_name == trek_name
        and ctx.matches(t)
        and (ctx.base_name is None or t.base_name == ctx.base_name)
    ]


def trek_progress(
    tasks: Sequence[Task],
    treks: Sequence[Trek],
    ctx: SelectionContext,
) -> List[TrekProgress]:
    """
    Progress per catalogue trek, in catalogue order.

    With no base selected every trek is listed, including those without tasks
    (total 0). With a base selected, a trek is listed when it has a matching
    task in that base or the catalogue places it there.
    """
    results = []
    for trek in treks:
        trek_tasks = _trek_tasks(tasks, trek.name, ctx)
        if ctx.base_name is not None and not trek_tasks and trek.base_name != ctx.base_name:
            continue
        completed, total = _count(trek_tasks)
        results.append(TrekProgress(
            name=trek.name,
            start_date=trek.start_date,
            end_date=trek.end_date,
            number_of_clients=trek.number_of_clients,
            base_name=trek.base_name,
            completed=completed,
            total=total,
        ))
    return results


def base_progress(
    tasks: Sequence[Task],
    base_names: Sequence[str],
    ctx: SelectionContext,
) -> List[BaseProgress]:
    """Distinct treks per base and how many of them show any activity. Ignores ``ctx.base_name``."""
    results = []
    for base in base_names:
        trek_names: Set[str] = set()
        active: Set[str] = set()
        for t in tasks:
            if t.base_name != base or not ctx.matches(t):
                continue
            trek_names.add(t.trek_name)
            if t.status in ACTIVE_STATUSES:
                active.add(t.trek_name)
        results.append(BaseProgress(name=base, active_trips=len(active), total_trips=len(trek_names)))
    return results


def category_tasks(
    tasks: Sequence[Task],
    trek_name: str,
    category: str,
    ctx: SelectionContext,
) -> List[Task]:
    """Tasks of one trek/category ordered by (section_number, task_number)."""
    selected = [
        t for t in tasks
        if t.trek_name == trek_name and t.category == category and ctx.matches(t)
    ]
    return sorted(selected, key=lambda t: t.sort_key)


def group_by_section(tasks: Sequence[Task]) -> List[Section]:
    """Group tasks by section_number ascending; the first task seen names the section."""
    grouped: Dict[int, Section] = {}
    for t in sorted(tasks, key=lambda t: t.sort_key):
        if t.section_number not in grouped:
            grouped[t.section_number] = Section(number=t.section_number, name=t.section)
        grouped[t.section_number].tasks.append(t)
    return [grouped[n] for n in sorted(grouped)]


# ---------------------------------------------------------------------------
# Memoization
# ---------------------------------------------------------------------------

class AggregationCache:
    """
    Memo table for the views, valid for exactly one store revision.

    Keys combine the view name, its arguments and the SelectionContext, so two
    contexts never share an entry.
    """

    def __init__(self) -> None:
        self._revision: Optional[int] = None
        self._entries: Dict[Hashable, Any] = {}
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, revision: int, key: Hashable, compute: Callable[[], Any]) -> Any:
        if revision != self._revision:
            if self._entries:
                logger.debug(f"Revision {self._revision} -> {revision}: dropping {len(self._entries)} cached views")
            self._entries.clear()
            self._revision = revision
        if key in self._entries:
            self.hits += 1
        else:
            self.misses += 1
            self._entries[key] = compute()
        return self._entries[key]

    def clear(self) -> None:
        self._entries.clear()
        self._revision = None

    def __len__(self) -> int:
        return len(self._entries)
