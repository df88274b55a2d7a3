"""Calculated fields — read-only totals derived from sibling budget tasks."""

from __future__ import annotations

import logging
from typing import Iterable

from trekprep.records.enums import InputType
from trekprep.records.task import Task

logger = logging.getLogger("trekprep.rules.calculated")


def resolve_calculated_total(task: Task, tasks_in_scope: Iterable[Task]) -> float:
    """
    Sum ``budget_amount`` over the budget-with-voucher siblings of a calculated task.

    Siblings share the task's trek, category and section; NA'd entries are
    excluded and a missing amount counts as zero. The result is display-only
    and never written back into ``input_value``.
    """
    if not task.is_calculated:
        logger.debug(f"Task '{task.id}' is not a calculated field")
        return 0.0

    total = 0.0
    for t in tasks_in_scope:
        if (
            t.trek_name == task.trek_name
            and t.category == task.category
            and t.section == task.section
            and t.input_type == InputType.BUDGET_WITH_VOUCHER.value
            and not t.is_na
        ):
            total += t.budget_amount or 0.0
    return total


def group_indian(digits: str) -> str:
    """Indian digit grouping: last three digits, then pairs (12,34,567)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_rupees(amount: float) -> str:
    """Render a total the way the calculated field displays it, e.g. '₹ 1,25,000' or '-₹ 500'."""
    sign = "-" if round(amount, 2) < 0 else ""
    rounded = round(abs(amount), 2)
    whole = int(rounded)
    cents = int(round((rounded - whole) * 100))
    text = group_indian(str(whole))
    if cents:
        text += f".{cents:02d}".rstrip("0")
    return f"{sign}₹ {text}"
