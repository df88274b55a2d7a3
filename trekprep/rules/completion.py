"""
Completion rules — is a task done?

Priority order:
    1. NA checked                  → complete
    2. budget-with-voucher         → amount (>= 0) AND voucher file
    3. everything else             → non-blank inputValue

Unknown input types degrade to incomplete rather than raising.
"""

from __future__ import annotations

import math
from typing import Optional

from trekprep.records.enums import Category, InputType, TaskStatus
from trekprep.records.task import Task

_NA_CATEGORIES = frozenset({Category.PERMITS.value, Category.EQUIPMENT.value})


def na_offered(task: Task) -> bool:
    """
    Whether the "Not Applicable" escape is offered for this task.
    Never for calculated fields; otherwise Permits, Equipment, and budget tasks.
    """
    if task.is_calculated:
        return False
    return (
        task.category in _NA_CATEGORIES
        or task.input_type == InputType.BUDGET_WITH_VOUCHER.value
    )


def has_budget_amount(amount: Optional[float]) -> bool:
    return amount is not None and math.isfinite(amount) and amount >= 0


def is_complete(task: Task) -> bool:
    if task.is_na:
        return True

    if task.input_type == InputType.BUDGET_WITH_VOUCHER.value:
        return has_budget_amount(task.budget_amount) and bool(
            task.voucher_file and task.voucher_file.strip()
        )

    if not task.has_known_input_type:
        return False

    return bool(task.input_value and task.input_value.strip())


def derive_status(input_value: Optional[str]) -> str:
    """Status implied by an explicit ``inputValue`` update."""
    if input_value and input_value.strip():
        return TaskStatus.COMPLETED.value
    return TaskStatus.NOT_STARTED.value
