"""Closed enumerations shared by records, rules and config."""

from __future__ import annotations

from enum import Enum
from typing import List


class TrekType(str, Enum):
    TREKS = "treks"
    EXPEDITIONS = "expeditions"
    CLIMBS = "climbs"


class Team(str, Enum):
    GROUND_OPS = "ground-ops"
    SUPPORT = "support"
    TRIP_LEADER = "trip-leader"
    HEAD_OFFICE = "head-office"


class TaskStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class InputType(str, Enum):
    """Determines which value fields are meaningful and how completion is evaluated."""
    TEXT = "text"
    TEXTAREA = "textarea"
    FILE = "file"
    LINK = "link"
    DROPDOWN = "dropdown"
    MULTI_SELECT = "multi-select"
    VEHICLE_MULTI = "vehicle-multi"
    BUDGET_WITH_VOUCHER = "budget-with-voucher"
    STAFF_WITH_CONTACT = "staff-with-contact"

    @classmethod
    def values(cls) -> List[str]:
        return [m.value for m in cls]


class Category(str, Enum):
    TRANSPORT = "Transport"
    PERMITS = "Permits"
    EQUIPMENT = "Equipment"
    KITCHEN = "Kitchen"
    TEAM_ASSIGNED = "Team Assigned"
    FIELD_ACCOUNTS = "Field Accounts"


# Display order of the category tiles on a trek's detail page
CATEGORY_NAMES: List[str] = [c.value for c in Category]

# Section ordering key per category in the seeded checklists
SECTION_NUMBERS = {
    Category.PERMITS.value: 1,
    Category.TRANSPORT.value: 2,
    Category.EQUIPMENT.value: 3,
    Category.KITCHEN.value: 4,
    Category.TEAM_ASSIGNED.value: 5,
    Category.FIELD_ACCOUNTS.value: 6,
}

# Statuses that mark a trek as "active" on the base page
ACTIVE_STATUSES = frozenset({TaskStatus.IN_PROGRESS.value, TaskStatus.COMPLETED.value})
