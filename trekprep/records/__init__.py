"""TrekPrep records — pydantic models for tasks, treks, bases and staff."""

from .enums import (
    ACTIVE_STATUSES,
    CATEGORY_NAMES,
    Category,
    InputType,
    Priority,
    TaskStatus,
    Team,
    TrekType,
)
from .payloads import (
    InputPayload,
    StaffContactValue,
    StaffEntry,
    StaffListValue,
    TextValue,
    VehicleEntry,
    VehicleListValue,
    parse_input_value,
)
from .staff import StaffDatabase
from .task import Task
from .trek import Base, Trek

__all__ = [
    "ACTIVE_STATUSES",
    "CATEGORY_NAMES",
    "Category",
    "InputType",
    "Priority",
    "TaskStatus",
    "Team",
    "TrekType",
    "InputPayload",
    "StaffContactValue",
    "StaffEntry",
    "StaffListValue",
    "TextValue",
    "VehicleEntry",
    "VehicleListValue",
    "parse_input_value",
    "StaffDatabase",
    "Task",
    "Base",
    "Trek",
]
