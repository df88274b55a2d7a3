"""TrekPrep rules — pure functions over task records."""

from .aggregation import (
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
    percentage,
    progress_band,
    trek_progress,
)
from .calculated import format_rupees, resolve_calculated_total
from .completion import derive_status, is_complete, na_offered
from .read_only import is_read_only
from .subforms import (
    StaffContactForm,
    StaffListForm,
    VehicleForm,
    form_for,
    is_invalid_contact,
    is_valid_contact,
)

__all__ = [
    "AggregationCache",
    "BaseProgress",
    "CategoryProgress",
    "Section",
    "SelectionContext",
    "TrekProgress",
    "base_progress",
    "category_progress",
    "category_tasks",
    "group_by_section",
    "percentage",
    "progress_band",
    "trek_progress",
    "format_rupees",
    "resolve_calculated_total",
    "derive_status",
    "is_complete",
    "na_offered",
    "is_read_only",
    "StaffContactForm",
    "StaffListForm",
    "VehicleForm",
    "form_for",
    "is_invalid_contact",
    "is_valid_contact",
]
