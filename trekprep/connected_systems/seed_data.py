"""
Fixed seed data — bases, the trek catalogue, the staff database and the
per-trek checklist templates.

Task ids are ``<trek prefix>-<row key>`` (e.g. ``mv-permit-1``); they are the
stable keys persisted task state is stored and merged under.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from trekprep.records.enums import SECTION_NUMBERS, Category, InputType, Priority
from trekprep.records.staff import StaffDatabase
from trekprep.records.task import Task
from trekprep.records.trek import Base, Trek

BASES: List[Base] = [
    Base(name=name) for name in ("Uttarakhand", "Ladakh", "Himachal", "Sikkim", "Kashmir")
]
BASE_NAMES: List[str] = [b.name for b in BASES]

INITIAL_STAFF = StaffDatabase(
    trip_leaders=["Rajesh Kumar", "Amit Singh", "Priya Sharma", "Deepak Verma", "Neha Patel"],
    cooks=["Ramesh Bisht", "Suresh Negi", "Kailash Thapa", "Mohan Rawat", "Dinesh Kumar"],
    assistant_guides=[
        "Vijay Singh", "Sonam Dorje", "Tashi Namgyal", "Karma Wangdi", "Lobsang Dorji", "Rinchen Dorji",
    ],
    support_staff=[
        "Raju Lal", "Shankar Prasad", "Bhim Bahadur", "Jeet Singh", "Narender Kumar", "Prakash Rai",
    ],
)

HIGH, MEDIUM = Priority.HIGH.value, Priority.MEDIUM.value
FILE = InputType.FILE.value
TEXT = InputType.TEXT.value
VEHICLES = InputType.VEHICLE_MULTI.value
STAFF_LIST = InputType.MULTI_SELECT.value
STAFF_CONTACT = InputType.STAFF_WITH_CONTACT.value
BUDGET = InputType.BUDGET_WITH_VOUCHER.value


def _row(key: str, title: str, description: str, priority: str, days: int, input_type: str, **extra: Any) -> Dict[str, Any]:
    return {
        "key": key,
        "title": title,
        "description": description,
        "priority": priority,
        "days_before_trek": days,
        "input_type": input_type,
        **extra,
    }


def _upload(noun: str) -> str:
    return f"Upload {noun} or mark as NA if not applicable"


# ---------------------------------------------------------------------------
# Template rows, per category
# ---------------------------------------------------------------------------

_EQUIPMENT = [
    _row("equipment-1", "Final Equipment List", _upload("final equipment list"), HIGH, 5, FILE),
    _row("equipment-2", "Rental Equipment List", _upload("rental equipment list"), HIGH, 5, FILE),
]

_KITCHEN = [
    _row("kitchen-1", "Kitchen Equipment Checklist", "Verify and upload kitchen equipment checklist", HIGH, 3, FILE),
    _row("kitchen-2", "Menu", "Create and upload menu plan", HIGH, 10, FILE),
    _row("kitchen-3", "Dry Ration Shopping List", "Purchase and document dry rations", HIGH, 3, FILE),
    _row("kitchen-4", "Vegetable List", "Purchase and document fresh vegetables", HIGH, 1, FILE),
    _row("kitchen-5", "Perishable Checklist", "Purchase and document perishables (eggs, chicken, etc)", HIGH, 1, FILE),
]

_ACCOUNTS = [
    _row("accounts-1", "Guide Budget", "Enter guide budget amount and upload cash voucher", HIGH, 2, BUDGET),
    _row("accounts-2", "Cook Budget", "Enter cook budget amount and upload cash voucher", HIGH, 2, BUDGET),
    _row("accounts-3", "Any cash payments", "Enter any additional cash payments and upload cash voucher", MEDIUM, 2, BUDGET),
    _row("accounts-4", "Total Budget", "Automatically calculated total of all budgets", HIGH, 2, TEXT, is_calculated=True),
]

# Full template (Markha Valley, Hidden Meadows). ``options`` names a StaffDatabase list.
FULL_TEMPLATE: Dict[str, List[Dict[str, Any]]] = {
    Category.PERMITS.value: [
        _row("permit-1", "IMF Permit", _upload("IMF permit"), HIGH, 10, FILE),
        _row("permit-2", "Trekking Permit", _upload("trekking permit"), HIGH, 7, FILE),
        _row("permit-3", "Trekking Chit", _upload("trekking chit"), HIGH, 7, FILE),
        _row("permit-4", "Any other permit", _upload("any other permit"), MEDIUM, 7, FILE),
        _row("permit-5", "Staff Insurance", _upload("staff insurance"), HIGH, 7, FILE),
    ],
    Category.TRANSPORT.value: [
        _row("transport-1", "Support Vehicle", "Enter number of support vehicles and their details",
             HIGH, 10, VEHICLES, allow_multiple=True),
        _row("transport-2", "Client Transport", "Enter vehicle registration, driver name, and contact",
             HIGH, 5, VEHICLES, allow_multiple=True),
    ],
    Category.EQUIPMENT.value: _EQUIPMENT,
    Category.KITCHEN.value: _KITCHEN,
    Category.TEAM_ASSIGNED.value: [
        _row("team-1", "Trip Leader", "Select trip leader and enter contact number",
             HIGH, 15, STAFF_CONTACT, options="trip_leaders"),
        _row("team-2", "Cook", "Select cook and enter contact number",
             HIGH, 15, STAFF_CONTACT, options="cooks"),
        _row("team-3", "Assistant Guides",
             "Enter number of assistant guides, select from database and enter contact numbers",
             HIGH, 10, STAFF_LIST, allow_multiple=True, options="assistant_guides"),
        _row("team-4", "Support Staff",
             "Enter number of support staff, select from database and enter contact numbers",
             MEDIUM, 10, STAFF_LIST, allow_multiple=True, options="support_staff"),
        _row("team-5", "Personal Porter", "Enter number of personal porters, their names and contact numbers",
             MEDIUM, 10, STAFF_LIST, allow_multiple=True, options=None),
    ],
    Category.FIELD_ACCOUNTS.value: _ACCOUNTS,
}

_GUIDE = _row("team-1", "Guide", "Assign guide and document details", HIGH, 15, TEXT)

HAMPTA_TEMPLATE: Dict[str, List[Dict[str, Any]]] = {
    Category.PERMITS.value: [
        _row("permit-1", "Obtain trekking permit", "Upload pdf of permit", HIGH, 7, FILE),
        _row("permit-2", "Forest clearance", "Upload forest clearance", HIGH, 7, FILE),
        _row("permit-3", "Staff Insurance", _upload("staff insurance"), HIGH, 7, FILE),
    ],
    Category.TRANSPORT.value: [
        _row("transport-1", "Support vehicle booking", "Book support vehicles", HIGH, 10, TEXT),
        _row("transport-2", "Client vehicle booking", "Book client transport", HIGH, 10, TEXT),
    ],
    Category.EQUIPMENT.value: _EQUIPMENT,
    Category.KITCHEN.value: _KITCHEN,
    Category.TEAM_ASSIGNED.value: [_GUIDE],
    Category.FIELD_ACCOUNTS.value: _ACCOUNTS,
}

NUBRA_TEMPLATE: Dict[str, List[Dict[str, Any]]] = {
    Category.PERMITS.value: [
        _row("permit-1", "Obtain trekking permit", "Upload pdf of permit", HIGH, 7, FILE),
        _row("permit-2", "Staff Insurance", _upload("staff insurance"), HIGH, 7, FILE),
    ],
    Category.TRANSPORT.value: [
        _row("transport-1", "Support vehicle booking", "Book support vehicles", HIGH, 10, TEXT),
    ],
    Category.EQUIPMENT.value: _EQUIPMENT,
    Category.KITCHEN.value: _KITCHEN,
    Category.TEAM_ASSIGNED.value: [_GUIDE],
    Category.FIELD_ACCOUNTS.value: _ACCOUNTS,
}


# ---------------------------------------------------------------------------
# Trek catalogue: (task id prefix, trek, template)
# ---------------------------------------------------------------------------

CATALOGUE: List[Tuple[str, Trek, Dict[str, List[Dict[str, Any]]]]] = [
    ("mv", Trek(name="Markha Valley Trek", start_date=date(2025, 6, 15), end_date=date(2025, 6, 22),
                number_of_clients=12, base_name="Ladakh"), FULL_TEMPLATE),
    ("hp", Trek(name="Hampta Pass Trek", start_date=date(2025, 6, 22), end_date=date(2025, 6, 29),
                number_of_clients=18, base_name="Himachal"), HAMPTA_TEMPLATE),
    ("nv", Trek(name="Nubra Valley Trek", start_date=date(2025, 6, 29), end_date=date(2025, 7, 6),
                number_of_clients=8, base_name="Ladakh"), NUBRA_TEMPLATE),
    ("hm", Trek(name="Hidden Meadows Garhwal", start_date=date(2026, 3, 15), end_date=date(2026, 3, 19),
                number_of_clients=24, base_name="Uttarakhand"), FULL_TEMPLATE),
]


def initial_treks() -> List[Trek]:
    return [trek.model_copy() for _, trek, _ in CATALOGUE]


def build_trek_tasks(
    prefix: str,
    trek: Trek,
    template: Dict[str, List[Dict[str, Any]]],
    staff: StaffDatabase,
) -> List[Task]:
    tasks = []
    for category, rows in template.items():
        for number, row in enumerate(rows, start=1):
            fields = {k: v for k, v in row.items() if k not in ("key", "options")}
            if "options" in row:
                source = row["options"]
                fields["dropdown_options"] = list(getattr(staff, source)) if source else []
            tasks.append(Task(
                id=f"{prefix}-{row['key']}",
                section=category,
                section_number=SECTION_NUMBERS[category],
                task_number=number,
                category=category,
                trek_name=trek.name,
                base_name=trek.base_name,
                **fields,
            ))
    return tasks


def build_seed_tasks(staff: Optional[StaffDatabase] = None) -> List[Task]:
    """Every catalogue trek's checklist, with staff-backed dropdowns drawn from ``staff``."""
    staff = staff or INITIAL_STAFF
    tasks: List[Task] = []
    for prefix, trek, template in CATALOGUE:
        tasks.extend(build_trek_tasks(prefix, trek, template, staff))
    return tasks
