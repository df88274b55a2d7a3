"""
Structured sub-form validation for the multi-field input types.

A sub-form collects rows in memory and only yields a committable ``inputValue``
once every required field of every row is filled and every contact is a valid
10-digit number. Partial entries never produce a value, so the parent task
stays incomplete. Row errors are reported, never raised, and one bad row does
not stop edits to the others.

    vehicle-multi       → VehicleForm       (count N, N × make/registration/driver/contact)
    multi-select        → StaffListForm     (count N, N × name/contact)
    staff-with-contact  → StaffContactForm  (single name/contact, no count)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from trekprep.records.enums import InputType
from trekprep.records.payloads import (
    StaffContactValue,
    StaffEntry,
    StaffListValue,
    VehicleEntry,
    VehicleListValue,
)
from trekprep.records.task import Task

MAX_ENTRIES = 10
ADD_NEW = "add-new"
CONTACT_ERROR = "Contact must be a 10-digit number"

_CONTACT_RE = re.compile(r"^\d{10}$")


def is_valid_contact(phone: str) -> bool:
    return bool(_CONTACT_RE.match(phone.strip()))


def is_invalid_contact(phone: str) -> bool:
    """True for a non-blank contact that fails the 10-digit check (shown inline)."""
    return phone.strip() != "" and not is_valid_contact(phone)


def parse_count(value: Union[int, str, None]) -> int:
    """Parse a count input; garbage reads as 0 and the result is clamped to 0..MAX_ENTRIES."""
    if isinstance(value, str):
        match = re.match(r"^\s*(-?\d+)", value)
        value = int(match.group(1)) if match else 0
    if value is None:
        value = 0
    return max(0, min(MAX_ENTRIES, int(value)))


# ---------------------------------------------------------------------------
# Rows
# ---------------------------------------------------------------------------

@dataclass
class VehicleRow:
    make: str = ""
    registration: str = ""
    driver_name: str = ""
    contact: str = ""

    REQUIRED = ("make", "registration", "driver_name", "contact")

    def missing_fields(self) -> List[str]:
        return [name for name in self.REQUIRED if not getattr(self, name).strip()]

    def is_valid(self) -> bool:
        return not self.missing_fields() and is_valid_contact(self.contact)

    def to_entry(self) -> VehicleEntry:
        return VehicleEntry(
            make=self.make,
            registration=self.registration,
            driver_name=self.driver_name,
            contact=self.contact.strip(),
        )


@dataclass
class StaffRow:
    name: str = ""
    contact: str = ""

    REQUIRED = ("name", "contact")

    def missing_fields(self) -> List[str]:
        return [name for name in self.REQUIRED if not getattr(self, name).strip()]

    def is_valid(self) -> bool:
        return not self.missing_fields() and is_valid_contact(self.contact)

    def to_entry(self) -> StaffEntry:
        return StaffEntry(name=self.name, contact=self.contact.strip())


def _row_errors(rows: list) -> Dict[int, Dict[str, str]]:
    errors: Dict[int, Dict[str, str]] = {}
    for index, row in enumerate(rows):
        if is_invalid_contact(row.contact):
            errors[index] = {"contact": CONTACT_ERROR}
    return errors


def _choose_name(row: StaffRow, choice: str) -> None:
    # "add-new" clears the name so it can be typed freely
    if choice == ADD_NEW:
        row.name = ""
    else:
        row.name = choice


def _is_custom(name: str, options: List[str]) -> bool:
    """A typed name that is not one of the dropdown options."""
    name = name.strip()
    return name != "" and name not in options


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------

@dataclass
class VehicleForm:
    rows: List[VehicleRow] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.rows)

    def set_count(self, value: Union[int, str, None]) -> None:
        """Changing the count discards entered rows, as the repeated-entry UI does."""
        self.rows = [VehicleRow() for _ in range(parse_count(value))]

    def set_field(self, index: int, name: str, value: str) -> None:
        if name not in VehicleRow.REQUIRED:
            raise ValueError(f"Unknown vehicle field: {name}")
        setattr(self.rows[index], name, value)

    def row_errors(self) -> Dict[int, Dict[str, str]]:
        return _row_errors(self.rows)

    def is_committable(self) -> bool:
        return self.count > 0 and all(row.is_valid() for row in self.rows)

    def payload(self) -> Optional[VehicleListValue]:
        if not self.is_committable():
            return None
        return VehicleListValue(vehicles=[row.to_entry() for row in self.rows])

    def commit_value(self) -> Optional[str]:
        payload = self.payload()
        return payload.encode() if payload else None


@dataclass
class StaffListForm:
    """Assistant guides / support staff / personal porters."""

    options: List[str] = field(default_factory=list)
    rows: List[StaffRow] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.rows)

    def set_count(self, value: Union[int, str, None]) -> None:
        self.rows = [StaffRow() for _ in range(parse_count(value))]

    def choose(self, index: int, choice: str) -> None:
        """Pick a name from ``options`` or ADD_NEW to type one."""
        _choose_name(self.rows[index], choice)

    def set_name(self, index: int, name: str) -> None:
        self.rows[index].name = name

    def set_contact(self, index: int, contact: str) -> None:
        self.rows[index].contact = contact

    def is_custom_name(self, index: int) -> bool:
        return _is_custom(self.rows[index].name, self.options)

    def row_errors(self) -> Dict[int, Dict[str, str]]:
        return _row_errors(self.rows)

    def is_committable(self) -> bool:
        return self.count > 0 and all(row.is_valid() for row in self.rows)

    def payload(self) -> Optional[StaffListValue]:
        if not self.is_committable():
            return None
        return StaffListValue(members=[row.to_entry() for row in self.rows])

    def commit_value(self) -> Optional[str]:
        payload = self.payload()
        return payload.encode() if payload else None


@dataclass
class StaffContactForm:
    """Trip leader / cook — a single name + contact, committed as soon as both are valid."""

    options: List[str] = field(default_factory=list)
    row: StaffRow = field(default_factory=StaffRow)

    def choose(self, choice: str) -> None:
        _choose_name(self.row, choice)

    def set_name(self, name: str) -> None:
        self.row.name = name

    def set_contact(self, contact: str) -> None:
        self.row.contact = contact

    @property
    def is_custom_name(self) -> bool:
        return _is_custom(self.row.name, self.options)

    def row_errors(self) -> Dict[int, Dict[str, str]]:
        return _row_errors([self.row])

    def is_committable(self) -> bool:
        return self.row.is_valid()

    def payload(self) -> Optional[StaffContactValue]:
        if not self.is_committable():
            return None
        return StaffContactValue(member=self.row.to_entry())

    def commit_value(self) -> Optional[str]:
        payload = self.payload()
        return payload.encode() if payload else None


SubForm = Union[VehicleForm, StaffListForm, StaffContactForm]


def form_for(task: Task) -> Optional[SubForm]:
    """
    Build the sub-form for a structured task, pre-filled from its committed
    payload when there is one. Returns None for plain input types.
    """
    options = list(task.dropdown_options or [])
    payload = task.payload

    if task.input_type == InputType.VEHICLE_MULTI.value:
        form = VehicleForm()
        if isinstance(payload, VehicleListValue):
            form.rows = [
                VehicleRow(v.make, v.registration, v.driver_name, v.contact)
                for v in payload.vehicles
            ]
        return form

    if task.input_type == InputType.MULTI_SELECT.value:
        form = StaffListForm(options=options)
        if isinstance(payload, StaffListValue):
            form.rows = [StaffRow(m.name, m.contact) for m in payload.members]
        return form

    if task.input_type == InputType.STAFF_WITH_CONTACT.value:
        form = StaffContactForm(options=options)
        if isinstance(payload, StaffContactValue):
            form.row = StaffRow(payload.member.name, payload.member.contact)
        return form

    return None
