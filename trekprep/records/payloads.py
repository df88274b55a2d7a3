"""
Tagged input payloads — the typed form of a task's ``inputValue``.

On the wire ``inputValue`` is a plain string. For the structured input types
it carries JSON:

    vehicle-multi       → [{"make", "registration", "driverName", "contact"}, ...]
    multi-select        → [{"name", "contact"}, ...]
    staff-with-contact  → {"name", "contact"}

Parsing happens once, when a Task record is built. A payload that does not
match its input type's shape degrades to ``None`` instead of raising.
"""

from __future__ import annotations

import json
import logging
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from trekprep.records.enums import InputType

logger = logging.getLogger("trekprep.records.payloads")


class VehicleEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    make: str
    registration: str
    driver_name: str
    contact: str


class StaffEntry(BaseModel):
    name: str
    contact: str


class TextValue(BaseModel):
    kind: Literal["text"] = "text"
    text: str

    def encode(self) -> str:
        return self.text


class VehicleListValue(BaseModel):
    kind: Literal["vehicles"] = "vehicles"
    vehicles: List[VehicleEntry] = Field(min_length=1)

    def encode(self) -> str:
        return json.dumps([v.model_dump(by_alias=True) for v in self.vehicles])


class StaffListValue(BaseModel):
    kind: Literal["staff-list"] = "staff-list"
    members: List[StaffEntry] = Field(min_length=1)

    def encode(self) -> str:
        return json.dumps([m.model_dump() for m in self.members])


class StaffContactValue(BaseModel):
    kind: Literal["staff-contact"] = "staff-contact"
    member: StaffEntry

    def encode(self) -> str:
        return json.dumps(self.member.model_dump())


InputPayload = Union[TextValue, VehicleListValue, StaffListValue, StaffContactValue]


def parse_input_value(input_type: Optional[str], raw: Optional[str]) -> Optional[InputPayload]:
    """
    Parse a raw ``inputValue`` string into the payload variant for ``input_type``.

    Returns None for an empty value, for a budget task (its value lives in
    ``budgetAmount``/``voucherFile``), or for structured JSON that does not fit.
    """
    if raw is None or not raw.strip():
        return None
    if input_type == InputType.BUDGET_WITH_VOUCHER.value:
        return None

    try:
        if input_type == InputType.VEHICLE_MULTI.value:
            return VehicleListValue(vehicles=json.loads(raw))
        if input_type == InputType.MULTI_SELECT.value:
            return StaffListValue(members=json.loads(raw))
        if input_type == InputType.STAFF_WITH_CONTACT.value:
            return StaffContactValue(member=json.loads(raw))
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        logger.debug(f"Unparseable {input_type} payload degraded to None: {e}")
        return None

    return TextValue(text=raw)
