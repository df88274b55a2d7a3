"""Task record — the atomic checklist item of a trek."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator
from pydantic.alias_generators import to_camel

from trekprep.records.enums import (
    CATEGORY_NAMES,
    InputType,
    Priority,
    TaskStatus,
    Team,
    TrekType,
)
from trekprep.records.payloads import InputPayload, parse_input_value

# Fields a partial update may touch. Classification and identity are fixed at seed time.
UPDATABLE_FIELDS = frozenset({
    "status",
    "input_value",
    "is_na",
    "budget_amount",
    "voucher_file",
    "dropdown_options",
})


class Task(BaseModel):
    """
    Individual checklist item belonging to a trek.

    ``trek_name`` / ``base_name`` are denormalized references with no
    integrity check; a task whose trek is unknown never shows up in any
    aggregation. Which value fields matter depends on ``input_type``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(min_length=1, description="Stable task id, e.g. 'mv-permit-1'")
    title: str = Field(max_length=200)
    description: str = ""
    status: str = Field(
        default=TaskStatus.NOT_STARTED.value,
        json_schema_extra={"choices": [s.value for s in TaskStatus]},
    )
    priority: str = Field(
        default=Priority.MEDIUM.value,
        json_schema_extra={"choices": [p.value for p in Priority]},
    )
    days_before_trek: int = Field(default=0, description="Informational only")
    trek_type: str = Field(
        default=TrekType.TREKS.value,
        json_schema_extra={"choices": [t.value for t in TrekType]},
    )
    team: str = Field(
        default=Team.SUPPORT.value,
        json_schema_extra={"choices": [t.value for t in Team]},
    )
    input_type: Optional[str] = Field(
        default=None,
        json_schema_extra={"choices": InputType.values()},
    )
    input_value: Optional[str] = None
    section: str = ""
    section_number: int = 0
    task_number: int = 0
    category: str = Field(default="", json_schema_extra={"choices": CATEGORY_NAMES})
    trek_name: str = ""
    base_name: str = ""

    is_na: bool = Field(default=False, alias="isNA")
    allow_multiple: bool = False
    dropdown_options: Optional[List[str]] = None
    budget_amount: Optional[float] = None
    voucher_file: Optional[str] = None
    is_calculated: bool = False

    _payload: Optional[InputPayload] = PrivateAttr(default=None)

    @field_validator("status")
    @classmethod
    def coerce_unknown_status(cls, v: str) -> str:
        if v not in {s.value for s in TaskStatus}:
            return TaskStatus.NOT_STARTED.value
        return v

    @field_validator("is_na", "allow_multiple", "is_calculated", mode="before")
    @classmethod
    def none_is_false(cls, v: Any) -> Any:
        return False if v is None else v

    def model_post_init(self, __context: Any) -> None:
        self._payload = parse_input_value(self.input_type, self.input_value)

    @property
    def payload(self) -> Optional[InputPayload]:
        """The parsed ``input_value`` (see records.payloads)."""
        return self._payload

    @property
    def has_known_input_type(self) -> bool:
        return self.input_type is None or self.input_type in InputType.values()

    @property
    def sort_key(self) -> tuple:
        return (self.section_number, self.task_number)

    def to_wire(self) -> Dict[str, Any]:
        """camelCase dict for the key-value API."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def merged(self, fields: Dict[str, Any]) -> "Task":
        """Return a validated copy with ``fields`` (snake_case names) applied."""
        data = self.model_dump()
        data.update(fields)
        return Task.model_validate(data)


def field_name_for(key: str) -> Optional[str]:
    """Map a snake_case name or camelCase alias onto the Task field name."""
    if key in Task.model_fields:
        return key
    for name, info in Task.model_fields.items():
        if info.alias == key:
            return name
    return None
