"""Staff database — singleton record of named lists used as dropdown sources."""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class StaffDatabase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    trip_leaders: List[str] = Field(default_factory=list)
    cooks: List[str] = Field(default_factory=list)
    assistant_guides: List[str] = Field(default_factory=list)
    support_staff: List[str] = Field(default_factory=list)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
