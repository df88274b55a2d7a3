"""Trek and Base records."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Trek(BaseModel):
    """
    A scheduled expedition instance. Created at seed time, never edited by users.
    ``id`` is assigned by the key-value API; seed templates have none.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: str = Field(min_length=1)
    start_date: date
    end_date: date
    number_of_clients: int = Field(ge=0)
    base_name: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def is_read_only(self, today: Optional[date] = None) -> bool:
        """A trek locks for editing from its start date onwards (date only, no time of day)."""
        today = today or date.today()
        return today >= self.start_date

    def to_create_payload(self) -> Dict[str, Any]:
        """Body for ``POST /treks``."""
        return {
            "name": self.name,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "numberOfClients": self.number_of_clients,
            "baseName": self.base_name,
        }


class Base(BaseModel):
    """A region grouping treks. Owns treks only through their ``base_name``."""

    name: str
