"""Read-only gate — a trek's checklist locks on its start date."""

from __future__ import annotations

from datetime import date
from typing import Optional

from trekprep.records.trek import Trek


def is_read_only(trek: Optional[Trek], today: Optional[date] = None) -> bool:
    """
    True from the trek's start date onwards, comparing dates only.
    Tasks whose trek is unknown are never locked.
    """
    if trek is None:
        return False
    return trek.is_read_only(today)
