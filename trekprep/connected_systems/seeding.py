"""
One-time seeding of the key-value store.

Idempotent by trek name: only catalogue treks whose name is not already
stored are created, so a partially seeded store is completed instead of
duplicated. The staff database is written only into a store that held no
treks at all, so staff edits made after the first seed survive a re-run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from trekprep.connected_systems.client import TrekPrepAPIClient
from trekprep.connected_systems.seed_data import INITIAL_STAFF, initial_treks
from trekprep.engine.errors import TrekPrepLoadError, TrekPrepPersistenceError
from trekprep.engine.logging import log, log_seed_event
from trekprep.records.staff import StaffDatabase
from trekprep.records.trek import Trek

logger = logging.getLogger("trekprep.connected_systems.seeding")


@dataclass
class SeedResult:
    created: List[Trek] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    staff_written: bool = False

    @property
    def seeded(self) -> bool:
        return bool(self.created)


async def check_if_seeded(client: TrekPrepAPIClient) -> bool:
    """True once any trek exists in the store."""
    treks = await client.get_treks()
    return len(treks) > 0


async def seed_database(
    client: TrekPrepAPIClient,
    treks: Optional[Sequence[Trek]] = None,
    staff: Optional[StaffDatabase] = None,
) -> SeedResult:
    """
    Create the missing catalogue treks (and, on a fresh store, the staff record).

    Raises:
        TrekPrepLoadError: any API call failed. Treks created before the
            failure stay; the next run picks up the rest.
    """
    treks = list(treks) if treks is not None else initial_treks()
    staff = staff or INITIAL_STAFF
    result = SeedResult()

    log(log_seed_event("seed_started"))
    try:
        existing = {t.name for t in await client.get_treks()}
        missing = [t for t in treks if t.name not in existing]
        result.skipped = [t.name for t in treks if t.name in existing]

        if not existing:
            await client.update_staff(staff)
            result.staff_written = True
            logger.info("Seeded staff database")

        for trek in missing:
            created = await client.create_trek(trek)
            result.created.append(created)
            logger.info(f"Created trek: {created.name}")
    except TrekPrepPersistenceError as e:
        log(log_seed_event(
            "seed_failed",
            created_treks=[t.name for t in result.created],
            error=e.message,
        ))
        raise TrekPrepLoadError(f"Seeding failed: {e.message}", status_code=e.status_code) from e

    log(log_seed_event(
        "seed_completed",
        created_treks=[t.name for t in result.created],
        skipped_treks=result.skipped,
    ))
    if result.created:
        logger.info(f"Database seeded: {len(result.created)} trek(s) created")
    else:
        logger.info("Database already seeded, nothing to create")
    return result
