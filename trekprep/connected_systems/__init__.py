"""Connected systems — the external key-value API, write queue and seeding."""

from .client import TrekPrepAPIClient
from .seeding import SeedResult, check_if_seeded, seed_database
from .writer import CoalescingWriter

__all__ = [
    "TrekPrepAPIClient",
    "SeedResult",
    "check_if_seeded",
    "seed_database",
    "CoalescingWriter",
]
