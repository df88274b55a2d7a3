"""
TrekPrep — Pre-expedition operational checklists.

Users drill down Base → Trek → Category → Task, fill in per-task data and the
rules layer aggregates completion bottom-up for progress displays.

Layout:
    engine/             — config, errors, structured logging
    records/            — pydantic records + tagged input payloads
    rules/              — pure completion / aggregation rules
    store               — versioned task record store
    navigation          — Base → Trek → Category page state machine
    connected_systems/  — key-value HTTP API client, write queue, seeding
    session             — wires everything together for a UI or the CLI
"""

__version__ = "1.0.0"
__all__ = ["engine", "records", "rules", "store", "navigation", "connected_systems", "session"]
