"""
TrekPrep CLI — seeding and progress reports against the key-value API.

Commands:
- trekprep seed             — Create the missing catalogue treks (and staff on a fresh store)
- trekprep status           — Base activity, trek progress, and category progress for one trek
- trekprep validate-config  — Load and validate trekprep.yaml

Exit codes: 0 on success, 1 on a configuration or load failure.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional

from trekprep.engine.config import TrekPrepConfig, load_config
from trekprep.engine.errors import TrekPrepConfigError, TrekPrepLoadError
from trekprep.engine.logging import configure_logging, init_logging, shutdown_logging

logger = logging.getLogger("trekprep.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="trekprep",
        description="TrekPrep — pre-expedition checklist tracking",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # trekprep seed
    seed_parser = subparsers.add_parser("seed", help="Seed the store with the trek catalogue")
    seed_parser.add_argument("--config", help="Path to trekprep.yaml (default: search upwards)")

    # trekprep status
    status_parser = subparsers.add_parser("status", help="Print checklist progress")
    status_parser.add_argument("--config", help="Path to trekprep.yaml (default: search upwards)")
    status_parser.add_argument("--base", help="Only list treks of this base")
    status_parser.add_argument("--trek", help="Also print category progress for this trek")
    status_parser.add_argument(
        "--offline", action="store_true", help="Use the seed templates without contacting the API"
    )

    # trekprep validate-config
    validate_parser = subparsers.add_parser("validate-config", help="Validate trekprep.yaml")
    validate_parser.add_argument("--config", help="Path to trekprep.yaml (default: search upwards)")

    args = parser.parse_args(argv)

    if args.command == "seed":
        return cmd_seed(args)
    elif args.command == "status":
        return cmd_status(args)
    elif args.command == "validate-config":
        return cmd_validate_config(args)
    else:
        parser.print_help()
        return 0


def _load(args: argparse.Namespace) -> Optional[TrekPrepConfig]:
    try:
        config = load_config(args.config)
    except TrekPrepConfigError as e:
        print(f"[ERROR] {e.message}")
        return None
    configure_logging(config.logging.level)
    init_logging(config.logging.directory)
    return config


def cmd_validate_config(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except TrekPrepConfigError as e:
        print(f"[ERROR] {e.message}")
        for err in e.context.get("errors") or []:
            loc = ".".join(str(p) for p in err.get("loc", ()))
            print(f"  {loc}: {err.get('msg')}")
        return 1

    print(f"[OK] {config.name} {config.version} ({config.environment})")
    print(f"  API:         {config.api.base_url}")
    print(f"  Debounce:    {config.persistence.debounce_ms} ms")
    print(f"  Selection:   {config.selection.trek_type} / {config.selection.team}")
    print(f"  Log dir:     {config.logging.directory}")
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    config = _load(args)
    if config is None:
        return 1
    try:
        return asyncio.run(_seed(config))
    finally:
        shutdown_logging()


async def _seed(config: TrekPrepConfig) -> int:
    from trekprep.connected_systems.client import TrekPrepAPIClient
    from trekprep.connected_systems.seeding import seed_database

    async with TrekPrepAPIClient(config.api) as client:
        try:
            result = await seed_database(client)
        except TrekPrepLoadError as e:
            print(f"[ERROR] {e.message}")
            return 1

    for trek in result.created:
        print(f"[OK] Created trek: {trek.name}")
    for name in result.skipped:
        print(f"[SKIP] Already present: {name}")
    if result.staff_written:
        print("[OK] Staff database written")
    if not result.created:
        print("Store already seeded")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    config = _load(args)
    if config is None:
        return 1
    try:
        return asyncio.run(_status(config, args))
    finally:
        shutdown_logging()


async def _status(config: TrekPrepConfig, args: argparse.Namespace) -> int:
    from trekprep.connected_systems.client import TrekPrepAPIClient
    from trekprep.session import ChecklistSession

    client = None if args.offline else TrekPrepAPIClient(config.api)
    session = ChecklistSession(config, client)
    try:
        try:
            await session.load()
        except TrekPrepLoadError as e:
            print(f"[ERROR] {e.message}")
            print("  Check the API and run the command again.")
            return 1
        return _print_status(session, args.base, args.trek)
    finally:
        await session.close()
        if client is not None:
            await client.aclose()


def _print_status(session, base_name: Optional[str], trek_name: Optional[str]) -> int:
    from trekprep.rules.aggregation import progress_band
    from trekprep.rules.calculated import format_rupees

    if base_name is not None and session.base_named(base_name) is None:
        print(f"[ERROR] Unknown base: {base_name}")
        return 1

    print("Bases (active treks / treks):")
    for b in session.base_progress():
        print(f"  {b.name:<14} {b.active_trips}/{b.total_trips}  {b.percentage:>3}%")

    print(f"Treks ({base_name or 'all bases'}):")
    for t in session.trek_progress(base_name):
        print(
            f"  {t.name:<26} {t.start_date} → {t.end_date}  {t.number_of_clients:>3} clients  "
            f"{t.completed}/{t.total}  {t.percentage:>3}% [{progress_band(t.percentage)}]"
        )

    if trek_name is None:
        return 0
    if session.trek_named(trek_name) is None:
        print(f"[ERROR] Unknown trek: {trek_name}")
        return 1

    locked = " (read-only)" if session.is_read_only(trek_name) else ""
    print(f"Categories ({trek_name}){locked}:")
    for c in session.category_progress(trek_name):
        print(f"  {c.name:<16} {c.completed}/{c.total}  {c.percentage:>3}%")
    for task in session.store.for_trek(trek_name):
        if task.is_calculated:
            print(f"  {task.title}: {format_rupees(session.calculated_total(task.id))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
