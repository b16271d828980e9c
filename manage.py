#!/usr/bin/env python3
"""
GrowLedger management CLI.

Usage:
    python manage.py serve       Start the API server
    python manage.py migrate     Apply pending schema migrations
    python manage.py backfill    Enqueue archived runs missing from the clean queue
    python manage.py verify      Check schema integrity and replay every supply's audit trail
"""

import argparse
import asyncio
import json
import sys

from growledger.config import configure_logging, get_settings


async def _migrate() -> int:
    from growledger.infrastructure.storage.sqlite.migrations import (
        get_migration_status,
        initialize_database,
    )

    results = await initialize_database()
    for result in results:
        state = "ok" if result.success else f"FAILED ({result.error})"
        print(f"  v{result.version} {result.name}: {state} [{result.execution_time_ms}ms]")
    if not results:
        print("  Nothing to apply.")

    status = await get_migration_status()
    print(f"Current version: {status['current_version']}")
    if status["pending_migrations"]:
        print(f"Pending: {', '.join(status['pending_migrations'])}")
    return 0 if all(r.success for r in results) else 1


async def _backfill(limit: int | None) -> int:
    from growledger.application.dto.requests import BackfillRequest
    from growledger.application.use_cases import ScanCleanBackfillUseCase
    from growledger.infrastructure.storage.sqlite import close_pool

    try:
        use_case = ScanCleanBackfillUseCase()
        report = await use_case.execute(BackfillRequest(limit=limit))
    finally:
        await close_pool()

    print(json.dumps(report.to_dict(), indent=2))
    return 0


async def _verify() -> int:
    from growledger.application.services import get_supply_ledger
    from growledger.infrastructure.storage.sqlite import close_pool
    from growledger.infrastructure.storage.sqlite.migrations import verify_schema_integrity

    failures = 0
    for check in await verify_schema_integrity():
        print(f"  [{check['status']}] {check['check']}")
        if check["status"] != "PASS":
            failures += 1

    try:
        ledger = await get_supply_ledger()
        for supply in await ledger.list_supplies(include_deleted=True):
            result = await ledger.verify_supply(supply.id)  # type: ignore[arg-type]
            if not result.consistent:
                failures += 1
                print(
                    f"  [FAIL] {supply.name} ({result.supply_id}): stored "
                    f"{result.stored_quantity}, replayed {result.replayed_quantity} "
                    f"from {result.events} events"
                )
    finally:
        await close_pool()

    print("All checks passed." if failures == 0 else f"{failures} check(s) failed.")
    return 0 if failures == 0 else 1


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "growledger.api.main:app",
        host=args.host or settings.api.host,
        port=args.port or settings.api.port,
        reload=args.reload,
    )


def cmd_migrate(args: argparse.Namespace) -> None:
    print("Applying migrations...")
    sys.exit(asyncio.run(_migrate()))


def cmd_backfill(args: argparse.Namespace) -> None:
    sys.exit(asyncio.run(_backfill(args.limit)))


def cmd_verify(args: argparse.Namespace) -> None:
    sys.exit(asyncio.run(_verify()))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="GrowLedger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default=None, help="Bind host (default: API_HOST)")
    p_serve.add_argument("--port", type=int, default=None, help="Bind port (default: API_PORT)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending schema migrations")
    p_migrate.set_defaults(func=cmd_migrate)

    # backfill
    p_backfill = sub.add_parser("backfill", help="Run the clean queue backfill scan")
    p_backfill.add_argument("--limit", type=int, default=None, help="Max runs to scan")
    p_backfill.set_defaults(func=cmd_backfill)

    # verify
    p_verify = sub.add_parser("verify", help="Check schema and replay audit trails")
    p_verify.set_defaults(func=cmd_verify)

    args = parser.parse_args()
    configure_logging()
    args.func(args)


if __name__ == "__main__":
    main()
