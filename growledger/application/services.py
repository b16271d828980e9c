"""
Service factory functions for dependency injection.

Wires the SQLite implementations to the core services. Use cases and the
API import from here; the core layer never imports infrastructure.
"""

from typing import TYPE_CHECKING

from growledger.config import get_settings
from growledger.core.services import (
    AuditTrail,
    CleanQueueService,
    RecipeScaler,
    ReconciliationEngine,
    SupplyLedger,
)

if TYPE_CHECKING:
    from growledger.core.interfaces import (
        IAuditStore,
        ICleanQueueStore,
        IRecipeStore,
        IRunStore,
        ISupplyStore,
        ITransactionRunner,
    )


# Singleton service instances
_audit_trail: AuditTrail | None = None
_supply_ledger: SupplyLedger | None = None
_clean_queue_service: CleanQueueService | None = None
_reconciliation_engine: ReconciliationEngine | None = None
_recipe_scaler: RecipeScaler | None = None


def get_recipe_scaler() -> RecipeScaler:
    """Get the (stateless) recipe scaler."""
    global _recipe_scaler
    if _recipe_scaler is None:
        _recipe_scaler = RecipeScaler()
    return _recipe_scaler


async def get_audit_trail(audit_store: "IAuditStore | None" = None) -> AuditTrail:
    """
    Get or create the AuditTrail.

    Args:
        audit_store: Optional audit store override

    Returns:
        Configured AuditTrail
    """
    global _audit_trail

    if _audit_trail is not None and audit_store is None:
        return _audit_trail

    from growledger.infrastructure.storage.sqlite import get_audit_store

    service = AuditTrail(
        audit_store=audit_store or await get_audit_store(),
        recent_limit=get_settings().ledger.recent_events_limit,
    )

    if audit_store is None:
        _audit_trail = service
    return service


async def get_supply_ledger(
    runner: "ITransactionRunner | None" = None,
    supply_store: "ISupplyStore | None" = None,
    audit_trail: AuditTrail | None = None,
) -> SupplyLedger:
    """
    Get or create the SupplyLedger.

    Args:
        runner: Optional transaction runner override
        supply_store: Optional supply store override
        audit_trail: Optional audit trail override

    Returns:
        Configured SupplyLedger
    """
    global _supply_ledger

    overridden = runner is not None or supply_store is not None or audit_trail is not None
    if _supply_ledger is not None and not overridden:
        return _supply_ledger

    from growledger.infrastructure.storage.sqlite import (
        get_supply_store,
        get_transaction_runner,
    )

    service = SupplyLedger(
        runner=runner or await get_transaction_runner(),
        supply_store=supply_store or await get_supply_store(),
        audit_trail=audit_trail or await get_audit_trail(),
        strict_units=get_settings().ledger.strict_units,
    )

    if not overridden:
        _supply_ledger = service
    return service


async def get_clean_queue_service(
    runner: "ITransactionRunner | None" = None,
    run_store: "IRunStore | None" = None,
    queue_store: "ICleanQueueStore | None" = None,
) -> CleanQueueService:
    """
    Get or create the CleanQueueService.

    Name heuristic and backfill limit come from CLEAN_QUEUE_* settings.
    """
    global _clean_queue_service

    overridden = runner is not None or run_store is not None or queue_store is not None
    if _clean_queue_service is not None and not overridden:
        return _clean_queue_service

    from growledger.infrastructure.storage.sqlite import (
        get_clean_queue_store,
        get_run_store,
        get_transaction_runner,
    )

    settings = get_settings()
    tx_runner = runner or await get_transaction_runner()
    audit_trail = await get_audit_trail()
    ledger = await get_supply_ledger(runner=runner)

    service = CleanQueueService(
        runner=tx_runner,
        ledger=ledger,
        audit_trail=audit_trail,
        run_store=run_store or await get_run_store(),
        queue_store=queue_store or await get_clean_queue_store(),
        use_name_heuristic=settings.clean_queue.name_heuristic_enabled,
        backfill_limit=settings.clean_queue.backfill_limit,
    )

    if not overridden:
        _clean_queue_service = service
    return service


async def get_reconciliation_engine(
    ledger: SupplyLedger | None = None,
    recipe_store: "IRecipeStore | None" = None,
) -> ReconciliationEngine:
    """Get or create the ReconciliationEngine."""
    global _reconciliation_engine

    overridden = ledger is not None or recipe_store is not None
    if _reconciliation_engine is not None and not overridden:
        return _reconciliation_engine

    from growledger.infrastructure.storage.sqlite import get_recipe_store

    service = ReconciliationEngine(
        ledger=ledger or await get_supply_ledger(),
        recipe_store=recipe_store or await get_recipe_store(),
        scaler=get_recipe_scaler(),
    )

    if not overridden:
        _reconciliation_engine = service
    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _audit_trail
    global _supply_ledger
    global _clean_queue_service
    global _reconciliation_engine
    global _recipe_scaler

    _audit_trail = None
    _supply_ledger = None
    _clean_queue_service = None
    _reconciliation_engine = None
    _recipe_scaler = None


__all__ = [
    # Factory functions
    "get_recipe_scaler",
    "get_audit_trail",
    "get_supply_ledger",
    "get_clean_queue_service",
    "get_reconciliation_engine",
    # Reset
    "reset_services",
]
