"""Core domain services."""

from growledger.core.services.audit_trail import AuditTrail, replay_quantity
from growledger.core.services.clean_queue import (
    BackfillReport,
    CleanQueueService,
    CleanReturnResult,
    EnqueueResult,
    enqueue_quantity,
)
from growledger.core.services.recipe_scaler import RecipeScaler, round_for_unit
from growledger.core.services.reconciliation import (
    ReconcileResult,
    ReconciliationEngine,
    RecipeAssignment,
)
from growledger.core.services.supply_ledger import (
    LedgerContext,
    SupplyLedger,
    SupplyVerification,
)

__all__ = [
    # Audit
    "AuditTrail",
    "replay_quantity",
    # Clean queue
    "CleanQueueService",
    "EnqueueResult",
    "CleanReturnResult",
    "BackfillReport",
    "enqueue_quantity",
    # Recipes
    "RecipeScaler",
    "round_for_unit",
    # Reconciliation
    "ReconciliationEngine",
    "RecipeAssignment",
    "ReconcileResult",
    # Ledger
    "SupplyLedger",
    "LedgerContext",
    "SupplyVerification",
]
