"""Abstract interfaces for infrastructure implementations."""

from growledger.core.interfaces.audit_store import IAuditStore
from growledger.core.interfaces.clean_queue_store import ICleanQueueStore
from growledger.core.interfaces.recipe_store import IRecipeStore
from growledger.core.interfaces.run_store import IRunStore
from growledger.core.interfaces.supply_store import ISupplyStore
from growledger.core.interfaces.transaction import (
    Collection,
    DocumentRef,
    ITransaction,
    ITransactionRunner,
)

__all__ = [
    # Transactions
    "Collection",
    "DocumentRef",
    "ITransaction",
    "ITransactionRunner",
    # Stores
    "ISupplyStore",
    "IRecipeStore",
    "IRunStore",
    "IAuditStore",
    "ICleanQueueStore",
]
