"""SQLite storage implementations."""

from growledger.infrastructure.storage.sqlite.audit_store import SQLiteAuditStore
from growledger.infrastructure.storage.sqlite.clean_queue_store import SQLiteCleanQueueStore
from growledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from growledger.infrastructure.storage.sqlite.recipe_store import SQLiteRecipeStore
from growledger.infrastructure.storage.sqlite.run_store import SQLiteRunStore
from growledger.infrastructure.storage.sqlite.supply_store import SQLiteSupplyStore
from growledger.infrastructure.storage.sqlite.transaction import (
    SQLiteTransaction,
    SQLiteTransactionRunner,
)

# Singleton instances
_transaction_runner: SQLiteTransactionRunner | None = None
_supply_store: SQLiteSupplyStore | None = None
_recipe_store: SQLiteRecipeStore | None = None
_run_store: SQLiteRunStore | None = None
_audit_store: SQLiteAuditStore | None = None
_clean_queue_store: SQLiteCleanQueueStore | None = None


async def get_transaction_runner() -> SQLiteTransactionRunner:
    """Get singleton transaction runner instance."""
    global _transaction_runner
    if _transaction_runner is None:
        _transaction_runner = SQLiteTransactionRunner()
    return _transaction_runner


async def get_supply_store() -> SQLiteSupplyStore:
    """Get singleton supply store instance."""
    global _supply_store
    if _supply_store is None:
        _supply_store = SQLiteSupplyStore()
    return _supply_store


async def get_recipe_store() -> SQLiteRecipeStore:
    """Get singleton recipe store instance."""
    global _recipe_store
    if _recipe_store is None:
        _recipe_store = SQLiteRecipeStore()
    return _recipe_store


async def get_run_store() -> SQLiteRunStore:
    """Get singleton run store instance."""
    global _run_store
    if _run_store is None:
        _run_store = SQLiteRunStore()
    return _run_store


async def get_audit_store() -> SQLiteAuditStore:
    """Get singleton audit store instance."""
    global _audit_store
    if _audit_store is None:
        _audit_store = SQLiteAuditStore()
    return _audit_store


async def get_clean_queue_store() -> SQLiteCleanQueueStore:
    """Get singleton clean queue store instance."""
    global _clean_queue_store
    if _clean_queue_store is None:
        _clean_queue_store = SQLiteCleanQueueStore()
    return _clean_queue_store


def reset_stores() -> None:
    """Drop singleton instances (for testing)."""
    global _transaction_runner, _supply_store, _recipe_store
    global _run_store, _audit_store, _clean_queue_store
    _transaction_runner = None
    _supply_store = None
    _recipe_store = None
    _run_store = None
    _audit_store = None
    _clean_queue_store = None


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Transactions
    "SQLiteTransaction",
    "SQLiteTransactionRunner",
    "get_transaction_runner",
    # Stores
    "SQLiteSupplyStore",
    "SQLiteRecipeStore",
    "SQLiteRunStore",
    "SQLiteAuditStore",
    "SQLiteCleanQueueStore",
    "get_supply_store",
    "get_recipe_store",
    "get_run_store",
    "get_audit_store",
    "get_clean_queue_store",
    "reset_stores",
]
