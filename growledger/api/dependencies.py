"""
Dependency injection container for FastAPI.

Provides service, store and use case instances to route handlers. Tests
replace these through ``app.dependency_overrides``.
"""

from functools import lru_cache

from growledger.application.services import (
    get_audit_trail,
    get_clean_queue_service,
    get_recipe_scaler,
    get_supply_ledger,
)
from growledger.application.use_cases import (
    ArchiveRunUseCase,
    ChangeRunRecipeUseCase,
    CreateRunUseCase,
    ReturnCleanedItemsUseCase,
    ScanCleanBackfillUseCase,
)
from growledger.config import Settings, get_settings
from growledger.core.services import (
    AuditTrail,
    CleanQueueService,
    RecipeScaler,
    SupplyLedger,
)
from growledger.infrastructure.storage.sqlite import (
    SQLiteRecipeStore,
    SQLiteRunStore,
    get_recipe_store,
    get_run_store,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies
async def get_ledger() -> SupplyLedger:
    """Get supply ledger."""
    return await get_supply_ledger()


async def get_audit() -> AuditTrail:
    """Get audit trail."""
    return await get_audit_trail()


async def get_clean_queue() -> CleanQueueService:
    """Get clean queue service."""
    return await get_clean_queue_service()


def get_scaler() -> RecipeScaler:
    """Get recipe scaler."""
    return get_recipe_scaler()


# Store dependencies
async def get_recipes() -> SQLiteRecipeStore:
    """Get recipe store."""
    return await get_recipe_store()


async def get_runs() -> SQLiteRunStore:
    """Get run store."""
    return await get_run_store()


# Use case dependencies
def get_create_run_use_case() -> CreateRunUseCase:
    return CreateRunUseCase()


def get_archive_run_use_case() -> ArchiveRunUseCase:
    return ArchiveRunUseCase()


def get_change_run_recipe_use_case() -> ChangeRunRecipeUseCase:
    return ChangeRunRecipeUseCase()


def get_return_cleaned_items_use_case() -> ReturnCleanedItemsUseCase:
    return ReturnCleanedItemsUseCase()


def get_scan_clean_backfill_use_case() -> ScanCleanBackfillUseCase:
    return ScanCleanBackfillUseCase()
