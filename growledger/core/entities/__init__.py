"""Domain entities."""

from growledger.core.entities.audit import AuditAction, AuditRecord
from growledger.core.entities.base import DocumentModel, utcnow
from growledger.core.entities.clean_queue import CleanQueueEntry
from growledger.core.entities.recipe import IngredientNeed, Recipe, RecipeLine
from growledger.core.entities.run import ARCHIVED_STAGES, BatchParams, CleanGate, Run
from growledger.core.entities.supply import (
    REUSABLE_CATEGORIES,
    StockStatus,
    Supply,
    SupplyCategory,
)

__all__ = [
    # Base
    "DocumentModel",
    "utcnow",
    # Supply
    "Supply",
    "SupplyCategory",
    "StockStatus",
    "REUSABLE_CATEGORIES",
    # Recipe
    "Recipe",
    "RecipeLine",
    "IngredientNeed",
    # Run
    "Run",
    "BatchParams",
    "CleanGate",
    "ARCHIVED_STAGES",
    # Audit
    "AuditRecord",
    "AuditAction",
    # Clean queue
    "CleanQueueEntry",
]
