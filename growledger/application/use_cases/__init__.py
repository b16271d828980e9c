"""Application use cases."""

from growledger.application.use_cases.archive_run import ArchiveRunResult, ArchiveRunUseCase
from growledger.application.use_cases.change_run_recipe import (
    ChangeRunRecipeResult,
    ChangeRunRecipeUseCase,
)
from growledger.application.use_cases.create_run import CreateRunResult, CreateRunUseCase
from growledger.application.use_cases.return_cleaned_items import ReturnCleanedItemsUseCase
from growledger.application.use_cases.scan_clean_backfill import ScanCleanBackfillUseCase

__all__ = [
    "CreateRunUseCase",
    "CreateRunResult",
    "ArchiveRunUseCase",
    "ArchiveRunResult",
    "ChangeRunRecipeUseCase",
    "ChangeRunRecipeResult",
    "ReturnCleanedItemsUseCase",
    "ScanCleanBackfillUseCase",
]
