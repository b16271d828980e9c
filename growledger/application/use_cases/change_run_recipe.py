"""Change Run Recipe Use Case - recipe/batch edits with reconciliation."""

from dataclasses import dataclass

from growledger.application.dto.requests import ChangeRunRecipeRequest
from growledger.application.dto.responses import (
    ChangeRunRecipeResponse,
    IngredientNeedResponse,
    RunResponse,
)
from growledger.config import get_logger
from growledger.core.entities.base import utcnow
from growledger.core.entities.run import BatchParams, Run
from growledger.core.exceptions import RecipeNotFoundError, RunNotFoundError
from growledger.core.interfaces.recipe_store import IRecipeStore
from growledger.core.interfaces.transaction import ITransaction, ITransactionRunner
from growledger.core.services.clean_queue import run_ref
from growledger.core.services.reconciliation import (
    ReconcileResult,
    ReconciliationEngine,
    RecipeAssignment,
)

logger = get_logger(__name__)


@dataclass
class ChangeRunRecipeResult:
    """Result of changing a run's recipe."""

    run: Run
    reconcile: ReconcileResult


class ChangeRunRecipeUseCase:
    """Swap a run's recipe or batch size and reconcile the ledger."""

    def __init__(
        self,
        runner: ITransactionRunner | None = None,
        recipe_store: IRecipeStore | None = None,
        reconciliation: ReconciliationEngine | None = None,
    ):
        self._runner = runner
        self._recipe_store = recipe_store
        self._reconciliation = reconciliation

    async def _get_runner(self) -> ITransactionRunner:
        if self._runner is None:
            from growledger.infrastructure.storage.sqlite import get_transaction_runner

            self._runner = await get_transaction_runner()
        return self._runner

    async def _get_recipe_store(self) -> IRecipeStore:
        if self._recipe_store is None:
            from growledger.infrastructure.storage.sqlite import get_recipe_store

            self._recipe_store = await get_recipe_store()
        return self._recipe_store

    async def _get_reconciliation(self) -> ReconciliationEngine:
        if self._reconciliation is None:
            from growledger.application.services import get_reconciliation_engine

            self._reconciliation = await get_reconciliation_engine()
        return self._reconciliation

    async def execute(
        self, run_id: str, request: ChangeRunRecipeRequest
    ) -> ChangeRunRecipeResult:
        """Execute change run recipe use case."""
        logger.info("change_run_recipe_started", run_id=run_id, recipe_id=request.recipe_id)

        if request.recipe_id:
            recipe_store = await self._get_recipe_store()
            if await recipe_store.get(request.recipe_id) is None:
                raise RecipeNotFoundError(request.recipe_id)

        async def _update(tx: ITransaction) -> tuple[Run, Run]:
            run = await tx.get_model(run_ref(run_id), Run)
            if run is None:
                raise RunNotFoundError(run_id)
            batch = (
                BatchParams(**request.batch.model_dump()) if request.batch else run.batch
            )
            updated = run.model_copy(
                update={
                    "recipe_id": request.recipe_id,
                    "batch": batch,
                    "updated_at": utcnow(),
                }
            )
            tx.set_model(run_ref(run_id), updated)
            return run, updated

        runner = await self._get_runner()
        before, after = await runner.run(_update, operation="change_run_recipe")

        old = (
            RecipeAssignment(recipe_id=before.recipe_id, batch=before.batch)
            if before.recipe_id
            else None
        )
        new = (
            RecipeAssignment(recipe_id=after.recipe_id, batch=after.batch)
            if after.recipe_id
            else None
        )

        if not before.tracks_supplies:
            # Nothing was ever debited for this run, so there is nothing to refund
            logger.info("change_run_recipe_untracked", run_id=run_id)
            reconcile = ReconcileResult(run_id=run_id)
        elif old == new:
            reconcile = ReconcileResult(run_id=run_id)
        else:
            engine = await self._get_reconciliation()
            reconcile = await engine.reconcile(run_id, old, new, note=request.note)

        logger.info(
            "change_run_recipe_completed",
            run_id=run_id,
            refunded_lines=len(reconcile.refunded),
            consumed_lines=len(reconcile.consumed),
        )
        return ChangeRunRecipeResult(run=after, reconcile=reconcile)

    def to_response(self, result: ChangeRunRecipeResult) -> ChangeRunRecipeResponse:
        return ChangeRunRecipeResponse(
            run=RunResponse.from_entity(result.run),
            refunded=[IngredientNeedResponse.from_entity(n) for n in result.reconcile.refunded],
            consumed=[IngredientNeedResponse.from_entity(n) for n in result.reconcile.consumed],
        )
