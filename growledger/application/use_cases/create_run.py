"""Create Run Use Case - new cultivation run with initial consumption."""

from dataclasses import dataclass, field

from growledger.application.dto.requests import CreateRunRequest
from growledger.application.dto.responses import (
    CreateRunResponse,
    IngredientNeedResponse,
    RunResponse,
)
from growledger.config import get_logger
from growledger.core.entities.recipe import IngredientNeed
from growledger.core.entities.run import BatchParams, Run
from growledger.core.exceptions import RecipeNotFoundError
from growledger.core.interfaces.recipe_store import IRecipeStore
from growledger.core.interfaces.run_store import IRunStore
from growledger.core.services.reconciliation import RecipeAssignment, ReconciliationEngine

logger = get_logger(__name__)


@dataclass
class CreateRunResult:
    """Result of creating a run."""

    run: Run
    consumed: list[IngredientNeed] = field(default_factory=list)


class CreateRunUseCase:
    """Create a run and debit its recipe's needs from stock."""

    def __init__(
        self,
        run_store: IRunStore | None = None,
        recipe_store: IRecipeStore | None = None,
        reconciliation: ReconciliationEngine | None = None,
    ):
        self._run_store = run_store
        self._recipe_store = recipe_store
        self._reconciliation = reconciliation

    async def _get_run_store(self) -> IRunStore:
        if self._run_store is None:
            from growledger.infrastructure.storage.sqlite import get_run_store

            self._run_store = await get_run_store()
        return self._run_store

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

    async def execute(self, request: CreateRunRequest) -> CreateRunResult:
        """Execute create run use case."""
        logger.info(
            "create_run_started",
            recipe_id=request.recipe_id,
            batch_count=request.batch.batch_count,
        )

        if request.recipe_id:
            recipe_store = await self._get_recipe_store()
            if await recipe_store.get(request.recipe_id) is None:
                raise RecipeNotFoundError(request.recipe_id)

        batch = BatchParams(**request.batch.model_dump())
        run_store = await self._get_run_store()
        run = await run_store.create(
            Run(
                name=request.name,
                recipe_id=request.recipe_id,
                batch=batch,
                stage=request.stage,
                tracks_supplies=request.consume_supplies,
            )
        )

        consumed: list[IngredientNeed] = []
        if request.recipe_id and request.consume_supplies:
            engine = await self._get_reconciliation()
            consumed = await engine.consume_for_run(
                run.id,  # type: ignore[arg-type]
                RecipeAssignment(recipe_id=request.recipe_id, batch=batch),
                note="run created",
            )

        logger.info("create_run_completed", run_id=run.id, consumed_lines=len(consumed))
        return CreateRunResult(run=run, consumed=consumed)

    def to_response(self, result: CreateRunResult) -> CreateRunResponse:
        return CreateRunResponse(
            run=RunResponse.from_entity(result.run),
            consumed=[IngredientNeedResponse.from_entity(n) for n in result.consumed],
        )
