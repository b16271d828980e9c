"""Cultivation run endpoints: creation, archive and recipe changes."""

from fastapi import APIRouter, Depends, status

from growledger.api.dependencies import (
    get_archive_run_use_case,
    get_change_run_recipe_use_case,
    get_clean_queue,
    get_create_run_use_case,
    get_runs,
)
from growledger.application.dto.requests import (
    ArchiveRunRequest,
    ChangeRunRecipeRequest,
    CreateRunRequest,
)
from growledger.application.dto.responses import (
    ArchiveRunResponse,
    ChangeRunRecipeResponse,
    CreateRunResponse,
    ErrorResponse,
    RunResponse,
)
from growledger.application.use_cases import (
    ArchiveRunUseCase,
    ChangeRunRecipeUseCase,
    CreateRunUseCase,
)
from growledger.config import ledger_context
from growledger.core.exceptions import RunNotFoundError
from growledger.core.services import CleanQueueService
from growledger.infrastructure.storage.sqlite import SQLiteRunStore

router = APIRouter(prefix="/api/runs", tags=["runs"])


@router.post(
    "",
    response_model=CreateRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def create_run(
    request: CreateRunRequest,
    use_case: CreateRunUseCase = Depends(get_create_run_use_case),
) -> CreateRunResponse:
    """
    Create a run.

    When a recipe is assigned and ``consume_supplies`` is set, the scaled
    needs are debited from stock with one consume audit per line. Runs created
    without consumption are not reconciled on later recipe changes.
    """
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=list[RunResponse])
async def list_runs(
    limit: int = 2000,
    offset: int = 0,
    store: SQLiteRunStore = Depends(get_runs),
) -> list[RunResponse]:
    runs = await store.list_runs(limit=limit, offset=offset)
    return [RunResponse.from_entity(r) for r in runs]


@router.get(
    "/{run_id}",
    response_model=RunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_run(
    run_id: str,
    store: SQLiteRunStore = Depends(get_runs),
) -> RunResponse:
    run = await store.get(run_id)
    if run is None:
        raise RunNotFoundError(run_id)
    return RunResponse.from_entity(run)


@router.post(
    "/{run_id}/archive",
    response_model=ArchiveRunResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def archive_run(
    run_id: str,
    request: ArchiveRunRequest | None = None,
    use_case: ArchiveRunUseCase = Depends(get_archive_run_use_case),
) -> ArchiveRunResponse:
    """Archive a run and enqueue its reusable containers for cleaning."""
    with ledger_context(run_id=run_id):
        result = await use_case.execute(run_id, request or ArchiveRunRequest())
    return use_case.to_response(result)


@router.post(
    "/{run_id}/recipe",
    response_model=ChangeRunRecipeResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def change_run_recipe(
    run_id: str,
    request: ChangeRunRecipeRequest,
    use_case: ChangeRunRecipeUseCase = Depends(get_change_run_recipe_use_case),
) -> ChangeRunRecipeResponse:
    """Swap recipe and/or batch size; old needs are refunded, new ones consumed."""
    with ledger_context(run_id=run_id, recipe_id=request.recipe_id):
        result = await use_case.execute(run_id, request)
    return use_case.to_response(result)


@router.post(
    "/{run_id}/reset-clean-gate",
    response_model=RunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def reset_clean_gate(
    run_id: str,
    clean_queue: CleanQueueService = Depends(get_clean_queue),
) -> RunResponse:
    """Operator override: allow the run's reusables to be enqueued again."""
    with ledger_context(run_id=run_id):
        run = await clean_queue.reset_clean_gate(run_id)
    return RunResponse.from_entity(run)
