"""Clean queue endpoints."""

from fastapi import APIRouter, Depends

from growledger.api.dependencies import (
    get_clean_queue,
    get_return_cleaned_items_use_case,
    get_scan_clean_backfill_use_case,
)
from growledger.application.dto.requests import BackfillRequest, CleanReturnRequest
from growledger.application.dto.responses import (
    BackfillResponse,
    CleanQueueEntryResponse,
    CleanQueueListResponse,
    CleanReturnResponse,
    ErrorResponse,
)
from growledger.application.use_cases import (
    ReturnCleanedItemsUseCase,
    ScanCleanBackfillUseCase,
)
from growledger.config import ledger_context
from growledger.core.services import CleanQueueService

router = APIRouter(prefix="/api/clean-queue", tags=["clean-queue"])


@router.get("", response_model=CleanQueueListResponse)
async def list_pending(
    clean_queue: CleanQueueService = Depends(get_clean_queue),
) -> CleanQueueListResponse:
    """Supplies with units waiting to be cleaned."""
    entries = await clean_queue.list_pending()
    return CleanQueueListResponse(
        entries=[CleanQueueEntryResponse.from_entity(e) for e in entries],
        total_pending=sum(e.pending for e in entries),
    )


@router.post(
    "/return",
    response_model=CleanReturnResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def return_cleaned(
    request: CleanReturnRequest,
    use_case: ReturnCleanedItemsUseCase = Depends(get_return_cleaned_items_use_case),
) -> CleanReturnResponse:
    """
    Return cleaned units to stock.

    Everything pending that was not returned is recorded as destroyed and
    the supply's queue entry is cleared.
    """
    with ledger_context(supply_id=request.supply_id):
        result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post("/backfill", response_model=BackfillResponse)
async def backfill(
    request: BackfillRequest | None = None,
    use_case: ScanCleanBackfillUseCase = Depends(get_scan_clean_backfill_use_case),
) -> BackfillResponse:
    """Enqueue archived runs that never reached the queue."""
    report = await use_case.execute(request or BackfillRequest())
    return use_case.to_response(report)
