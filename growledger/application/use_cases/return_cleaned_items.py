"""Return Cleaned Items Use Case - operator drains a supply's clean queue."""

from growledger.application.dto.requests import CleanReturnRequest
from growledger.application.dto.responses import CleanReturnResponse
from growledger.config import get_logger
from growledger.core.services.clean_queue import CleanQueueService, CleanReturnResult

logger = get_logger(__name__)


class ReturnCleanedItemsUseCase:
    """Credit cleaned units back to stock and destroy the rest."""

    def __init__(self, clean_queue: CleanQueueService | None = None):
        self._clean_queue = clean_queue

    async def _get_clean_queue(self) -> CleanQueueService:
        if self._clean_queue is None:
            from growledger.application.services import get_clean_queue_service

            self._clean_queue = await get_clean_queue_service()
        return self._clean_queue

    async def execute(self, request: CleanReturnRequest) -> CleanReturnResult:
        clean_queue = await self._get_clean_queue()
        return await clean_queue.clean_return(request.supply_id, request.returned_qty)

    def to_response(self, result: CleanReturnResult) -> CleanReturnResponse:
        return CleanReturnResponse(
            supply_id=result.supply_id,
            pending_before=result.pending_before,
            returned=result.returned,
            destroyed=result.destroyed,
            quantity_after=result.quantity_after,
        )
