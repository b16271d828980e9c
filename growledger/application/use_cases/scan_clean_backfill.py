"""Scan Clean Backfill Use Case - enqueue archived runs the archive path missed."""

from growledger.application.dto.requests import BackfillRequest
from growledger.application.dto.responses import BackfillResponse
from growledger.config import get_logger
from growledger.core.services.clean_queue import BackfillReport, CleanQueueService

logger = get_logger(__name__)


class ScanCleanBackfillUseCase:
    """Run the backfill scan; safe to repeat."""

    def __init__(self, clean_queue: CleanQueueService | None = None):
        self._clean_queue = clean_queue

    async def _get_clean_queue(self) -> CleanQueueService:
        if self._clean_queue is None:
            from growledger.application.services import get_clean_queue_service

            self._clean_queue = await get_clean_queue_service()
        return self._clean_queue

    async def execute(self, request: BackfillRequest) -> BackfillReport:
        logger.info("clean_backfill_started", limit=request.limit)
        clean_queue = await self._get_clean_queue()
        return await clean_queue.scan_backfill(limit=request.limit)

    def to_response(self, report: BackfillReport) -> BackfillResponse:
        return BackfillResponse(**report.to_dict())
