"""Archive Run Use Case - the archive transition that feeds the clean queue."""

from dataclasses import dataclass

from growledger.application.dto.requests import ArchiveRunRequest
from growledger.application.dto.responses import ArchiveRunResponse, RunResponse
from growledger.config import get_logger
from growledger.core.entities.base import utcnow
from growledger.core.entities.run import Run
from growledger.core.exceptions import RunNotFoundError
from growledger.core.interfaces.run_store import IRunStore
from growledger.core.interfaces.transaction import ITransaction, ITransactionRunner
from growledger.core.services.clean_queue import CleanQueueService, EnqueueResult, run_ref

logger = get_logger(__name__)


@dataclass
class ArchiveRunResult:
    """Result of archiving a run."""

    run: Run
    enqueue: EnqueueResult


class ArchiveRunUseCase:
    """
    Mark a run archived, then enqueue its reusable items.

    The archive write and the enqueue are separate transactions. If the
    enqueue does not happen, the run is still archived and ungated, which is
    exactly what the backfill scan picks up.
    """

    def __init__(
        self,
        runner: ITransactionRunner | None = None,
        run_store: IRunStore | None = None,
        clean_queue: CleanQueueService | None = None,
    ):
        self._runner = runner
        self._run_store = run_store
        self._clean_queue = clean_queue

    async def _get_runner(self) -> ITransactionRunner:
        if self._runner is None:
            from growledger.infrastructure.storage.sqlite import get_transaction_runner

            self._runner = await get_transaction_runner()
        return self._runner

    async def _get_run_store(self) -> IRunStore:
        if self._run_store is None:
            from growledger.infrastructure.storage.sqlite import get_run_store

            self._run_store = await get_run_store()
        return self._run_store

    async def _get_clean_queue(self) -> CleanQueueService:
        if self._clean_queue is None:
            from growledger.application.services import get_clean_queue_service

            self._clean_queue = await get_clean_queue_service()
        return self._clean_queue

    async def execute(self, run_id: str, request: ArchiveRunRequest) -> ArchiveRunResult:
        """Execute archive run use case."""
        logger.info("archive_run_started", run_id=run_id, stage=request.stage)

        async def _archive(tx: ITransaction) -> Run:
            run = await tx.get_model(run_ref(run_id), Run)
            if run is None:
                raise RunNotFoundError(run_id)
            if run.archived:
                return run
            now = utcnow()
            archived = run.model_copy(
                update={
                    "archived": True,
                    "archived_at": run.archived_at or now,
                    "stage": request.stage,
                    "updated_at": now,
                }
            )
            tx.set_model(run_ref(run_id), archived)
            return archived

        runner = await self._get_runner()
        await runner.run(_archive, operation="archive_run")

        clean_queue = await self._get_clean_queue()
        enqueue = await clean_queue.enqueue_for_run(run_id)

        run_store = await self._get_run_store()
        run = await run_store.get(run_id)
        if run is None:
            raise RunNotFoundError(run_id)

        logger.info(
            "archive_run_completed",
            run_id=run_id,
            enqueued=enqueue.enqueued,
            gate=run.clean_gate.value,
        )
        return ArchiveRunResult(run=run, enqueue=enqueue)

    def to_response(self, result: ArchiveRunResult) -> ArchiveRunResponse:
        return ArchiveRunResponse(
            run=RunResponse.from_entity(result.run),
            enqueued=result.enqueue.enqueued,
            stamped=result.enqueue.stamped,
            reason=result.enqueue.reason,
        )
