"""SQLite implementation of run storage."""

from uuid import uuid4

from growledger.config import get_logger
from growledger.core.entities.run import Run
from growledger.core.interfaces.run_store import IRunStore
from growledger.core.interfaces.transaction import Collection
from growledger.infrastructure.storage.sqlite.document_collection import SQLiteDocumentCollection

logger = get_logger(__name__)


class SQLiteRunStore(SQLiteDocumentCollection[Run], IRunStore):
    """Cultivation runs stored as documents."""

    collection = Collection.RUNS
    model = Run

    async def create(self, run: Run) -> Run:
        if run.id is None:
            run = run.model_copy(update={"id": uuid4().hex})
        await self._put(run.id, run, insert_only=True)  # type: ignore[arg-type]
        logger.info("run_created", run_id=run.id, recipe_id=run.recipe_id)
        return run

    async def get(self, run_id: str) -> Run | None:
        return await self._get(run_id)

    async def list_runs(self, limit: int = 2000, offset: int = 0) -> list[Run]:
        return await self._query(order_by="rowid", limit=limit, offset=offset)
