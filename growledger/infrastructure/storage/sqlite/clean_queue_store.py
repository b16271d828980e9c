"""SQLite implementation of clean queue reads."""

from growledger.core.entities.clean_queue import CleanQueueEntry
from growledger.core.interfaces.clean_queue_store import ICleanQueueStore
from growledger.core.interfaces.transaction import Collection
from growledger.infrastructure.storage.sqlite.document_collection import SQLiteDocumentCollection


class SQLiteCleanQueueStore(SQLiteDocumentCollection[CleanQueueEntry], ICleanQueueStore):
    """Pending-return counters keyed by supply id."""

    collection = Collection.CLEAN_QUEUE
    model = CleanQueueEntry

    async def get(self, supply_id: str) -> CleanQueueEntry | None:
        return await self._get(supply_id)

    async def list_entries(self, pending_only: bool = True) -> list[CleanQueueEntry]:
        return await self._query(
            where="json_extract(data, '$.pending') > 0" if pending_only else "",
            order_by="lower(json_extract(data, '$.name')), doc_id",
        )
