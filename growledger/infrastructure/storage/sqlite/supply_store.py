"""SQLite implementation of supply reads."""

from growledger.core.entities.supply import Supply
from growledger.core.interfaces.supply_store import ISupplyStore
from growledger.core.interfaces.transaction import Collection
from growledger.infrastructure.storage.sqlite.document_collection import SQLiteDocumentCollection


class SQLiteSupplyStore(SQLiteDocumentCollection[Supply], ISupplyStore):
    """Supplies stored as documents."""

    collection = Collection.SUPPLIES
    model = Supply

    async def get(self, supply_id: str) -> Supply | None:
        return await self._get(supply_id)

    async def list_supplies(
        self, include_deleted: bool = False, limit: int | None = None, offset: int = 0
    ) -> list[Supply]:
        where = "" if include_deleted else "COALESCE(json_extract(data, '$.deleted'), 0) = 0"
        return await self._query(
            where=where,
            order_by="lower(json_extract(data, '$.name')), doc_id",
            limit=limit,
            offset=offset,
        )
