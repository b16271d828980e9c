"""SQLite implementation of audit record reads."""

from growledger.core.entities.audit import AuditAction, AuditRecord
from growledger.core.interfaces.audit_store import IAuditStore
from growledger.core.interfaces.transaction import Collection
from growledger.infrastructure.storage.sqlite.document_collection import SQLiteDocumentCollection

# Timestamp first, insertion order breaks ties within one transaction
_CHRONOLOGICAL = "json_extract(data, '$.timestamp'), rowid"


class SQLiteAuditStore(SQLiteDocumentCollection[AuditRecord], IAuditStore):
    """Audit records; written only through ledger transactions."""

    collection = Collection.AUDIT_RECORDS
    model = AuditRecord

    async def list_for_supply(
        self, supply_id: str, limit: int | None = None
    ) -> list[AuditRecord]:
        return await self._query(
            where="json_extract(data, '$.supply_id') = ?",
            params=(supply_id,),
            order_by=_CHRONOLOGICAL,
            limit=limit,
        )

    async def list_records(
        self,
        action: AuditAction | None = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[AuditRecord]:
        if action is None:
            return await self._query(order_by=_CHRONOLOGICAL, limit=limit, offset=offset)
        return await self._query(
            where="json_extract(data, '$.action') = ?",
            params=(action.value,),
            order_by=_CHRONOLOGICAL,
            limit=limit,
            offset=offset,
        )
