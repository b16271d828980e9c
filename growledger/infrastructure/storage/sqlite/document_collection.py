"""Shared SQLite access to one document collection."""

import json
from typing import Any, Generic, TypeVar

import aiosqlite

from growledger.config import get_settings
from growledger.core.entities.base import DocumentModel, utcnow
from growledger.core.interfaces.transaction import Collection
from growledger.infrastructure.storage.sqlite.connection import get_connection, get_transaction

M = TypeVar("M", bound=DocumentModel)


class SQLiteDocumentCollection(Generic[M]):
    """
    Typed reads and plain writes against the ``documents`` table.

    Subclasses set ``collection`` and ``model``. Quantity, pending and gate
    changes never go through here; they use the transaction runner.
    """

    collection: Collection
    model: type[M]

    def __init__(self, tenant_id: str | None = None):
        self._tenant_id = tenant_id or get_settings().tenant_id

    def _row_to_model(self, row: aiosqlite.Row) -> M:
        return self.model.from_document(row["doc_id"], json.loads(row["data"]))

    async def _get(self, doc_id: str) -> M | None:
        async with get_connection() as conn:
            cursor = await conn.execute(
                """
                SELECT doc_id, data FROM documents
                WHERE tenant_id = ? AND collection = ? AND doc_id = ?
                """,
                (self._tenant_id, self.collection.value, doc_id),
            )
            row = await cursor.fetchone()
            return self._row_to_model(row) if row else None

    async def _query(
        self,
        where: str = "",
        params: tuple[Any, ...] = (),
        order_by: str = "rowid",
        limit: int | None = None,
        offset: int = 0,
    ) -> list[M]:
        sql = "SELECT doc_id, data FROM documents WHERE tenant_id = ? AND collection = ?"
        if where:
            sql += f" AND {where}"
        sql += f" ORDER BY {order_by}"
        args: tuple[Any, ...] = (self._tenant_id, self.collection.value, *params)
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            args = (*args, limit, offset)

        async with get_connection() as conn:
            cursor = await conn.execute(sql, args)
            rows = await cursor.fetchall()
            return [self._row_to_model(row) for row in rows]

    async def _put(self, doc_id: str, entity: M, insert_only: bool = False) -> None:
        now = utcnow().isoformat()
        payload = json.dumps(entity.to_document())
        conflict = "" if insert_only else """
                ON CONFLICT (tenant_id, collection, doc_id) DO UPDATE SET
                    data = excluded.data,
                    version = documents.version + 1,
                    updated_at = excluded.updated_at
        """
        async with get_transaction() as conn:
            await conn.execute(
                f"""
                INSERT INTO documents
                    (tenant_id, collection, doc_id, data, version, created_at, updated_at)
                VALUES (?, ?, ?, ?, 1, ?, ?)
                {conflict}
                """,
                (self._tenant_id, self.collection.value, doc_id, payload, now, now),
            )

    async def _delete(self, doc_id: str) -> bool:
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                DELETE FROM documents
                WHERE tenant_id = ? AND collection = ? AND doc_id = ?
                """,
                (self._tenant_id, self.collection.value, doc_id),
            )
            return cursor.rowcount > 0
