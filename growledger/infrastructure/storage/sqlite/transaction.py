"""
Optimistic document transactions on SQLite.

Reads record the version they saw; writes are buffered and flushed at commit
with a version check per document. A stale version, a lost insert race, or
SQLite reporting the database busy/locked all surface as
TransactionConflictError, and the runner re-executes the callback.
"""

import copy
import json
import sqlite3
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiosqlite
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from growledger.config import get_logger, get_settings
from growledger.core.entities.base import utcnow
from growledger.core.exceptions import DatabaseError, TransactionConflictError
from growledger.core.interfaces.transaction import (
    DocumentRef,
    ITransaction,
    ITransactionRunner,
)
from growledger.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING = -1


def _is_busy(error: sqlite3.OperationalError) -> bool:
    message = str(error).lower()
    return "locked" in message or "busy" in message


class SQLiteTransaction(ITransaction):
    """One attempt of a document transaction on a pooled connection."""

    def __init__(self, conn: aiosqlite.Connection, tenant_id: str, operation: str):
        self._conn = conn
        self._tenant_id = tenant_id
        self._operation = operation
        # ref -> version seen at first read (_MISSING when absent)
        self._versions: dict[DocumentRef, int] = {}
        self._snapshots: dict[DocumentRef, dict[str, Any] | None] = {}
        self._writes: dict[DocumentRef, dict[str, Any]] = {}

    async def get(self, ref: DocumentRef) -> dict[str, Any] | None:
        if ref in self._writes:
            return copy.deepcopy(self._writes[ref])
        if ref not in self._snapshots:
            cursor = await self._conn.execute(
                """
                SELECT data, version FROM documents
                WHERE tenant_id = ? AND collection = ? AND doc_id = ?
                """,
                (self._tenant_id, ref.collection.value, ref.doc_id),
            )
            row = await cursor.fetchone()
            if row is None:
                self._versions[ref] = _MISSING
                self._snapshots[ref] = None
            else:
                self._versions[ref] = row["version"]
                self._snapshots[ref] = json.loads(row["data"])
        snapshot = self._snapshots[ref]
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def set(self, ref: DocumentRef, data: dict[str, Any]) -> None:
        self._writes[ref] = copy.deepcopy(data)

    @property
    def write_count(self) -> int:
        return len(self._writes)

    def _conflict(self, ref: DocumentRef, reason: str) -> TransactionConflictError:
        return TransactionConflictError(
            self._operation, f"{ref.collection.value}/{ref.doc_id} {reason}"
        )

    async def flush(self) -> None:
        """Apply buffered writes, checking the versions this attempt read."""
        now = utcnow().isoformat()
        for ref, data in self._writes.items():
            payload = json.dumps(data)
            key = (self._tenant_id, ref.collection.value, ref.doc_id)
            expected = self._versions.get(ref)

            if expected is None:
                # Blind write: create or overwrite
                await self._conn.execute(
                    """
                    INSERT INTO documents
                        (tenant_id, collection, doc_id, data, version, created_at, updated_at)
                    VALUES (?, ?, ?, ?, 1, ?, ?)
                    ON CONFLICT (tenant_id, collection, doc_id) DO UPDATE SET
                        data = excluded.data,
                        version = documents.version + 1,
                        updated_at = excluded.updated_at
                    """,
                    (*key, payload, now, now),
                )
            elif expected == _MISSING:
                try:
                    await self._conn.execute(
                        """
                        INSERT INTO documents
                            (tenant_id, collection, doc_id, data, version, created_at, updated_at)
                        VALUES (?, ?, ?, ?, 1, ?, ?)
                        """,
                        (*key, payload, now, now),
                    )
                except sqlite3.IntegrityError as e:
                    raise self._conflict(ref, "was created concurrently") from e
            else:
                cursor = await self._conn.execute(
                    """
                    UPDATE documents
                    SET data = ?, version = version + 1, updated_at = ?
                    WHERE tenant_id = ? AND collection = ? AND doc_id = ? AND version = ?
                    """,
                    (payload, now, *key, expected),
                )
                if cursor.rowcount != 1:
                    raise self._conflict(ref, f"changed since version {expected}")


class SQLiteTransactionRunner(ITransactionRunner):
    """Runs callbacks in SQLite transactions with retry on conflict."""

    def __init__(
        self,
        pool: ConnectionPool | None = None,
        tenant_id: str | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
    ):
        settings = get_settings()
        self._pool = pool
        self._tenant_id = tenant_id or settings.tenant_id
        self._max_attempts = max_attempts or settings.storage.transaction_max_attempts
        self._retry_delay = (
            retry_delay if retry_delay is not None else settings.storage.transaction_retry_delay
        )

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        return self._pool

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        """Log retry attempts."""
        logger.warning(
            "transaction_retry",
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    async def _attempt(
        self, fn: Callable[[ITransaction], Awaitable[T]], operation: str
    ) -> T:
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                tx = SQLiteTransaction(conn, self._tenant_id, operation)
                result = await fn(tx)
                await tx.flush()
        except sqlite3.OperationalError as e:
            if _is_busy(e):
                raise TransactionConflictError(operation, str(e)) from e
            raise DatabaseError(operation, str(e)) from e
        except sqlite3.Error as e:
            raise DatabaseError(operation, str(e)) from e

        logger.debug("transaction_committed", operation=operation, writes=tx.write_count)
        return result

    async def run(
        self,
        fn: Callable[[ITransaction], Awaitable[T]],
        operation: str = "transaction",
    ) -> T:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                max=max(self._retry_delay * 8, self._retry_delay),
            ),
            retry=retry_if_exception_type(TransactionConflictError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._attempt(fn, operation)
        except TransactionConflictError as e:
            logger.error("transaction_conflict_exhausted", operation=operation, error=e.message)
            e.details["attempts"] = self._max_attempts
            raise
        raise DatabaseError(operation, "transaction did not run")  # pragma: no cover
