"""
Transactional document store abstraction.

A transaction reads documents, buffers writes, and commits them atomically.
The runner re-executes the whole callback when a concurrent writer changed a
document the transaction read, so callbacks must not have side effects
outside the transaction.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeVar

from growledger.core.entities.base import DocumentModel

T = TypeVar("T")
M = TypeVar("M", bound=DocumentModel)


class Collection(str, Enum):
    """Logical collections inside one tenant partition."""

    SUPPLIES = "supplies"
    RECIPES = "recipes"
    RUNS = "runs"
    AUDIT_RECORDS = "audit_records"
    CLEAN_QUEUE = "clean_queue"


@dataclass(frozen=True)
class DocumentRef:
    """Address of one document."""

    collection: Collection
    doc_id: str


class ITransaction(ABC):
    """Read-modify-write access to documents within one transaction."""

    @abstractmethod
    async def get(self, ref: DocumentRef) -> dict[str, Any] | None:
        """Read a document body, seeing this transaction's own writes."""
        pass

    @abstractmethod
    def set(self, ref: DocumentRef, data: dict[str, Any]) -> None:
        """Buffer a full-document write applied at commit."""
        pass

    async def get_model(self, ref: DocumentRef, model: type[M]) -> M | None:
        """Read a document and validate it into an entity."""
        data = await self.get(ref)
        if data is None:
            return None
        return model.from_document(ref.doc_id, data)

    def set_model(self, ref: DocumentRef, entity: DocumentModel) -> None:
        """Buffer an entity write."""
        self.set(ref, entity.to_document())


class ITransactionRunner(ABC):
    """Executes callbacks inside retried, atomic transactions."""

    @abstractmethod
    async def run(
        self,
        fn: Callable[[ITransaction], Awaitable[T]],
        operation: str = "transaction",
    ) -> T:
        """Run ``fn`` in a transaction, retrying on conflicts."""
        pass
