"""Shared base for entities persisted as documents."""

from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


class DocumentModel(BaseModel):
    """Entity stored as a JSON document keyed by ``id``."""

    id: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible document body (id is the key)."""
        return self.model_dump(mode="json", exclude={"id"})

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Self:
        """Build an entity from a stored document body."""
        return cls.model_validate({**data, "id": doc_id})
