"""Clean queue entities."""

from datetime import datetime

from pydantic import Field

from growledger.core.entities.base import DocumentModel, utcnow


class CleanQueueEntry(DocumentModel):
    """Pending-return counter for one reusable supply (id is the supply id)."""

    pending: int = Field(default=0, ge=0)
    name: str = ""
    unit: str = ""
    last_run_id: str | None = None
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def supply_id(self) -> str | None:
        return self.id

    def incremented(self, delta: int, run_id: str | None = None) -> "CleanQueueEntry":
        return self.model_copy(
            update={
                "pending": self.pending + max(0, delta),
                "last_run_id": run_id or self.last_run_id,
                "updated_at": utcnow(),
            }
        )

    def decremented(self, delta: int) -> "CleanQueueEntry":
        """Decrease pending, clamping at zero."""
        return self.model_copy(
            update={
                "pending": max(0, self.pending - max(0, delta)),
                "updated_at": utcnow(),
            }
        )
