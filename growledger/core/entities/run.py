"""Cultivation run entities (only the fields the ledger cares about)."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from growledger.core.entities.base import DocumentModel, utcnow

# Stage/status values the archive screen treats as finished
ARCHIVED_STAGES = frozenset(
    {"archived", "contaminated", "consumed", "harvested", "finished"}
)


class CleanGate(str, Enum):
    """One-shot marker preventing a run's reusables from being enqueued twice.

    ENQUEUED never goes back to UNGATED; an operator override moves it to
    RESET, which makes the run eligible again.
    """

    UNGATED = "ungated"
    ENQUEUED = "enqueued"
    RESET = "reset"


class BatchParams(BaseModel):
    """Batch size of a run: a count and optionally a per-child quantity."""

    batch_count: int = Field(default=1, ge=1)
    per_child_qty: float | None = None
    per_child_unit: str | None = None


class Run(DocumentModel):
    """A single cultivation attempt."""

    name: str = ""
    recipe_id: str | None = None
    batch: BatchParams = Field(default_factory=BatchParams)
    stage: str | None = None
    status: str | None = None
    archived: bool = False
    archived_at: datetime | None = None
    clean_gate: CleanGate = CleanGate.UNGATED
    clean_queued_at: datetime | None = None
    # False for runs whose recipe was never debited; recipe changes skip the ledger
    tracks_supplies: bool = True
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_archived(self) -> bool:
        """Archived flag, archive stamp, or a finished-looking stage/status."""
        if self.archived or self.archived_at is not None:
            return True
        stage = (self.stage or "").strip().lower()
        status = (self.status or "").strip().lower()
        return stage in ARCHIVED_STAGES or status in ARCHIVED_STAGES

    @property
    def clean_queued(self) -> bool:
        return self.clean_gate is CleanGate.ENQUEUED
