"""Abstract interface for clean queue reads."""

from abc import ABC, abstractmethod

from growledger.core.entities.clean_queue import CleanQueueEntry


class ICleanQueueStore(ABC):
    """Read access to per-supply pending counters."""

    @abstractmethod
    async def get(self, supply_id: str) -> CleanQueueEntry | None:
        """Get the entry for a supply."""
        pass

    @abstractmethod
    async def list_entries(self, pending_only: bool = True) -> list[CleanQueueEntry]:
        """List entries ordered by name."""
        pass
