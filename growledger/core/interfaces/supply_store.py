"""Abstract interface for supply reads."""

from abc import ABC, abstractmethod

from growledger.core.entities.supply import Supply


class ISupplyStore(ABC):
    """Read access to supplies. Quantity changes go through the ledger."""

    @abstractmethod
    async def get(self, supply_id: str) -> Supply | None:
        """Get supply by ID (including soft-deleted ones)."""
        pass

    @abstractmethod
    async def list_supplies(
        self, include_deleted: bool = False, limit: int | None = None, offset: int = 0
    ) -> list[Supply]:
        """List supplies ordered by name; all of them unless ``limit`` is given."""
        pass
