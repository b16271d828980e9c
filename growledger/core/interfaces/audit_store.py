"""Abstract interface for audit record reads."""

from abc import ABC, abstractmethod

from growledger.core.entities.audit import AuditAction, AuditRecord


class IAuditStore(ABC):
    """Read access to the append-only audit trail.

    There is deliberately no update or delete.
    """

    @abstractmethod
    async def list_for_supply(
        self, supply_id: str, limit: int | None = None
    ) -> list[AuditRecord]:
        """Records for one supply, oldest first."""
        pass

    @abstractmethod
    async def list_records(
        self,
        action: AuditAction | None = None,
        limit: int = 1000,
        offset: int = 0,
    ) -> list[AuditRecord]:
        """All records, oldest first, optionally filtered by action."""
        pass
