"""Abstract interface for run storage."""

from abc import ABC, abstractmethod

from growledger.core.entities.run import Run


class IRunStore(ABC):
    """Interface for cultivation run persistence.

    Only creation happens here; archive, recipe swaps and the clean gate are
    changed inside transactions.
    """

    @abstractmethod
    async def create(self, run: Run) -> Run:
        """Insert a new run; assigns an ID when missing."""
        pass

    @abstractmethod
    async def get(self, run_id: str) -> Run | None:
        """Get run by ID."""
        pass

    @abstractmethod
    async def list_runs(self, limit: int = 2000, offset: int = 0) -> list[Run]:
        """List runs in creation order."""
        pass
