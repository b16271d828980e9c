"""Abstract interface for recipe storage."""

from abc import ABC, abstractmethod

from growledger.core.entities.recipe import Recipe


class IRecipeStore(ABC):
    """Interface for recipe persistence."""

    @abstractmethod
    async def save(self, recipe: Recipe) -> Recipe:
        """Create or replace a recipe; assigns an ID when missing."""
        pass

    @abstractmethod
    async def get(self, recipe_id: str) -> Recipe | None:
        """Get recipe by ID."""
        pass

    @abstractmethod
    async def list_recipes(self, limit: int = 500, offset: int = 0) -> list[Recipe]:
        """List recipes ordered by name."""
        pass

    @abstractmethod
    async def delete(self, recipe_id: str) -> bool:
        """Delete a recipe. Historical audit records keep their recipe name."""
        pass
