"""SQLite implementation of recipe storage."""

from uuid import uuid4

from growledger.config import get_logger
from growledger.core.entities.base import utcnow
from growledger.core.entities.recipe import Recipe
from growledger.core.interfaces.recipe_store import IRecipeStore
from growledger.core.interfaces.transaction import Collection
from growledger.infrastructure.storage.sqlite.document_collection import SQLiteDocumentCollection

logger = get_logger(__name__)


class SQLiteRecipeStore(SQLiteDocumentCollection[Recipe], IRecipeStore):
    """Recipes stored as documents."""

    collection = Collection.RECIPES
    model = Recipe

    async def save(self, recipe: Recipe) -> Recipe:
        """Create or replace a recipe."""
        if recipe.id is None:
            recipe = recipe.model_copy(update={"id": uuid4().hex})
        else:
            recipe = recipe.model_copy(update={"updated_at": utcnow()})
        await self._put(recipe.id, recipe)  # type: ignore[arg-type]
        logger.info("recipe_saved", recipe_id=recipe.id, lines=len(recipe.lines))
        return recipe

    async def get(self, recipe_id: str) -> Recipe | None:
        return await self._get(recipe_id)

    async def list_recipes(self, limit: int = 500, offset: int = 0) -> list[Recipe]:
        return await self._query(
            order_by="lower(json_extract(data, '$.name')), doc_id",
            limit=limit,
            offset=offset,
        )

    async def delete(self, recipe_id: str) -> bool:
        deleted = await self._delete(recipe_id)
        if deleted:
            logger.info("recipe_deleted", recipe_id=recipe_id)
        return deleted
