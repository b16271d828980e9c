"""Recipe endpoints."""

from fastapi import APIRouter, Depends, status

from growledger.api.dependencies import get_recipes, get_scaler
from growledger.application.dto.requests import BatchParamsRequest, SaveRecipeRequest
from growledger.application.dto.responses import (
    ErrorResponse,
    IngredientNeedResponse,
    NeedsPreviewResponse,
    RecipeResponse,
)
from growledger.core.entities.recipe import Recipe, RecipeLine
from growledger.core.exceptions import RecipeNotFoundError
from growledger.core.services import RecipeScaler
from growledger.core.services.units import canonicalize
from growledger.infrastructure.storage.sqlite import SQLiteRecipeStore

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


def _lines(request: SaveRecipeRequest) -> list[RecipeLine]:
    return [
        RecipeLine(
            supply_id=line.supply_id,
            amount=line.amount,
            unit=canonicalize(line.unit),
            per_child=line.per_child,
        )
        for line in request.lines
    ]


async def _require(store: SQLiteRecipeStore, recipe_id: str) -> Recipe:
    recipe = await store.get(recipe_id)
    if recipe is None:
        raise RecipeNotFoundError(recipe_id)
    return recipe


@router.post("", response_model=RecipeResponse, status_code=status.HTTP_201_CREATED)
async def create_recipe(
    request: SaveRecipeRequest,
    store: SQLiteRecipeStore = Depends(get_recipes),
) -> RecipeResponse:
    """Create a recipe."""
    recipe = await store.save(
        Recipe(
            name=request.name,
            lines=_lines(request),
            yield_qty=request.yield_qty,
            yield_unit=canonicalize(request.yield_unit),
            notes=request.notes,
        )
    )
    return RecipeResponse.from_entity(recipe)


@router.get("", response_model=list[RecipeResponse])
async def list_recipes(
    limit: int = 500,
    offset: int = 0,
    store: SQLiteRecipeStore = Depends(get_recipes),
) -> list[RecipeResponse]:
    recipes = await store.list_recipes(limit=limit, offset=offset)
    return [RecipeResponse.from_entity(r) for r in recipes]


@router.get(
    "/{recipe_id}",
    response_model=RecipeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_recipe(
    recipe_id: str,
    store: SQLiteRecipeStore = Depends(get_recipes),
) -> RecipeResponse:
    return RecipeResponse.from_entity(await _require(store, recipe_id))


@router.put(
    "/{recipe_id}",
    response_model=RecipeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_recipe(
    recipe_id: str,
    request: SaveRecipeRequest,
    store: SQLiteRecipeStore = Depends(get_recipes),
) -> RecipeResponse:
    """Replace a recipe. Past consumption records are not affected."""
    existing = await _require(store, recipe_id)
    recipe = await store.save(
        existing.model_copy(
            update={
                "name": request.name,
                "lines": _lines(request),
                "yield_qty": request.yield_qty,
                "yield_unit": canonicalize(request.yield_unit),
                "notes": request.notes,
            }
        )
    )
    return RecipeResponse.from_entity(recipe)


@router.post(
    "/{recipe_id}/clone",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def clone_recipe(
    recipe_id: str,
    store: SQLiteRecipeStore = Depends(get_recipes),
) -> RecipeResponse:
    """Copy a recipe under a new id with a "(copy)" suffix."""
    original = await _require(store, recipe_id)
    return RecipeResponse.from_entity(await store.save(original.clone()))


@router.delete(
    "/{recipe_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_recipe(
    recipe_id: str,
    store: SQLiteRecipeStore = Depends(get_recipes),
) -> None:
    if not await store.delete(recipe_id):
        raise RecipeNotFoundError(recipe_id)


@router.post(
    "/{recipe_id}/needs",
    response_model=NeedsPreviewResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def preview_needs(
    recipe_id: str,
    request: BatchParamsRequest,
    store: SQLiteRecipeStore = Depends(get_recipes),
    scaler: RecipeScaler = Depends(get_scaler),
) -> NeedsPreviewResponse:
    """Scaled ingredient needs for a batch, without touching stock."""
    recipe = await _require(store, recipe_id)
    scale = scaler.compute_scale(
        recipe,
        request.batch_count,
        per_child_qty=request.per_child_qty,
        per_child_unit=request.per_child_unit,
    )
    return NeedsPreviewResponse(
        recipe_id=recipe_id,
        scale=scale,
        needs=[
            IngredientNeedResponse.from_entity(n)
            for n in scaler.compute_needs(recipe, scale)
        ],
    )
