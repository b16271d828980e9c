"""
Recipe scaling service.

Turns a recipe plus batch parameters into concrete ingredient needs.
Count-family units are rounded up so a batch is never short a jar;
everything else keeps full precision.
"""

import math

from growledger.config import get_logger
from growledger.core.entities.recipe import IngredientNeed, Recipe
from growledger.core.entities.run import BatchParams
from growledger.core.exceptions import ValidationError
from growledger.core.services import units

logger = get_logger(__name__)

# Digits kept before ceiling so 3.0000000000004 jars stays 3
_CEIL_PRECISION = 9


def round_for_unit(amount: float, unit: str | None) -> float:
    """Round a scaled amount according to its unit family."""
    if not math.isfinite(amount):
        return 0.0
    value = max(0.0, amount)
    if units.is_count_unit(unit):
        return float(math.ceil(round(value, _CEIL_PRECISION)))
    return value


class RecipeScaler:
    """Computes scale factors and per-line needs for recipes."""

    def compute_scale(
        self,
        recipe: Recipe,
        batch_count: float,
        per_child_qty: float | None = None,
        per_child_unit: str | None = None,
    ) -> float:
        """
        Compute how many times the recipe's lines are applied.

        Args:
            recipe: Recipe with an optional declared yield.
            batch_count: Number of children in the batch.
            per_child_qty: Physical output per child (e.g. 500 for 500 ml).
            per_child_unit: Unit of per_child_qty; only used when it matches
                the recipe's yield unit.

        Returns:
            Positive scale factor.
        """
        if not math.isfinite(batch_count) or batch_count <= 0:
            raise ValidationError("batch_count", "must be > 0", batch_count)

        if not recipe.has_yield:
            return float(batch_count)

        if (
            per_child_qty is not None
            and per_child_qty > 0
            and per_child_unit
            and units.canonicalize(per_child_unit) == units.canonicalize(recipe.yield_unit)
        ):
            return (per_child_qty * batch_count) / recipe.yield_qty

        return batch_count / recipe.yield_qty

    def compute_needs(self, recipe: Recipe, scale: float) -> list[IngredientNeed]:
        """Scale every usable line; unusable lines are skipped silently."""
        needs: list[IngredientNeed] = []
        for line in recipe.lines:
            if not line.is_usable:
                continue
            needs.append(
                IngredientNeed(
                    supply_id=line.supply_id,  # type: ignore[arg-type]
                    amount=round_for_unit(line.amount * scale, line.unit),
                    unit=units.canonicalize(line.unit),
                )
            )
        return needs

    def needs_for_batch(self, recipe: Recipe, batch: BatchParams) -> list[IngredientNeed]:
        """Convenience wrapper: scale from a run's batch parameters."""
        scale = self.compute_scale(
            recipe,
            batch.batch_count,
            per_child_qty=batch.per_child_qty,
            per_child_unit=batch.per_child_unit,
        )
        needs = self.compute_needs(recipe, scale)
        logger.debug(
            "recipe_scaled",
            recipe_id=recipe.id,
            scale=scale,
            lines=len(needs),
        )
        return needs
