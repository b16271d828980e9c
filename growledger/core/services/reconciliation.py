"""
Reconciliation of recipe consumption when a run's recipe or batch changes.

The refund half and the consume half are independent: each line is its own
ledger transaction, and a failure part-way leaves the audit trail showing
exactly which lines were applied.
"""

from dataclasses import dataclass, field

from growledger.config import get_logger
from growledger.core.entities.recipe import IngredientNeed
from growledger.core.entities.run import BatchParams
from growledger.core.interfaces.recipe_store import IRecipeStore
from growledger.core.services.recipe_scaler import RecipeScaler
from growledger.core.services.supply_ledger import LedgerContext, SupplyLedger

logger = get_logger(__name__)


@dataclass
class RecipeAssignment:
    """A recipe reference with the batch it was (or will be) applied to."""

    recipe_id: str
    batch: BatchParams = field(default_factory=BatchParams)


@dataclass
class ReconcileResult:
    """Lines applied by each half of a reconciliation."""

    run_id: str
    refunded: list[IngredientNeed] = field(default_factory=list)
    consumed: list[IngredientNeed] = field(default_factory=list)


class ReconciliationEngine:
    """Refund-then-consume compensation for edited runs."""

    def __init__(
        self,
        ledger: SupplyLedger,
        recipe_store: IRecipeStore,
        scaler: RecipeScaler | None = None,
    ) -> None:
        self._ledger = ledger
        self._recipe_store = recipe_store
        self._scaler = scaler or RecipeScaler()

    async def _needs(
        self, assignment: RecipeAssignment
    ) -> tuple[str | None, list[IngredientNeed]]:
        recipe = await self._recipe_store.get(assignment.recipe_id)
        if recipe is None:
            logger.warning("reconcile_recipe_missing", recipe_id=assignment.recipe_id)
            return None, []
        return recipe.name, self._scaler.needs_for_batch(recipe, assignment.batch)

    async def consume_for_run(
        self,
        run_id: str,
        assignment: RecipeAssignment,
        note: str = "",
    ) -> list[IngredientNeed]:
        """Consume every line of a recipe for a run; returns the lines applied."""
        recipe_name, needs = await self._needs(assignment)
        context = LedgerContext(
            recipe_id=assignment.recipe_id,
            recipe_name=recipe_name,
            run_id=run_id,
            note=note,
        )
        applied: list[IngredientNeed] = []
        for need in needs:
            updated = await self._ledger.consume(
                need.supply_id, need.amount, unit=need.unit, context=context
            )
            if updated is not None:
                applied.append(need)
        return applied

    async def refund_for_run(
        self,
        run_id: str,
        assignment: RecipeAssignment,
        note: str = "",
    ) -> list[IngredientNeed]:
        """Refund every line of a recipe previously consumed for a run."""
        recipe_name, needs = await self._needs(assignment)
        context = LedgerContext(
            recipe_id=assignment.recipe_id,
            recipe_name=recipe_name,
            run_id=run_id,
            note=note,
        )
        applied: list[IngredientNeed] = []
        for need in needs:
            updated = await self._ledger.refund(
                need.supply_id, need.amount, unit=need.unit, context=context
            )
            if updated is not None:
                applied.append(need)
        return applied

    async def reconcile(
        self,
        run_id: str,
        old: RecipeAssignment | None,
        new: RecipeAssignment | None,
        note: str = "retype reconcile",
    ) -> ReconcileResult:
        """
        Refund the old assignment's needs, then consume the new one's.

        Either side may be absent: clearing a recipe only refunds, assigning
        one for the first time only consumes.
        """
        result = ReconcileResult(run_id=run_id)
        if old is not None:
            result.refunded = await self.refund_for_run(run_id, old, note=note)
        if new is not None:
            result.consumed = await self.consume_for_run(run_id, new, note=note)

        logger.info(
            "run_reconciled",
            run_id=run_id,
            old_recipe_id=old.recipe_id if old else None,
            new_recipe_id=new.recipe_id if new else None,
            refunded_lines=len(result.refunded),
            consumed_lines=len(result.consumed),
        )
        return result
