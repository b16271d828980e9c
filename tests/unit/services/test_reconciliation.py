"""Tests for ReconciliationEngine."""

import math

import pytest

from growledger.core.entities.audit import AuditAction, AuditRecord
from growledger.core.entities.recipe import Recipe, RecipeLine
from growledger.core.entities.run import BatchParams
from growledger.core.entities.supply import Supply
from growledger.core.interfaces import Collection
from growledger.core.services.reconciliation import RecipeAssignment


@pytest.fixture
def seeded(runner):
    runner.put(
        Collection.SUPPLIES,
        Supply(id="grain", name="Grain", unit="g", quantity=1000, unit_cost=0.01),
    )
    runner.put(
        Collection.SUPPLIES,
        Supply(id="gypsum", name="Gypsum", unit="g", quantity=500, unit_cost=0.002),
    )
    runner.put(
        Collection.SUPPLIES,
        Supply(id="jar", name="Jar", category="container", unit="count", quantity=20),
    )
    runner.put(
        Collection.RECIPES,
        Recipe(
            id="A",
            name="Standard Grain",
            yield_qty=1,
            yield_unit="jar",
            lines=[
                RecipeLine(supply_id="grain", amount=200, unit="g"),
                RecipeLine(supply_id="jar", amount=1, unit="count"),
            ],
        ),
    )
    runner.put(
        Collection.RECIPES,
        Recipe(
            id="B",
            name="Supplemented Grain",
            lines=[
                RecipeLine(supply_id="grain", amount=0.15, unit="kg"),
                RecipeLine(supply_id="gypsum", amount=10, unit="g"),
            ],
        ),
    )
    return runner


def _quantities(runner) -> dict[str, float]:
    return {
        s.id: s.quantity for s in runner.all(Collection.SUPPLIES, Supply)
    }


def _assignment(recipe_id: str, batch_count: int = 3) -> RecipeAssignment:
    return RecipeAssignment(recipe_id=recipe_id, batch=BatchParams(batch_count=batch_count))


class TestConsumeForRun:
    async def test_basic_consume(self, reconciliation, seeded):
        applied = await reconciliation.consume_for_run("run-1", _assignment("A"), note="run created")

        assert [(n.supply_id, n.amount) for n in applied] == [("grain", 600), ("jar", 3)]
        quantities = _quantities(seeded)
        assert quantities["grain"] == 400
        assert quantities["jar"] == 17

        consume = next(
            r
            for r in seeded.all(Collection.AUDIT_RECORDS, AuditRecord)
            if r.supply_id == "grain"
        )
        assert consume.action is AuditAction.CONSUME
        assert consume.amount == 600
        assert consume.unit_cost_applied == 0.01
        assert math.isclose(consume.total_cost_applied, 6.0)
        assert consume.recipe_name == "Standard Grain"
        assert consume.run_id == "run-1"
        assert consume.note == "run created"

    async def test_missing_recipe_consumes_nothing(self, reconciliation, seeded):
        assert await reconciliation.consume_for_run("run-1", _assignment("nope")) == []
        assert _quantities(seeded)["grain"] == 1000

    async def test_missing_supply_line_is_skipped(self, reconciliation, seeded):
        seeded.put(
            Collection.RECIPES,
            Recipe(
                id="C",
                name="Partial",
                lines=[
                    RecipeLine(supply_id="ghost", amount=5, unit="g"),
                    RecipeLine(supply_id="grain", amount=10, unit="g"),
                ],
            ),
        )
        applied = await reconciliation.consume_for_run("run-1", _assignment("C", 1))
        assert [n.supply_id for n in applied] == ["grain"]
        assert _quantities(seeded)["grain"] == 990


class TestReconcile:
    async def test_a_to_b_and_back_restores_quantities(self, reconciliation, seeded):
        await reconciliation.consume_for_run("run-1", _assignment("A"))
        after_a = _quantities(seeded)

        await reconciliation.reconcile("run-1", _assignment("A"), _assignment("B"))
        after_b = _quantities(seeded)
        # B uses 0.15 kg grain per batch, converted into grams
        assert math.isclose(after_b["grain"], 1000 - 450)
        assert after_b["gypsum"] == 470
        assert after_b["jar"] == 20

        await reconciliation.reconcile("run-1", _assignment("B"), _assignment("A"))
        for supply_id, quantity in _quantities(seeded).items():
            assert math.isclose(quantity, after_a[supply_id])

    async def test_batch_change_only(self, reconciliation, seeded):
        await reconciliation.consume_for_run("run-1", _assignment("A", 3))
        result = await reconciliation.reconcile("run-1", _assignment("A", 3), _assignment("A", 5))

        assert [n.amount for n in result.refunded] == [600, 3]
        assert [n.amount for n in result.consumed] == [1000, 5]
        assert _quantities(seeded)["grain"] == 0

    async def test_clear_recipe_only_refunds(self, reconciliation, seeded):
        await reconciliation.consume_for_run("run-1", _assignment("A"))
        result = await reconciliation.reconcile("run-1", _assignment("A"), None)

        assert result.consumed == []
        assert _quantities(seeded)["grain"] == 1000

    async def test_refund_audits(self, reconciliation, seeded):
        await reconciliation.consume_for_run("run-1", _assignment("A"))
        await reconciliation.reconcile("run-1", _assignment("A"), None, note="recipe cleared")

        refunds = [
            r
            for r in seeded.all(Collection.AUDIT_RECORDS, AuditRecord)
            if r.action is AuditAction.RECONCILE_REFUND
        ]
        assert {r.supply_id for r in refunds} == {"grain", "jar"}
        assert all(r.note == "recipe cleared" for r in refunds)
