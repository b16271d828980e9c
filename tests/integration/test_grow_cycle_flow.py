"""End-to-end run lifecycle against a real SQLite database."""

import asyncio

import pytest

from growledger.application.dto.requests import (
    ArchiveRunRequest,
    BackfillRequest,
    BatchParamsRequest,
    ChangeRunRecipeRequest,
    CleanReturnRequest,
    CreateRunRequest,
)
from growledger.application.services import (
    get_audit_trail,
    get_clean_queue_service,
    get_supply_ledger,
)
from growledger.application.use_cases import (
    ArchiveRunUseCase,
    ChangeRunRecipeUseCase,
    CreateRunUseCase,
    ReturnCleanedItemsUseCase,
    ScanCleanBackfillUseCase,
)
from growledger.core.entities.audit import AuditAction
from growledger.core.entities.recipe import Recipe, RecipeLine
from growledger.core.entities.run import CleanGate, Run
from growledger.infrastructure.storage.sqlite import get_recipe_store, get_run_store


@pytest.fixture
async def ledger(database):
    return await get_supply_ledger()


@pytest.fixture
async def stocked(ledger):
    """Grain at 0.01 per gram and a dozen reusable jars."""
    grain = await ledger.add_supply(
        name="Rye grain", category="substrate", unit="g", quantity=1000, purchase_total=10.0
    )
    jar = await ledger.add_supply(
        name="Quart jar", category="containers", unit="jars", quantity=12, unit_cost=1.5
    )
    recipes = await get_recipe_store()
    recipe = await recipes.save(
        Recipe(
            name="Standard grain",
            lines=[
                RecipeLine(supply_id=grain.id, amount=600, unit="g"),
                RecipeLine(supply_id=jar.id, amount=1, unit="count", per_child=1),
            ],
        )
    )
    return {"grain": grain.id, "jar": jar.id, "recipe": recipe.id}


class TestConsumptionCost:
    async def test_run_creation_consumes_at_locked_cost(self, ledger, stocked):
        result = await CreateRunUseCase().execute(
            CreateRunRequest(name="Batch 1", recipe_id=stocked["recipe"])
        )

        grain = await ledger.get_supply(stocked["grain"])
        assert grain.quantity == pytest.approx(400)

        audit = await get_audit_trail()
        consume = [r for r in await audit.history(stocked["grain"]) if r.action is AuditAction.CONSUME]
        assert len(consume) == 1
        assert consume[0].amount == pytest.approx(600)
        assert consume[0].unit_cost_applied == pytest.approx(0.01)
        assert consume[0].total_cost_applied == pytest.approx(6.0)
        assert consume[0].run_id == result.run.id
        assert consume[0].recipe_name == "Standard grain"
        assert consume[0].balance_after == pytest.approx(400)

    async def test_reprice_does_not_touch_past_records(self, ledger, stocked):
        await CreateRunUseCase().execute(CreateRunRequest(recipe_id=stocked["recipe"]))
        await ledger.reprice(stocked["grain"], total_price=50.0, purchased_quantity=1000)

        audit = await get_audit_trail()
        records = await audit.history(stocked["grain"])
        consume = next(r for r in records if r.action is AuditAction.CONSUME)
        assert consume.unit_cost_applied == pytest.approx(0.01)
        assert (await ledger.get_supply(stocked["grain"])).unit_cost == pytest.approx(0.05)

    async def test_over_consumption_clamps_at_zero(self, ledger, stocked):
        await CreateRunUseCase().execute(
            CreateRunRequest(recipe_id=stocked["recipe"], batch=BatchParamsRequest(batch_count=2))
        )
        grain = await ledger.get_supply(stocked["grain"])
        assert grain.quantity == 0
        assert (await ledger.verify_supply(stocked["grain"])).consistent


class TestReconciliation:
    async def test_switching_recipe_and_back_restores_stock(self, ledger, stocked):
        recipes = await get_recipe_store()
        other = await recipes.save(
            Recipe(
                name="Light grain",
                lines=[RecipeLine(supply_id=stocked["grain"], amount=0.25, unit="kg")],
            )
        )
        created = await CreateRunUseCase().execute(CreateRunRequest(recipe_id=stocked["recipe"]))
        run_id = created.run.id
        use_case = ChangeRunRecipeUseCase()

        await use_case.execute(run_id, ChangeRunRecipeRequest(recipe_id=other.id))
        grain = await ledger.get_supply(stocked["grain"])
        jar = await ledger.get_supply(stocked["jar"])
        assert grain.quantity == pytest.approx(750)
        assert jar.quantity == 12

        await use_case.execute(run_id, ChangeRunRecipeRequest(recipe_id=stocked["recipe"]))
        assert (await ledger.get_supply(stocked["grain"])).quantity == pytest.approx(400)
        assert (await ledger.get_supply(stocked["jar"])).quantity == 11

        for supply_id in (stocked["grain"], stocked["jar"]):
            assert (await ledger.verify_supply(supply_id)).consistent

    async def test_unchanged_assignment_is_noop(self, ledger, stocked):
        created = await CreateRunUseCase().execute(CreateRunRequest(recipe_id=stocked["recipe"]))
        result = await ChangeRunRecipeUseCase().execute(
            created.run.id, ChangeRunRecipeRequest(recipe_id=stocked["recipe"])
        )
        assert result.reconcile.refunded == []
        assert result.reconcile.consumed == []
        assert (await ledger.get_supply(stocked["grain"])).quantity == pytest.approx(400)


class TestCleanQueueFlow:
    async def test_archive_enqueue_and_return(self, ledger, stocked):
        created = await CreateRunUseCase().execute(
            CreateRunRequest(recipe_id=stocked["recipe"], batch=BatchParamsRequest(batch_count=4))
        )
        runs = await get_run_store()
        run_id = created.run.id
        assert (await ledger.get_supply(stocked["jar"])).quantity == 8

        archived = await ArchiveRunUseCase().execute(run_id, ArchiveRunRequest(stage="harvested"))
        assert archived.enqueue.enqueued == 4
        assert archived.run.clean_gate is CleanGate.ENQUEUED
        assert (await runs.get(run_id)).is_archived

        again = await ArchiveRunUseCase().execute(run_id, ArchiveRunRequest())
        assert again.enqueue.enqueued == 0
        assert again.enqueue.reason == "already_queued"

        clean_queue = await get_clean_queue_service()
        assert (await clean_queue.get_entry(stocked["jar"])).pending == 4

        returned = await ReturnCleanedItemsUseCase().execute(
            CleanReturnRequest(supply_id=stocked["jar"], returned_qty=3)
        )
        assert returned.destroyed == 1
        assert (await ledger.get_supply(stocked["jar"])).quantity == 11
        assert (await clean_queue.get_entry(stocked["jar"])).pending == 0
        assert await clean_queue.list_pending() == []

        audit = await get_audit_trail()
        actions = [r.action for r in await audit.history(stocked["jar"])]
        assert actions[-2:] == [AuditAction.CLEAN_RETURN, AuditAction.CLEAN_DESTROYED]
        assert (await ledger.verify_supply(stocked["jar"])).consistent

    async def test_concurrent_enqueue_counts_once(self, stocked):
        runs = await get_run_store()
        run = await runs.create(
            Run(recipe_id=stocked["recipe"], archived=True, stage="harvested")
        )
        clean_queue = await get_clean_queue_service()

        results = await asyncio.gather(
            clean_queue.enqueue_for_run(run.id),
            clean_queue.enqueue_for_run(run.id),
            clean_queue.enqueue_for_run(run.id),
        )

        assert sum(r.enqueued for r in results) == 1
        assert (await clean_queue.get_entry(stocked["jar"])).pending == 1

    async def test_backfill_picks_up_missed_runs(self, stocked):
        runs = await get_run_store()
        missed = await runs.create(Run(recipe_id=stocked["recipe"], stage="contaminated"))
        await runs.create(Run(recipe_id=stocked["recipe"], stage="colonizing"))
        await runs.create(Run(stage="harvested"))

        report = await ScanCleanBackfillUseCase().execute(BackfillRequest())
        assert report.scanned == 3
        assert report.not_archived == 1
        assert report.no_recipe == 1
        assert report.enqueued_count == 1
        assert report.run_ids == [missed.id]

        second = await ScanCleanBackfillUseCase().execute(BackfillRequest())
        assert second.enqueued_count == 0
        assert second.skipped_already_queued == 1

        clean_queue = await get_clean_queue_service()
        assert (await clean_queue.get_entry(stocked["jar"])).pending == 1

    async def test_reset_gate_allows_second_enqueue(self, stocked):
        runs = await get_run_store()
        run = await runs.create(Run(recipe_id=stocked["recipe"], archived=True))
        clean_queue = await get_clean_queue_service()

        await clean_queue.enqueue_for_run(run.id)
        reset = await clean_queue.reset_clean_gate(run.id)
        assert reset.clean_gate is CleanGate.RESET

        result = await clean_queue.enqueue_for_run(run.id)
        assert result.enqueued == 1
        assert (await clean_queue.get_entry(stocked["jar"])).pending == 2
