"""Tests for ArchiveRunUseCase."""

import pytest

from growledger.application.dto.requests import ArchiveRunRequest
from growledger.application.use_cases.archive_run import ArchiveRunUseCase
from growledger.core.entities.clean_queue import CleanQueueEntry
from growledger.core.entities.recipe import Recipe, RecipeLine
from growledger.core.entities.run import BatchParams, CleanGate, Run
from growledger.core.entities.supply import Supply
from growledger.core.exceptions import RunNotFoundError
from growledger.core.interfaces import Collection


@pytest.fixture
def use_case(runner, run_store, clean_queue):
    return ArchiveRunUseCase(runner=runner, run_store=run_store, clean_queue=clean_queue)


@pytest.fixture
def seeded(runner):
    runner.put(
        Collection.SUPPLIES,
        Supply(id="jar", name="Jar", category="container", unit="count", quantity=5),
    )
    runner.put(
        Collection.RECIPES,
        Recipe(id="spawn", name="Spawn", lines=[RecipeLine(supply_id="jar", amount=1, unit="count")]),
    )
    runner.put(
        Collection.RUNS,
        Run(id="r1", recipe_id="spawn", stage="colonizing", batch=BatchParams(batch_count=4)),
    )
    return runner


class TestArchiveRunUseCase:
    async def test_archive_enqueues(self, use_case, seeded):
        result = await use_case.execute("r1", ArchiveRunRequest(stage="harvested"))

        assert result.run.archived
        assert result.run.archived_at is not None
        assert result.run.stage == "harvested"
        assert result.run.clean_gate is CleanGate.ENQUEUED
        assert result.enqueue.enqueued == 4

        entry = seeded.load(Collection.CLEAN_QUEUE, "jar", CleanQueueEntry)
        assert entry.pending == 4

    async def test_archive_twice_counts_once(self, use_case, seeded):
        await use_case.execute("r1", ArchiveRunRequest())
        again = await use_case.execute("r1", ArchiveRunRequest(stage="contaminated"))

        assert again.enqueue.enqueued == 0
        assert again.enqueue.reason == "already_queued"
        # Already archived runs keep their original stage
        assert again.run.stage == "archived"
        assert seeded.load(Collection.CLEAN_QUEUE, "jar", CleanQueueEntry).pending == 4

    async def test_missing_run(self, use_case):
        with pytest.raises(RunNotFoundError):
            await use_case.execute("ghost", ArchiveRunRequest())

    async def test_to_response(self, use_case, seeded):
        result = await use_case.execute("r1", ArchiveRunRequest())
        response = use_case.to_response(result)

        assert response.enqueued == 4
        assert response.stamped
        assert response.run.clean_gate == "enqueued"
        assert response.run.archived
