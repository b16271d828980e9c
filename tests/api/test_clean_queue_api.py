"""API tests for clean queue endpoints."""

from unittest.mock import AsyncMock

from httpx import AsyncClient

from growledger.api.dependencies import get_scan_clean_backfill_use_case
from growledger.api.main import app
from growledger.application.use_cases import ScanCleanBackfillUseCase
from growledger.core.entities.run import Run
from growledger.core.services.clean_queue import BackfillReport, run_ref
from growledger.infrastructure.storage.sqlite import get_transaction_runner


async def _archived_run(client: AsyncClient, recipe_id: str, batch_count: int) -> str:
    created = await client.post(
        "/api/runs", json={"recipe_id": recipe_id, "batch": {"batch_count": batch_count}}
    )
    run_id = created.json()["run"]["id"]
    await client.post(f"/api/runs/{run_id}/archive", json={"stage": "harvested"})
    return run_id


async def test_pending_list_and_return(client: AsyncClient, grain_recipe: dict, jar: dict):
    await _archived_run(client, grain_recipe["id"], batch_count=4)

    listed = (await client.get("/api/clean-queue")).json()
    assert listed["total_pending"] == 4
    assert listed["entries"][0]["supply_id"] == jar["id"]
    assert listed["entries"][0]["name"] == "Quart jar"

    response = await client.post(
        "/api/clean-queue/return", json={"supply_id": jar["id"], "returned_qty": 3}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["pending_before"] == 4
    assert data["returned"] == 3
    assert data["destroyed"] == 1
    assert data["quantity_after"] == 23

    assert (await client.get("/api/clean-queue")).json() == {"entries": [], "total_pending": 0}

    events = (await client.get(f"/api/supplies/{jar['id']}/events", params={"limit": 2})).json()
    assert [e["action"] for e in events] == ["clean_destroyed", "clean_return"]


async def test_return_more_than_pending(client: AsyncClient, grain_recipe: dict, jar: dict):
    await _archived_run(client, grain_recipe["id"], batch_count=1)

    response = await client.post(
        "/api/clean-queue/return", json={"supply_id": jar["id"], "returned_qty": 2}
    )
    assert response.status_code == 400
    data = response.json()
    assert data["error_code"] == "RETURN_EXCEEDS_PENDING"
    assert "GET /api/clean-queue" in data["hint"]

    assert (await client.get("/api/clean-queue")).json()["total_pending"] == 1


async def test_return_unknown_supply(client: AsyncClient):
    response = await client.post(
        "/api/clean-queue/return", json={"supply_id": "nope", "returned_qty": 0}
    )
    assert response.status_code == 404


async def test_negative_return_rejected(client: AsyncClient, jar: dict):
    response = await client.post(
        "/api/clean-queue/return", json={"supply_id": jar["id"], "returned_qty": -1}
    )
    assert response.status_code == 422


async def test_backfill_without_body(client: AsyncClient, grain_recipe: dict):
    created = await client.post("/api/runs", json={"recipe_id": grain_recipe["id"]})
    run_id = created.json()["run"]["id"]

    # Finished without going through the archive endpoint
    async def _archive(tx):
        run = await tx.get_model(run_ref(run_id), Run)
        tx.set_model(run_ref(run_id), run.model_copy(update={"stage": "finished"}))

    runner = await get_transaction_runner()
    await runner.run(_archive)

    report = (await client.post("/api/clean-queue/backfill")).json()
    assert report["scanned"] == 1
    assert report["enqueued_count"] == 1
    assert report["run_ids"] == [run_id]
    assert (await client.get("/api/clean-queue")).json()["total_pending"] == 1


async def test_backfill_passes_limit(client: AsyncClient):
    report = BackfillReport(scanned=2, archived=2, skipped_already_queued=2)
    use_case = AsyncMock(spec=ScanCleanBackfillUseCase)
    use_case.execute.return_value = report
    use_case.to_response.return_value = ScanCleanBackfillUseCase().to_response(report)
    app.dependency_overrides[get_scan_clean_backfill_use_case] = lambda: use_case

    response = await client.post("/api/clean-queue/backfill", json={"limit": 2})

    assert response.status_code == 200
    assert response.json()["skipped_already_queued"] == 2
    assert use_case.execute.call_args.args[0].limit == 2
