"""API tests for audit trail endpoints."""

from httpx import AsyncClient


async def test_full_trail_oldest_first(client: AsyncClient, grain: dict, jar: dict):
    await client.post(f"/api/supplies/{grain['id']}/restock", json={"amount": 100})

    data = (await client.get("/api/audit")).json()
    assert data["total"] == 3
    assert [r["action"] for r in data["records"]] == ["add", "add", "restock"]
    assert data["records"][0]["note"] == "initial purchase"


async def test_filter_and_paging(client: AsyncClient, grain: dict):
    await client.post(
        f"/api/supplies/{grain['id']}/reprice",
        json={"total_price": 50, "purchased_quantity": 5000},
    )
    await client.patch(f"/api/supplies/{grain['id']}", json={"quantity": 4000})

    edits = (await client.get("/api/audit", params={"action": "edit"})).json()
    assert edits["total"] == 2
    reprice, recount = edits["records"]
    assert reprice["amount"] == 0
    assert reprice["note"] == "reprice from 0.005"
    assert recount["amount"] == -1000
    assert recount["balance_after"] == 4000

    page = (await client.get("/api/audit", params={"limit": 1, "offset": 1})).json()
    assert page["total"] == 1
    assert page["records"][0]["id"] == reprice["id"]


async def test_unknown_action_rejected(client: AsyncClient):
    response = await client.get("/api/audit", params={"action": "teleport"})
    assert response.status_code == 422
