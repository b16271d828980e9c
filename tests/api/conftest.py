"""Fixtures for API tests."""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from growledger.api.main import app


@pytest.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    """Async client against the app backed by a migrated temp database."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def grain(client: AsyncClient, sample_supply_data: dict) -> dict:
    response = await client.post("/api/supplies", json=sample_supply_data)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def jar(client: AsyncClient, sample_jar_data: dict) -> dict:
    response = await client.post("/api/supplies", json=sample_jar_data)
    assert response.status_code == 201
    return response.json()


@pytest.fixture
async def grain_recipe(client: AsyncClient, grain: dict, jar: dict) -> dict:
    response = await client.post(
        "/api/recipes",
        json={
            "name": "Standard grain",
            "lines": [
                {"supply_id": grain["id"], "amount": 600, "unit": "grams"},
                {"supply_id": jar["id"], "amount": 1, "unit": "jar", "per_child": 1},
            ],
        },
    )
    assert response.status_code == 201
    return response.json()
