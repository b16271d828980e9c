"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from pathlib import Path

import pytest

from growledger.application.services import reset_services
from growledger.config import reset_settings
from growledger.infrastructure.storage.sqlite import connection, reset_stores


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point storage at a temp directory and drop every cached singleton."""
    data_dir = tmp_path / "data"
    monkeypatch.setenv("STORAGE_DATA_DIR", str(data_dir))
    monkeypatch.setenv("STORAGE_TRANSACTION_RETRY_DELAY", "0.001")
    monkeypatch.setattr(connection, "_pool", None)
    reset_settings()
    reset_services()
    reset_stores()
    yield data_dir
    reset_settings()
    reset_services()
    reset_stores()


@pytest.fixture
def sample_supply_data() -> dict:
    """First purchase of a substrate sold by weight."""
    return {
        "name": "Rye grain",
        "category": "substrate",
        "unit": "g",
        "quantity": 5000,
        "purchase_total": 25.0,
        "low_stock_threshold": 1000,
    }


@pytest.fixture
def sample_jar_data() -> dict:
    """First purchase of a reusable container."""
    return {
        "name": "Quart jar",
        "category": "containers",
        "unit": "jars",
        "quantity": 24,
        "unit_cost": 1.5,
    }


@pytest.fixture
async def database(isolated_settings: Path) -> AsyncGenerator[Path, None]:
    """Migrated SQLite database in the temp data dir; the global pool is closed afterwards."""
    from growledger.config import get_settings
    from growledger.infrastructure.storage.sqlite import close_pool
    from growledger.infrastructure.storage.sqlite.migrations import initialize_database

    db_path = get_settings().storage.db_path
    await initialize_database(db_path, create_backup_before=False)
    yield db_path
    await close_pool()
