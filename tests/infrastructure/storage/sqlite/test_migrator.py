"""Tests for the schema migrator."""

from pathlib import Path

import aiosqlite
import pytest

from growledger.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    discover_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)


class TestMigrationInfo:
    def test_from_file_parses_filename(self, tmp_path: Path):
        path = tmp_path / "v002_add_things.sql"
        path.write_text("SELECT 1;")
        info = MigrationInfo.from_file(path)
        assert info.version == "002"
        assert info.name == "add_things"
        assert len(info.checksum) == 16

    def test_checksum_tracks_content(self, tmp_path: Path):
        a = tmp_path / "v001_a.sql"
        b = tmp_path / "v002_b.sql"
        a.write_text("SELECT 1;")
        b.write_text("SELECT 2;")
        assert MigrationInfo.from_file(a).checksum != MigrationInfo.from_file(b).checksum

    def test_invalid_filename_raises(self, tmp_path: Path):
        path = tmp_path / "initial.sql"
        path.write_text("")
        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(path)


def test_discover_skips_invalid_files(tmp_path: Path):
    (tmp_path / "v001_first.sql").write_text("SELECT 1;")
    (tmp_path / "v1_bad-name").write_text("")
    (tmp_path / "vxx_nope.sql").write_text("")
    versions = [m.version for m in discover_migrations(tmp_path)]
    assert versions == ["001"]


def test_bundled_migrations_are_discovered():
    migrations = discover_migrations()
    assert migrations[0].version == "001"
    assert migrations[0].name == "initial_schema"


class TestInitializeDatabase:
    async def test_applies_schema(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        results = await initialize_database(db_path, create_backup_before=False)

        assert [r.success for r in results] == [True]
        async with aiosqlite.connect(db_path) as conn:
            assert await get_current_version(conn) == "001"

    async def test_second_run_is_noop(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        await initialize_database(db_path, create_backup_before=False)
        assert await initialize_database(db_path) == []
        assert not list(tmp_path.glob("*.backup_*"))

    async def test_status(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        before = await get_migration_status(db_path)
        assert before["exists"] is False
        assert before["pending_migrations"] == ["001"]

        await initialize_database(db_path, create_backup_before=False)
        after = await get_migration_status(db_path)
        assert after["current_version"] == "001"
        assert after["pending_migrations"] == []


class TestVerifySchemaIntegrity:
    async def test_fresh_schema_passes(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        await initialize_database(db_path, create_backup_before=False)
        checks = await verify_schema_integrity(db_path)
        assert {c["check"]: c["status"] for c in checks} == {
            "integrity": "PASS",
            "required_tables": "PASS",
            "audit_triggers": "PASS",
        }

    async def test_missing_trigger_fails(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        await initialize_database(db_path, create_backup_before=False)
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("DROP TRIGGER trg_audit_records_no_delete")
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(db_path)}
        assert checks["audit_triggers"]["status"] == "FAIL"
        assert checks["audit_triggers"]["missing"] == ["trg_audit_records_no_delete"]
