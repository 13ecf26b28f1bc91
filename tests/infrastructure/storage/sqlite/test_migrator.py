"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from stockmaster.infrastructure.storage.sqlite.migrations.migrator import (
    REQUIRED_TABLES,
    MigrationInfo,
    MigrationResult,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        """from_file() parses version and name from filename."""
        migration_file = tmp_path / "v001_initial.sql"
        migration_file.write_text("-- Test migration\nSELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial"
        assert info.path == migration_file
        assert len(info.checksum) == 16

    def test_from_file_different_content_different_checksum(self, tmp_path: Path):
        file1 = tmp_path / "v001_a.sql"
        file1.write_text("SELECT 1;")
        file2 = tmp_path / "v002_b.sql"
        file2.write_text("SELECT 2;")

        assert MigrationInfo.from_file(file1).checksum != MigrationInfo.from_file(file2).checksum

    def test_from_file_invalid_filename_raises(self, tmp_path: Path):
        invalid_file = tmp_path / "initial.sql"
        invalid_file.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(invalid_file)


class TestMigrationResult:
    def test_failed_result(self):
        result = MigrationResult(
            version="001",
            name="initial",
            success=False,
            execution_time_ms=5,
            error="syntax error",
        )
        assert result.success is False
        assert result.error == "syntax error"


class TestDiscoverMigrations:
    def test_bundled_migrations_in_order(self):
        """The packaged migrations start at v001 and are sorted."""
        migrations = discover_migrations()

        assert migrations[0].version == "001"
        versions = [m.version for m in migrations]
        assert versions == sorted(versions)


class TestInitializeDatabase:
    """Tests for initialize_database()."""

    async def test_creates_schema(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "stock.db"

        results = await initialize_database(db_path, create_backup_before=False)

        assert db_path.exists()
        assert results and all(r.success for r in results)

        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert set(REQUIRED_TABLES) <= tables

    async def test_second_run_applies_nothing(self, tmp_path: Path):
        db_path = tmp_path / "stock.db"
        await initialize_database(db_path, create_backup_before=False)

        assert await initialize_database(db_path, create_backup_before=False) == []

    async def test_backup_removed_after_success(self, tmp_path: Path):
        """A pre-migration backup of an existing file is cleaned up on success."""
        db_path = tmp_path / "stock.db"
        await initialize_database(db_path, create_backup_before=False)

        await initialize_database(db_path, create_backup_before=True)

        assert list(tmp_path.glob("*.backup_*")) == []

    async def test_records_versions(self, tmp_path: Path):
        db_path = tmp_path / "stock.db"
        await initialize_database(db_path, create_backup_before=False)

        async with aiosqlite.connect(db_path) as conn:
            applied = await get_applied_migrations(conn)
            current = await get_current_version(conn)

        assert "001" in applied
        assert current == max(applied)


class TestVersionQueries:
    async def test_empty_database(self, tmp_path: Path):
        async with aiosqlite.connect(tmp_path / "empty.db") as conn:
            assert await get_applied_migrations(conn) == {}
            assert await get_current_version(conn) is None


class TestMigrationStatus:
    async def test_missing_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "nope.db")

        assert status["exists"] is False
        assert "001" in status["pending_migrations"]

    async def test_migrated_database(self, tmp_path: Path):
        db_path = tmp_path / "stock.db"
        await initialize_database(db_path, create_backup_before=False)

        status = await get_migration_status(db_path)

        assert status["exists"] is True
        assert status["pending_migrations"] == []
        assert "001" in status["applied_migrations"]


class TestVerifySchemaIntegrity:
    async def test_all_checks_pass(self, tmp_path: Path):
        db_path = tmp_path / "stock.db"
        await initialize_database(db_path, create_backup_before=False)

        checks = {c["check"]: c["status"] for c in await verify_schema_integrity(db_path)}

        assert checks == {
            "foreign_keys": "PASS",
            "integrity": "PASS",
            "required_tables": "PASS",
            "ledger_append_only": "PASS",
        }

    async def test_reports_missing_trigger(self, tmp_path: Path):
        db_path = tmp_path / "stock.db"
        await initialize_database(db_path, create_backup_before=False)
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("DROP TRIGGER stock_movements_no_update")
            await conn.commit()

        checks = {c["check"]: c["status"] for c in await verify_schema_integrity(db_path)}

        assert checks["ledger_append_only"] == "FAIL"


class TestBackups:
    def test_create_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "stock.db"
        db_path.write_text("original")

        backup_path = create_backup(db_path)
        db_path.write_text("corrupted")
        restore_backup(db_path, backup_path)

        assert ".backup_" in backup_path.name
        assert db_path.read_text() == "original"


class TestRunMigrations:
    async def test_failed_migration_raises(self, tmp_path: Path, monkeypatch):
        from stockmaster.core.exceptions import DatabaseError
        from stockmaster.infrastructure.storage.sqlite.migrations import migrator

        broken = tmp_path / "v001_broken.sql"
        broken.write_text("CREATE TABLE oops (;")
        monkeypatch.setattr(
            migrator, "discover_migrations", lambda: [MigrationInfo.from_file(broken)]
        )

        with pytest.raises(DatabaseError, match="v001 failed"):
            await migrator.run_migrations(tmp_path / "stock.db")
