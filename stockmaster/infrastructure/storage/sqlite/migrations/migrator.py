"""
Versioned SQL migrations for the inventory database.

Migration files live next to this module as ``v<NNN>_<name>.sql`` and are
applied in version order. Each applied version is recorded in
``schema_migrations`` with a checksum of the file it came from. An existing
database file is copied aside before migrating and restored if anything
raises.

Run as a script (``stockmaster-migrate``) to migrate, show status or verify
the schema.
"""

import argparse
import asyncio
import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from stockmaster.config import get_logger, get_settings
from stockmaster.core.exceptions import DatabaseError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILE = re.compile(r"^v(?P<version>\d+)_(?P<name>\w+)\.sql$")

REQUIRED_TABLES = [
    "warehouses",
    "locations",
    "product_categories",
    "products",
    "operations",
    "operation_items",
    "stock_movements",
    "schema_migrations",
]
LEDGER_TRIGGER = "stock_movements_no_update"


@dataclass
class MigrationInfo:
    """One migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILE.match(path.name)
        if match is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(
            version=match["version"], name=match["name"], path=path, checksum=checksum
        )


@dataclass
class MigrationResult:
    """Outcome of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def discover_migrations(directory: Path = MIGRATIONS_DIR) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in directory.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(found, key=lambda m: int(m.version))


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied version -> checksum; empty before the first migration."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied, key=int) if applied else None


async def _apply(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    logger.info("applying_migration", version=migration.version, name=migration.name)
    start = time.perf_counter()

    def elapsed_ms() -> int:
        return int((time.perf_counter() - start) * 1000)

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            """
            INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed_ms()),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(migration.version, migration.name, False, elapsed_ms(), str(e))

    cursor = await conn.execute("PRAGMA foreign_key_check")
    violations = await cursor.fetchall()
    if violations:
        message = f"{len(violations)} foreign key violations after migration"
        logger.error("migration_left_fk_violations", version=migration.version, count=len(violations))
        return MigrationResult(migration.version, migration.name, False, elapsed_ms(), message)

    logger.info("migration_applied", version=migration.version, execution_time_ms=elapsed_ms())
    return MigrationResult(migration.version, migration.name, True, elapsed_ms())


def create_backup(db_path: Path) -> Path:
    backup_path = db_path.with_suffix(f".backup_{datetime.now():%Y%m%d_%H%M%S}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration, stopping at the first failure.

    Returns one result per migration attempted; an up-to-date database
    returns an empty list. A version already applied from a file whose
    checksum has since changed is logged and left alone.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            applied = await get_applied_migrations(conn)

            for migration in discover_migrations():
                if migration.version in applied:
                    if applied[migration.version] != migration.checksum:
                        logger.warning("migration_checksum_changed", version=migration.version)
                    continue
                result = await _apply(conn, migration)
                results.append(result)
                if not result.success:
                    break
    except Exception as e:
        logger.error("database_initialization_failed", db_path=str(db_path), error=str(e))
        if backup_path is not None:
            restore_backup(db_path, backup_path)
        raise

    if backup_path is not None and all(r.success for r in results):
        backup_path.unlink()

    logger.info(
        "database_ready",
        db_path=str(db_path),
        applied=[r.version for r in results if r.success],
    )
    return results


async def run_migrations(db_path: Path | None = None) -> list[MigrationResult]:
    """Startup entry point: like initialize_database, but a failed migration raises."""
    results = await initialize_database(db_path)
    failed = [r for r in results if not r.success]
    if failed:
        raise DatabaseError("migrate", f"v{failed[0].version} failed: {failed[0].error}")
    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied, key=int) if applied else None,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Check a migrated database.

    Covers foreign keys, SQLite's own integrity check, the required tables,
    and the trigger that keeps stock_movements append-only.
    """
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = len(await cursor.fetchall())

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("SELECT type, name FROM sqlite_master")
        objects = set(await cursor.fetchall())

    missing = [t for t in REQUIRED_TABLES if ("table", t) not in objects]

    def outcome(ok: bool) -> str:
        return "PASS" if ok else "FAIL"

    return [
        {"check": "foreign_keys", "status": outcome(violations == 0), "violations": violations},
        {"check": "integrity", "status": outcome(integrity == "ok"), "result": integrity},
        {"check": "required_tables", "status": outcome(not missing), "missing": missing},
        {
            "check": "ledger_append_only",
            "status": outcome(("trigger", LEDGER_TRIGGER) in objects),
        },
    ]


async def _cli(args: argparse.Namespace) -> int:
    if args.status:
        status = await get_migration_status(args.db_path)
        for key in ("exists", "current_version", "applied_migrations", "pending_migrations"):
            print(f"{key}: {status.get(key)}")
        return 0

    if args.verify:
        checks = await verify_schema_integrity(args.db_path)
        for check in checks:
            extra = {k: v for k, v in check.items() if k not in ("check", "status")}
            print(f"[{check['status']}] {check['check']} {extra or ''}".rstrip())
        return 0 if all(c["status"] == "PASS" for c in checks) else 1

    results = await initialize_database(args.db_path, create_backup_before=not args.no_backup)
    if not results:
        print("Schema is up to date")
    for result in results:
        outcome = "OK" if result.success else "FAILED"
        print(f"[{outcome}] v{result.version} {result.name} ({result.execution_time_ms}ms)")
        if result.error:
            print(f"      {result.error}")
    return 0 if all(r.success for r in results) else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="StockMaster database migrator")
    parser.add_argument("--db-path", type=Path, help="Database file (default from settings)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--status", action="store_true", help="Show applied and pending versions")
    group.add_argument("--verify", action="store_true", help="Run schema integrity checks")
    parser.add_argument("--no-backup", action="store_true", help="Skip the pre-migration copy")
    raise SystemExit(asyncio.run(_cli(parser.parse_args())))


if __name__ == "__main__":
    main()
