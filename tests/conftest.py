"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import aiosqlite
import pytest

from stockmaster.core.services import DashboardService, OperationLifecycleService, StockAggregator
from stockmaster.infrastructure.events import EventNotifier, InMemoryEventSink
from stockmaster.infrastructure.storage.sqlite.catalog_store import SQLiteCatalogStore
from stockmaster.infrastructure.storage.sqlite.migrations import initialize_database
from stockmaster.infrastructure.storage.sqlite.operation_store import SQLiteOperationStore
from stockmaster.infrastructure.storage.sqlite.stock_ledger import SQLiteStockLedger

# Seeded catalog
MAIN_WAREHOUSE = "wh-main"
EAST_WAREHOUSE = "wh-east"
STOCK_LOCATION = "loc-stock"
SHELF_LOCATION = "loc-shelf"
EAST_LOCATION = "loc-east"
BOLT = "prod-bolt"
NUT = "prod-nut"
GEAR = "prod-gear"
FASTENERS = "cat-fasteners"
DRIVE_PARTS = "cat-drive"


async def seed_catalog(conn: aiosqlite.Connection) -> None:
    await conn.executemany(
        "INSERT INTO warehouses (id, name, short_code, is_active) VALUES (?, ?, ?, ?)",
        [
            (MAIN_WAREHOUSE, "Main Warehouse", "WH", 1),
            (EAST_WAREHOUSE, "East Depot", "EAST", 1),
            ("wh-closed", "Closed Site", "OLD", 0),
        ],
    )
    await conn.executemany(
        """
        INSERT INTO locations (id, warehouse_id, name, short_code, is_active)
        VALUES (?, ?, ?, ?, ?)
        """,
        [
            (STOCK_LOCATION, MAIN_WAREHOUSE, "Stock", "STK", 1),
            (SHELF_LOCATION, MAIN_WAREHOUSE, "Shelf A", "SHA", 1),
            (EAST_LOCATION, EAST_WAREHOUSE, "East Stock", "STK", 1),
        ],
    )
    await conn.executemany(
        "INSERT INTO product_categories (id, name) VALUES (?, ?)",
        [
            (FASTENERS, "Fasteners"),
            (DRIVE_PARTS, "Drive Parts"),
            ("cat-packaging", "Packaging"),
        ],
    )
    await conn.executemany(
        """
        INSERT INTO products
            (id, name, sku, unit_of_measure, reorder_level, is_active, category_id)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (BOLT, "Hex Bolt M8", "BLT-M8", "Units", 10, 1, FASTENERS),
            (NUT, "Hex Nut M8", "NUT-M8", "Units", 0, 1, FASTENERS),
            (GEAR, "Spur Gear 40T", "GR-40", "Units", 5, 1, DRIVE_PARTS),
        ],
    )
    await conn.commit()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def seeded_db(temp_db_path: Path) -> Path:
    """Migrated database with a small warehouse catalog."""
    await initialize_database(temp_db_path, create_backup_before=False)
    async with aiosqlite.connect(temp_db_path) as conn:
        await seed_catalog(conn)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 3
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def db(seeded_db: Path, mock_settings) -> AsyncGenerator[Path, None]:
    """Point the global connection pool at the seeded temp database."""
    import stockmaster.infrastructure.storage.sqlite.connection as conn_module

    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield seeded_db
        finally:
            await conn_module.close_pool()


@pytest.fixture
async def stack(db: Path) -> AsyncGenerator[SimpleNamespace, None]:
    """Lifecycle, aggregator and dashboard wired to SQLite, events captured in memory."""
    ledger = SQLiteStockLedger()
    operations = SQLiteOperationStore(ledger=ledger)
    catalog = SQLiteCatalogStore()
    aggregator = StockAggregator(ledger, catalog)
    dashboard = DashboardService(operations, ledger, catalog, aggregator, cache_ttl=60)
    sink = InMemoryEventSink()
    notifier = EventNotifier(
        [sink], aggregator=aggregator, dashboard=dashboard, retry_delay=0
    )
    lifecycle = OperationLifecycleService(operations, catalog, aggregator, publisher=notifier)

    await notifier.start()
    try:
        yield SimpleNamespace(
            ledger=ledger,
            operations=operations,
            catalog=catalog,
            aggregator=aggregator,
            dashboard=dashboard,
            notifier=notifier,
            sink=sink,
            lifecycle=lifecycle,
        )
    finally:
        await notifier.stop()
