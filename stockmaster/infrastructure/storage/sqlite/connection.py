"""
Async SQLite connection pool.

Every connection runs in WAL mode with foreign keys on. Writers that read
before they write (reference allocation, status compare-and-set) open
their transaction with BEGIN IMMEDIATE so the write lock is held from the
first read until commit.
"""

import asyncio
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockmaster.config import get_logger, get_settings

logger = get_logger(__name__)

CONNECTION_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Fixed-size pool of aiosqlite connections to one database file."""

    def __init__(self, db_path: Path, pool_size: int = 5, busy_timeout: int = 30000):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue(maxsize=pool_size)
        self._connections: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return bool(self._connections)

    async def initialize(self) -> None:
        async with self._lock:
            if self.is_initialized:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            for _ in range(self.pool_size):
                conn = await self._open()
                self._connections.append(conn)
                self._idle.put_nowait(conn)

            logger.info(
                "connection_pool_initialized",
                db_path=str(self.db_path),
                pool_size=self.pool_size,
            )

    async def _open(self) -> aiosqlite.Connection:
        conn = await aiosqlite.connect(self.db_path)
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        for pragma in CONNECTION_PRAGMAS:
            await conn.execute(pragma)
        conn.row_factory = aiosqlite.Row
        return conn

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a connection; waits while all of them are in use."""
        if not self.is_initialized:
            await self.initialize()

        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection inside a transaction.

        Commits when the block exits normally and rolls back when it raises.
        With immediate=True the write lock is taken before the block runs.
        """
        async with self.acquire() as conn:
            if immediate:
                await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            await conn.commit()

    async def ping(self) -> float:
        """Round-trip a trivial query; returns latency in milliseconds."""
        start = time.perf_counter()
        async with self.acquire() as conn:
            await conn.execute("SELECT 1")
        return (time.perf_counter() - start) * 1000

    async def close(self) -> None:
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            self._connections.clear()
            self._idle = asyncio.Queue(maxsize=self.pool_size)
            logger.info("connection_pool_closed", db_path=str(self.db_path))


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool configured from StorageSettings."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.initialize()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction(immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.transaction(immediate=immediate) as conn:
        yield conn
