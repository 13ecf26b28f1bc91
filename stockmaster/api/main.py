"""
HTTP application for the inventory core.

``create_app()`` builds the FastAPI instance; the module-level ``app`` is
what uvicorn serves. Startup migrates the database, opens the connection
pool and starts the event notifier; shutdown drains pending events before
the pool is closed.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockmaster import __version__
from stockmaster.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from stockmaster.api.middleware.error_handler import setup_exception_handlers
from stockmaster.api.routes import (
    dashboard_router,
    health_router,
    move_history_router,
    operations_router,
    stock_router,
)
from stockmaster.config import Settings, configure_logging, get_logger, get_settings

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    operations_router,
    stock_router,
    move_history_router,
    dashboard_router,
)


async def _open_storage() -> None:
    from stockmaster.infrastructure.storage.sqlite import get_pool
    from stockmaster.infrastructure.storage.sqlite.migrations import run_migrations

    applied = await run_migrations()
    pool = await get_pool()
    logger.info(
        "storage_ready",
        db_path=str(pool.db_path),
        migrations_applied=[r.version for r in applied],
    )


async def _close_storage() -> None:
    from stockmaster.infrastructure.storage.sqlite import close_pool

    try:
        await close_pool()
    except Exception as e:
        logger.warning("connection_pool_close_failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    from stockmaster.application.services import get_event_notifier

    settings = get_settings()
    logger.info("application_starting", host=settings.api.host, port=settings.api.port)

    try:
        await _open_storage()
    except Exception as e:
        logger.error("storage_startup_failed", error=str(e))
        raise

    notifier = await get_event_notifier()
    await notifier.start()
    logger.info("application_started", events_enabled=settings.events.enabled)

    try:
        yield
    finally:
        logger.info("application_stopping")
        try:
            await notifier.stop(drain=True)
        except Exception as e:
            logger.warning("event_notifier_stop_failed", error=str(e))
        await _close_storage()
        logger.info("application_stopped")


def _add_middleware(app: FastAPI, settings: Settings) -> None:
    # Starlette runs the last added middleware outermost.
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    docs = settings.api.debug
    app = FastAPI(
        title="StockMaster Inventory API",
        description="Warehouse operations, stock ledger and move history",
        version=__version__,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        lifespan=lifespan,
    )

    _add_middleware(app, settings)
    setup_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def liveness() -> dict[str, str]:
        """Bare liveness check for container orchestrators."""
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "stockmaster.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )


if __name__ == "__main__":
    run()
