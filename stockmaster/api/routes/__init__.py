"""API route modules."""

from stockmaster.api.routes.dashboard import router as dashboard_router
from stockmaster.api.routes.health import router as health_router
from stockmaster.api.routes.move_history import router as move_history_router
from stockmaster.api.routes.operations import router as operations_router
from stockmaster.api.routes.stock import router as stock_router

__all__ = [
    "health_router",
    "operations_router",
    "stock_router",
    "move_history_router",
    "dashboard_router",
]
