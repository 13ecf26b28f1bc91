"""API middleware."""

from stockmaster.api.middleware.error_handler import ErrorHandlerMiddleware
from stockmaster.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
