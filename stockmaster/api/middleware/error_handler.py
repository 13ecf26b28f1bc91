"""
Error responses.

Every failure leaves the API as an ErrorResponse body carrying a
machine-readable ``error_code``, the message, a recovery ``hint`` and the
exception details flattened into ``detail``. Domain errors map to HTTP
statuses by type, most specific first.
"""

from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from stockmaster.application.dto.responses import ErrorResponse
from stockmaster.config import get_logger
from stockmaster.core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    StockMasterError,
    StorageError,
    ValidationError,
)

logger = get_logger(__name__)

STATUS_BY_EXCEPTION: tuple[tuple[type[Exception], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (ValueError, status.HTTP_400_BAD_REQUEST),
)

HINTS: dict[str, str] = {
    "OPERATION_NOT_FOUND": "Check the operation ID; GET /api/operations lists them.",
    "LOCATION_NOT_FOUND": "Check the location ID against GET /api/warehouses.",
    "PRODUCT_NOT_FOUND": "Check the product ID against the product catalog.",
    "WAREHOUSE_NOT_FOUND": "Check the warehouse ID against GET /api/warehouses.",
    "OPERATION_LOCKED": "Only DRAFT or WAITING operations can be edited.",
    "INVALID_TRANSITION": "Fetch the operation to see its current status before retrying.",
    "DUPLICATE_REFERENCE": "Another operation took this reference. Retry the request.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
    "NOT_FOUND": "No such route. See /docs for the available endpoints.",
    "METHOD_NOT_ALLOWED": "This route does not accept that HTTP method.",
}

FALLBACK_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    409: "The request conflicts with the current state of the resource.",
    500: "An internal error occurred. Check server logs.",
}

HTTP_ERROR_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "UNPROCESSABLE_ENTITY",
}


def _error_body(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    detail: str | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=HINTS.get(error_code) or FALLBACK_HINTS.get(status_code, ""),
        detail=detail,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Render a domain or unexpected exception as an ErrorResponse."""
    status_code = next(
        (code for exc_type, code in STATUS_BY_EXCEPTION if isinstance(exc, exc_type)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )

    detail = None
    if isinstance(exc, StockMasterError):
        error_code, message = exc.code, exc.message
        if exc.details:
            detail = "; ".join(f"{key}={value}" for key, value in exc.details.items())
    else:
        error_code, message = type(exc).__name__, str(exc)

    if status_code >= 500:
        logger.error(
            "request_error", path=request.url.path, error_code=error_code, error=message,
            exc_info=exc,
        )
    else:
        logger.warning("request_rejected", path=request.url.path, error_code=error_code)

    return _error_body(request, status_code, error_code, message, detail)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence for exceptions no handler claimed."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            return build_error_response(request, e)


async def _domain_error(request: Request, exc: StockMasterError) -> JSONResponse:
    return build_error_response(request, exc)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = [
        f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return _error_body(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Request validation failed",
        "; ".join(problems),
    )


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_body(
        request,
        exc.status_code,
        HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
        exc.detail or "An error occurred",
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StockMasterError, _domain_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(HTTPException, _http_error)
