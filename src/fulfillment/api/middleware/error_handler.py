"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
- details: the structured context the engine attached to the error
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from fulfillment.application.dto.responses import ErrorResponse
from fulfillment.config import get_logger
from fulfillment.core.exceptions import (
    ConfigurationError,
    ConflictingStateError,
    ContentionError,
    DuplicateError,
    EngineError,
    InsufficientStockError,
    InvalidQuantityError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
    WriteConflictError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes; first match wins
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientStockError: status.HTTP_409_CONFLICT,
    InvalidQuantityError: 422,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ConflictingStateError: status.HTTP_409_CONFLICT,
    DuplicateError: status.HTTP_409_CONFLICT,
    ContentionError: status.HTTP_503_SERVICE_UNAVAILABLE,
    WriteConflictError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ValueError: status.HTTP_400_BAD_REQUEST,
}

# Hint messages per error code
HINT_MAP: dict[str, str] = {
    "PRODUCT_NOT_FOUND": "Check the product ID and try GET /api/products to list products.",
    "CLIENT_NOT_FOUND": "Check the client ID and try GET /api/clients to list clients.",
    "SUPPLIER_NOT_FOUND": "Check the supplier ID and try GET /api/suppliers to list suppliers.",
    "ISSUANCE_NOT_FOUND": "Check the issuance ID and try GET /api/issuances to list issuances.",
    "RETURN_NOT_FOUND": "Check the return ID and try GET /api/returns to list returns.",
    "PURCHASE_ORDER_NOT_FOUND": "Check the order ID and try GET /api/purchase-orders.",
    "JOB_ORDER_NOT_FOUND": "Check the job order ID and try GET /api/job-orders.",
    "JOB_ORDER_ITEM_NOT_FOUND": "The item does not belong to that job order.",
    "INSTALLATION_NOT_FOUND": "Check the installation ID and try GET /api/installations.",
    "TOOL_NOT_FOUND": "Check the tool ID and try GET /api/tools to list tools.",
    "DISPOSAL_SOURCE_NOT_FOUND": "Try GET /api/disposals/items to list what can be disposed.",
    "INSUFFICIENT_STOCK": "Reduce the quantity or receive more stock first.",
    "INVALID_QUANTITY": "The quantity exceeds what this document allows. Check the limits in details.",
    "INVALID_STATE": "The record is not in a status that allows this action.",
    "INVALID_TRANSITION": "Statuses advance one step at a time. Check the current status.",
    "CONFLICTING_STATE": "Dependent records block this action. Resolve them first.",
    "DUPLICATE": "A record with the same unique value already exists.",
    "CONTENTION": "The records were busy. Retry the request.",
    "WRITE_CONFLICT": "The record changed while saving. Retry the request.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "DATABASE_ERROR": "A database operation failed. Check server logs.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The request conflicts with the current state of the records.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
    503: "The service is temporarily unavailable. Retry later.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions to standardized JSON error responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            return self._handle_exception(request, e)

    def _handle_exception(
        self,
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Convert exception to standardized JSON response."""
        status_code = status_for(exc)

        if isinstance(exc, EngineError):
            error_code = exc.code
            details = exc.details
            retryable = exc.retryable
        else:
            error_code = exc.__class__.__name__
            details = {}
            retryable = False

        request_id = getattr(request.state, "request_id", None)

        log = logger.error if status_code >= 500 else logger.warning
        log(
            "request_error",
            request_id=request_id,
            path=request.url.path,
            error_type=error_code,
            error=str(exc),
            traceback=traceback.format_exc() if status_code >= 500 else None,
        )

        error_response = ErrorResponse(
            error_code=error_code,
            message=exc.message if isinstance(exc, EngineError) else str(exc),
            hint=_get_hint(error_code, status_code),
            details=details,
            retryable=retryable,
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status_code,
            content=error_response.model_dump(mode="json"),
        )


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = _infer_error_code(exc.status_code)

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=exc.detail or "An error occurred",
                hint=_get_hint(error_code, exc.status_code),
                path=request.url.path,
            ).model_dump(mode="json"),
        )


def _infer_error_code(status_code: int) -> str:
    if status_code == 404:
        return "NOT_FOUND"
    if status_code == 400:
        return "BAD_REQUEST"
    if status_code == 405:
        return "METHOD_NOT_ALLOWED"
    if status_code == 422:
        return "UNPROCESSABLE_ENTITY"
    return "HTTP_ERROR"
