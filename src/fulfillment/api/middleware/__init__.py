"""API middleware."""

from fulfillment.api.middleware.error_handler import ErrorHandlerMiddleware
from fulfillment.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
