"""API middleware."""

from growledger.api.middleware.error_handler import ErrorHandlerMiddleware
from growledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
