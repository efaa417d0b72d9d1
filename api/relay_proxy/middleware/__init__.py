"""HTTP middleware for the Relay Proxy API."""

from .request_logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
