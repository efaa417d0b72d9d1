"""Error handling module for the Relay Proxy API."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    BadRequestError,
    InvalidArgumentError,
    InvalidCursorError,
    NotFoundError,
    InternalServerError,
    UpstreamFetchError,
    ServiceUnavailableError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "BadRequestError",
    "InvalidArgumentError",
    "InvalidCursorError",
    "NotFoundError",
    "InternalServerError",
    "UpstreamFetchError",
    "ServiceUnavailableError",
    "create_problem_response",
    "register_exception_handlers"
]
