"""Exception handlers for the Relay Proxy API."""

import logging
from typing import Union
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .problem_details import (
    InternalServerError,
    ProblemDetailException,
    UpstreamFetchError,
    create_problem_response
)

logger = logging.getLogger(__name__)

STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    405: "Method Not Allowed",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Timeout"
}


def _format_validation_errors(errors) -> str:
    messages = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error["loc"])
        messages.append(f"{loc}: {error['msg']}")
    return "; ".join(messages)


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )
    return exc.to_response(request)


async def upstream_fetch_error_handler(
    request: Request,
    exc: UpstreamFetchError
) -> JSONResponse:
    """Handle failures of the upstream REST API."""
    logger.warning(
        f"Upstream fetch failed: {exc.detail}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "reference": exc.reference,
            "upstream_status": exc.upstream_status
        }
    )
    return exc.to_response(request)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException]
) -> JSONResponse:
    """Handle FastAPI HTTPException and Starlette HTTPException."""
    logger.info(
        f"HTTP exception: {exc.status_code} - {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": str(request.url.path),
            "method": request.method
        }
    )

    response = create_problem_response(
        status=exc.status_code,
        title=STATUS_TITLES.get(exc.status_code, "HTTP Error"),
        detail=str(exc.detail) if exc.detail else None,
        request=request
    )

    if getattr(exc, "headers", None):
        for key, value in exc.headers.items():
            response.headers[key] = value

    return response


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors (bad query or path parameters)."""
    logger.info(
        f"Validation error: {len(exc.errors())} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method
        }
    )

    return create_problem_response(
        status=422,
        title="Validation Error",
        detail="Validation failed: " + _format_validation_errors(exc.errors()),
        request=request
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    # Don't expose internal error details
    return InternalServerError("An unexpected error occurred").to_response(request)


def register_exception_handlers(app):
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(UpstreamFetchError, upstream_fetch_error_handler)
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, general_exception_handler)
