"""Problem Details (RFC 9457) implementation for the Relay Proxy API."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    # Allow additional properties for extensions
    model_config = {"extra": "allow"}


class ProblemDetailException(Exception):
    """Base exception for Problem Details responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model."""
        instance = self.instance
        if instance is None and request:
            instance = str(request.url.path)

        problem = ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=instance
        )

        for key, value in self.extensions.items():
            setattr(problem, key, value)

        return problem

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        """Convert to JSONResponse with Problem Details format."""
        problem = self.to_problem_detail(request)
        return JSONResponse(
            status_code=self.status,
            content=problem.model_dump(exclude_none=True),
            headers={"Content-Type": "application/problem+json"}
        )


class BadRequestError(ProblemDetailException):
    """400 Bad Request error."""

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(
            status=400,
            title="Bad Request",
            detail=detail,
            **extensions
        )


class InvalidArgumentError(BadRequestError):
    """400 raised for out-of-range pagination or expansion arguments."""

    def __init__(self, detail: str, **extensions: Any):
        super().__init__(detail, **extensions)
        self.title = "Invalid Argument"


class InvalidCursorError(BadRequestError):
    """400 raised when a cursor string cannot be decoded."""

    def __init__(self, detail: str, cursor: Optional[str] = None, **extensions: Any):
        if cursor is not None:
            extensions["cursor"] = cursor
        super().__init__(detail, **extensions)
        self.title = "Invalid Cursor"


class NotFoundError(ProblemDetailException):
    """404 Not Found error."""

    def __init__(self, detail: str = "Resource not found", **extensions: Any):
        super().__init__(
            status=404,
            title="Not Found",
            detail=detail,
            **extensions
        )


class InternalServerError(ProblemDetailException):
    """500 Internal Server Error."""

    def __init__(self, detail: str = "Internal server error", **extensions: Any):
        super().__init__(
            status=500,
            title="Internal Server Error",
            detail=detail,
            **extensions
        )


class UpstreamFetchError(ProblemDetailException):
    """502 raised when the upstream REST API fails or returns malformed data.

    The error is scoped to what failed: either a single ``reference`` (a
    resource URL) or a ``resource``/``page`` pair for page reads.
    """

    def __init__(
        self,
        detail: str = "Upstream request failed",
        reference: Optional[str] = None,
        resource: Optional[str] = None,
        page: Optional[int] = None,
        upstream_status: Optional[int] = None,
        **extensions: Any
    ):
        if reference is not None:
            extensions["reference"] = reference
        if resource is not None:
            extensions["resource"] = resource
        if page is not None:
            extensions["page"] = page
        if upstream_status is not None:
            extensions["upstream_status"] = upstream_status
        super().__init__(
            status=502,
            title="Bad Gateway",
            detail=detail,
            **extensions
        )
        self.reference = reference
        self.upstream_status = upstream_status


class ServiceUnavailableError(ProblemDetailException):
    """503 Service Unavailable error."""

    def __init__(self, detail: str = "Service temporarily unavailable", **extensions: Any):
        super().__init__(
            status=503,
            title="Service Unavailable",
            detail=detail,
            **extensions
        )


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response."""
    if instance is None and request:
        instance = str(request.url.path)

    problem = ProblemDetail(
        type=type_uri,
        title=title,
        status=status,
        detail=detail,
        instance=instance
    )

    for key, value in extensions.items():
        setattr(problem, key, value)

    return JSONResponse(
        status_code=status,
        content=problem.model_dump(exclude_none=True),
        headers={"Content-Type": "application/problem+json"}
    )
