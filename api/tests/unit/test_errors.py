"""Tests for error handling and Problem Details implementation."""

import json

import pytest
from fastapi import Request
from unittest.mock import Mock

from relay_proxy.errors.problem_details import (
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


class TestProblemDetail:
    """Test ProblemDetail model."""

    def test_problem_detail_defaults(self):
        """Test ProblemDetail with default values."""
        problem = ProblemDetail(title="Test Error", status=400)

        assert problem.type == "about:blank"
        assert problem.title == "Test Error"
        assert problem.status == 400
        assert problem.detail is None
        assert problem.instance is None

    def test_problem_detail_extra_fields(self):
        """Test ProblemDetail allows extra fields."""
        problem = ProblemDetail(title="Test Error", status=400, cursor="abc")

        assert problem.cursor == "abc"


class TestProblemDetailException:
    """Test ProblemDetailException base class."""

    def test_basic_exception(self):
        exc = ProblemDetailException(status=400, title="Test Error", detail="Test detail")

        assert exc.status == 400
        assert exc.title == "Test Error"
        assert exc.detail == "Test detail"
        assert exc.type_uri == "about:blank"
        assert exc.instance is None
        assert str(exc) == "Test detail"

    def test_to_problem_detail_with_request(self):
        """Instance defaults to the request path."""
        request = Mock(spec=Request)
        request.url.path = "/v1/books"
        exc = ProblemDetailException(status=400, title="Test Error", retry=False)

        problem = exc.to_problem_detail(request)

        assert problem.instance == "/v1/books"
        assert problem.retry is False

    def test_to_response(self):
        exc = NotFoundError("No books with id 9")

        response = exc.to_response()

        assert response.status_code == 404
        assert response.headers["Content-Type"] == "application/problem+json"
        body = json.loads(response.body)
        assert body == {
            "type": "about:blank",
            "title": "Not Found",
            "status": 404,
            "detail": "No books with id 9"
        }


class TestSpecificExceptions:
    """Test the concrete error types."""

    def test_bad_request(self):
        exc = BadRequestError("Bad input")

        assert exc.status == 400
        assert exc.title == "Bad Request"

    def test_invalid_argument(self):
        exc = InvalidArgumentError("'first' must not be negative", first=-1)

        assert isinstance(exc, BadRequestError)
        assert exc.status == 400
        assert exc.title == "Invalid Argument"
        assert exc.extensions == {"first": -1}

    def test_invalid_cursor(self):
        exc = InvalidCursorError("Malformed cursor", cursor="xyz")

        assert isinstance(exc, BadRequestError)
        assert exc.status == 400
        assert exc.title == "Invalid Cursor"
        assert exc.extensions == {"cursor": "xyz"}

    def test_invalid_cursor_without_cursor(self):
        exc = InvalidCursorError("Empty cursor provided")

        assert exc.extensions == {}

    def test_not_found_default(self):
        exc = NotFoundError()

        assert exc.status == 404
        assert exc.detail == "Resource not found"

    def test_internal_server_error(self):
        exc = InternalServerError()

        assert exc.status == 500
        assert exc.title == "Internal Server Error"

    def test_service_unavailable(self):
        exc = ServiceUnavailableError()

        assert exc.status == 503
        assert exc.detail == "Service temporarily unavailable"

    def test_upstream_fetch_error_for_reference(self):
        """Reference failures carry the reference and upstream status."""
        exc = UpstreamFetchError(
            "Upstream responded 404",
            reference="https://upstream.test/api/books/9",
            upstream_status=404
        )

        assert exc.status == 502
        assert exc.title == "Bad Gateway"
        assert exc.reference == "https://upstream.test/api/books/9"
        assert exc.upstream_status == 404
        assert exc.extensions == {
            "reference": "https://upstream.test/api/books/9",
            "upstream_status": 404
        }

    def test_upstream_fetch_error_for_page(self):
        """Page read failures carry the resource and page number."""
        exc = UpstreamFetchError("timeout", resource="books", page=0)

        assert exc.reference is None
        assert exc.upstream_status is None
        assert exc.extensions == {"resource": "books", "page": 0}


class TestCreateProblemResponse:
    """Test create_problem_response."""

    def test_with_extensions(self):
        request = Mock(spec=Request)
        request.url.path = "/v1/characters"

        response = create_problem_response(
            status=400,
            title="Invalid Argument",
            detail="bad",
            request=request,
            max_first=100
        )

        body = json.loads(response.body)
        assert response.status_code == 400
        assert body["instance"] == "/v1/characters"
        assert body["max_first"] == 100

    def test_none_fields_are_omitted(self):
        response = create_problem_response(status=500, title="Internal Server Error")

        assert json.loads(response.body) == {
            "type": "about:blank",
            "title": "Internal Server Error",
            "status": 500
        }


@pytest.mark.parametrize("exc_type", [InvalidArgumentError, InvalidCursorError])
def test_bad_request_subclasses_are_problem_details(exc_type):
    assert issubclass(exc_type, ProblemDetailException)
