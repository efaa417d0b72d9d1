"""HTTP client for the upstream page-oriented REST API.

The upstream serves list resources as ``/<resource>?page=n&pageSize=m`` (one
based page numbers) and single resources by their full URL. It tells whether
another page exists only through the ``Link`` response header.
"""

import logging
import time
from typing import Any, Dict, Optional

import httpx
import jsonschema

from ..config import Settings
from ..errors.problem_details import UpstreamFetchError
from ..loader import is_blank_reference
from ..pagination import PagedResult


logger = logging.getLogger(__name__)

PAGE_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {"type": "object"}
}

RESOURCE_SCHEMA: Dict[str, Any] = {
    "type": "object"
}


class UpstreamClient:
    """Reads pages and single resources from the upstream REST API.

    One instance is shared by the whole application for its connection pool;
    it holds no response data between calls.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_connections: int = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the upstream API, e.g. ``https://host/api``
            timeout: Request timeout in seconds
            max_connections: Connection pool size
            transport: Optional transport override, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_connections=max_connections),
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=transport
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "UpstreamClient":
        return cls(
            base_url=settings.upstream_base_url,
            timeout=settings.upstream_timeout,
            max_connections=settings.upstream_max_connections,
            transport=transport
        )

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        await self.client.aclose()

    async def __aenter__(self) -> "UpstreamClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def resource_url(self, resource: str, item_id: Optional[str] = None) -> str:
        """Build the URL of a list resource or of one of its items."""
        url = f"{self.base_url}/{resource}"
        if item_id is not None:
            url = f"{url}/{item_id}"
        return url

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        **error_context: Any
    ) -> tuple[Any, httpx.Response]:
        """GET ``url`` and parse its JSON body.

        Raises:
            UpstreamFetchError: On transport errors, non-2xx statuses or
                bodies that are not JSON
        """
        logger.info(f"Reading {url}...", extra={"url": url, "params": params})
        started = time.perf_counter()

        try:
            response = await self.client.get(url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamFetchError(
                f"Request to {url} failed: {type(e).__name__}: {e}",
                **error_context
            ) from e

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"  {response.status_code} : {len(response.content)} bytes in {elapsed_ms:.0f} ms",
            extra={"url": url, "status_code": response.status_code, "duration_ms": elapsed_ms}
        )

        if response.is_error:
            raise UpstreamFetchError(
                f"Upstream responded {response.status_code} for {url}",
                upstream_status=response.status_code,
                **error_context
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamFetchError(
                f"Upstream returned invalid JSON for {url}: {e}",
                **error_context
            ) from e

        return data, response

    async def read_page(self, resource: str, page_number: int, page_size: int) -> PagedResult:
        """Read one page of a list resource.

        Args:
            resource: List resource name, e.g. ``characters``
            page_number: Zero based page number
            page_size: Fixed number of items per page

        Returns:
            The page items and whether another page exists

        Raises:
            UpstreamFetchError: If the read fails or the body is not a list of objects
        """
        url = self.resource_url(resource)
        data, response = await self._get_json(
            url,
            params={"page": page_number + 1, "pageSize": page_size},
            resource=resource,
            page=page_number
        )

        try:
            jsonschema.validate(data, PAGE_SCHEMA)
        except jsonschema.ValidationError as e:
            raise UpstreamFetchError(
                f"Malformed page from {url}: {e.message}",
                resource=resource,
                page=page_number
            ) from e

        if "link" in response.headers:
            has_next_page = "next" in response.links
        else:
            # Without paging links a full page is the only hint of more data
            has_next_page = len(data) >= page_size

        return PagedResult(items=data, has_next_page=has_next_page)

    async def fetch_by_reference(self, ref: Optional[str]) -> Optional[Dict[str, Any]]:
        """Fetch a single resource by its URL.

        Blank references return None without a request.

        Raises:
            UpstreamFetchError: If the fetch fails or the body is not an object
        """
        if is_blank_reference(ref):
            return None

        data, _ = await self._get_json(ref, reference=ref)

        try:
            jsonschema.validate(data, RESOURCE_SCHEMA)
        except jsonschema.ValidationError as e:
            raise UpstreamFetchError(
                f"Malformed resource at {ref}: {e.message}",
                reference=ref
            ) from e

        return data

    async def ping(self) -> bool:
        """Check that the upstream root answers."""
        try:
            response = await self.client.get(self.base_url)
        except httpx.HTTPError as e:
            logger.warning(f"Upstream ping failed: {e}")
            return False
        return not response.is_error
