"""FastAPI dependencies providing request-scoped resolution."""

import logging
from typing import Annotated

from fastapi import Depends, Request

from .config import Settings, get_settings
from .errors.problem_details import ServiceUnavailableError
from .resolution import ResourceResolver
from .upstream import UpstreamClient


logger = logging.getLogger(__name__)


def get_upstream_client(request: Request) -> UpstreamClient:
    """Get the shared upstream client created at application startup.

    Raises:
        ServiceUnavailableError: If the application has not finished starting
    """
    client = getattr(request.app.state, "upstream_client", None)
    if client is None:
        raise ServiceUnavailableError("Upstream client is not initialized")
    return client


def get_resolver(
    client: Annotated[UpstreamClient, Depends(get_upstream_client)],
    settings: Annotated[Settings, Depends(get_settings)]
) -> ResourceResolver:
    """Create the resolver, and with it the loader, for this request only."""
    logger.debug("Creating request scoped resolver")
    return ResourceResolver(client, settings)


Resolver = Annotated[ResourceResolver, Depends(get_resolver)]
AppSettings = Annotated[Settings, Depends(get_settings)]
