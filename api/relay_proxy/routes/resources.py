"""Connection and resource endpoints over the upstream REST API."""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Query

from ..dependencies import AppSettings, Resolver
from ..errors.problem_details import InvalidArgumentError, NotFoundError
from ..models.resources import LIST_LINK_FIELDS, ResourceName, is_list_link_field
from ..pagination import Connection
from ..resolution import split_expand


logger = logging.getLogger(__name__)

resources_router = APIRouter(
    tags=["Resources"],
    responses={
        400: {"description": "Bad Request - Invalid argument or cursor"},
        404: {"description": "Not Found"},
        502: {"description": "Bad Gateway - Upstream request failed"}
    }
)

FirstParam = Annotated[int | None, Query(description="Number of items to return")]
AfterParam = Annotated[str | None, Query(description="Exclusive cursor to continue after")]
ExpandParam = Annotated[
    str | None,
    Query(description="Comma separated dotted link paths to expand, e.g. father.spouse,books")
]


def _first_or_default(first: int | None, settings) -> int:
    if first is None:
        return settings.default_first
    if first < 0:
        raise InvalidArgumentError("You must provide a non-negative value for 'first'", first=first)
    if first > settings.max_first:
        raise InvalidArgumentError(
            f"'first' must not exceed {settings.max_first}",
            first=first,
            max_first=settings.max_first
        )
    return first


@resources_router.get(
    "/node",
    summary="Get a node by global id",
    description="Look up any item by the global id returned in its 'id' field."
)
async def get_node(
    node_id: Annotated[str, Query(alias="id", description="Global id of the item")],
    resolver: Resolver,
    expand: ExpandParam = None
) -> Dict[str, Any]:
    """Get the item a global id names, with optional link expansion."""
    logger.info(f"Getting node {node_id}")
    return await resolver.fetch_node(node_id, expand=split_expand(expand))


@resources_router.get(
    "/{resource}",
    response_model=Connection,
    summary="List a resource",
    description="Forward-only cursor pagination over an upstream list resource."
)
async def list_resource(
    resource: ResourceName,
    resolver: Resolver,
    settings: AppSettings,
    first: FirstParam = None,
    after: AfterParam = None,
    expand: ExpandParam = None
) -> Connection:
    """List items of a resource as a connection.

    Every page read primes the request's loader, so expanded links pointing
    at items of the same pages cost no extra upstream call.
    """
    count = _first_or_default(first, settings)
    logger.info(f"Listing {resource.value} first={count} after={after}")

    connection = await resolver.connection(
        resource.value,
        first=count,
        after=after,
        expand=split_expand(expand)
    )

    logger.info(
        f"Listed {len(connection.edges)} {resource.value} in {resolver.waves} loader waves",
        extra={"resource": resource.value, "edges": len(connection.edges), "waves": resolver.waves}
    )
    return connection


@resources_router.get(
    "/{resource}/{item_id}",
    summary="Get a resource",
    description="Fetch a single item through the request loader."
)
async def get_resource(
    resource: ResourceName,
    item_id: str,
    resolver: Resolver,
    expand: ExpandParam = None
) -> Dict[str, Any]:
    """Get one item of a resource, with optional link expansion."""
    logger.info(f"Getting {resource.value}/{item_id}")
    return await resolver.fetch_one(resource.value, item_id, expand=split_expand(expand))


@resources_router.get(
    "/{resource}/{item_id}/{field}",
    response_model=Connection,
    summary="List linked resources",
    description="Connection over the resources an item links to through a list of URLs."
)
async def list_linked_resources(
    resource: ResourceName,
    item_id: str,
    field: str,
    resolver: Resolver,
    settings: AppSettings,
    first: FirstParam = None,
    after: AfterParam = None,
    expand: ExpandParam = None
) -> Connection:
    """List the resources behind a URL list field of one item.

    Only the requested window of URLs is fetched, in one loader wave.
    """
    if not is_list_link_field(resource, field):
        allowed = ", ".join(sorted(LIST_LINK_FIELDS[resource]))
        raise NotFoundError(
            f"{resource.value} has no list link field '{field}'",
            allowed_fields=allowed
        )

    count = _first_or_default(first, settings)
    return await resolver.link_connection(
        resource.value,
        item_id,
        field,
        first=count,
        after=after,
        expand=split_expand(expand)
    )
