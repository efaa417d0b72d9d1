"""Request-scoped coordinator between the pager, the loader and the upstream.

Every list read primes the request's loader with the full objects it returned,
so later link lookups of those objects are cache hits. Link fields are resolved
level by level: all loads of one level are registered first, then the loader
is dispatched once, and the loaded objects form the next level.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from ..config import Settings
from ..errors.problem_details import InvalidArgumentError, NotFoundError, UpstreamFetchError
from ..loader import BatchingResourceLoader
from ..pagination import (
    Connection,
    PageReader,
    get_connection,
    get_edge_nodes,
    list_connection,
    from_global_id,
    replace_edge_nodes,
    to_global_id
)
from ..upstream import UpstreamClient
from .expand import ExpandTree, parse_expand


logger = logging.getLogger(__name__)

GLOBAL_ID_KEYS = ("url", "name")
LINK_PREFIXES = ("http://", "https://")


def add_global_id(resource: Any) -> Any:
    """Give a resource an ``id`` derived from its url, or failing that its name."""
    if isinstance(resource, dict) and "id" not in resource:
        for key in GLOBAL_ID_KEYS:
            value = resource.get(key)
            if value:
                resource["id"] = to_global_id(key, str(value))
                break
    return resource


def _copy(resource: Any) -> Any:
    # Cached objects are shared by the whole request and must stay untouched
    return add_global_id(dict(resource)) if isinstance(resource, dict) else resource


def _is_link(value: Any) -> bool:
    # Blank strings are unset links
    return isinstance(value, str) and (not value.strip() or value.startswith(LINK_PREFIXES))


def _is_link_list(value: Any) -> bool:
    return isinstance(value, list) and all(v is None or _is_link(v) for v in value)


@dataclass
class _PendingField:
    parent: Dict[str, Any]
    field: str
    future: asyncio.Future
    children: ExpandTree
    many: bool


class ResourceResolver:
    """Resolves connections and link expansions for one request."""

    def __init__(
        self,
        client: UpstreamClient,
        settings: Settings,
        loader: Optional[BatchingResourceLoader] = None
    ):
        self.client = client
        self.settings = settings
        self.loader = loader or BatchingResourceLoader(client.fetch_by_reference)
        self.waves = 0

    def page_reader(self, resource: str) -> PageReader:
        """Build the page reading closure for ``resource``.

        Each page read also primes the loader with the items it returned.
        """
        page_size = self.settings.upstream_page_size

        async def read_page(page_number: int):
            result = await self.client.read_page(resource, page_number, page_size)
            primed = self.loader.prime_from_page(result.items)
            logger.debug(f"Primed {primed} {resource} from page {page_number}")
            return result

        return read_page

    async def dispatch(self) -> int:
        """Flush the loader for one wave."""
        self.waves += 1
        return await self.loader.dispatch()

    async def connection(
        self,
        resource: str,
        first: int,
        after: Optional[str] = None,
        expand: Sequence[str] = ()
    ) -> Connection:
        """Read a connection of a list resource and expand its links."""
        tree = parse_expand(expand, self.settings.max_expand_depth)
        connection = await get_connection(
            self.page_reader(resource),
            first=first,
            page_size=self.settings.upstream_page_size,
            after=after
        )
        nodes = await self._resolve_tree(get_edge_nodes(connection), tree)
        return replace_edge_nodes(connection, nodes)

    async def _load_reference(self, url: str, missing: str) -> Dict[str, Any]:
        future = self.loader.load(url)
        await self.dispatch()
        try:
            return await future
        except UpstreamFetchError as e:
            if e.upstream_status == 404:
                raise NotFoundError(missing) from e
            raise

    async def _load_item(self, resource: str, item_id: str) -> Dict[str, Any]:
        url = self.client.resource_url(resource, item_id)
        return await self._load_reference(url, f"No {resource} with id {item_id}")

    async def fetch_one(
        self,
        resource: str,
        item_id: str,
        expand: Sequence[str] = ()
    ) -> Dict[str, Any]:
        """Fetch one item through the loader and expand its links."""
        tree = parse_expand(expand, self.settings.max_expand_depth)
        item = await self._load_item(resource, item_id)
        [resolved] = await self._resolve_tree([item], tree)
        return resolved

    async def fetch_node(self, global_id: str, expand: Sequence[str] = ()) -> Dict[str, Any]:
        """Fetch the item behind a global id handed out as ``id``.

        Only url based ids can be looked up, and only when the url belongs to
        the configured upstream. Name based ids carry nothing to fetch by.

        Raises:
            InvalidArgumentError: If the global id cannot be decoded
            NotFoundError: If the id is not a lookupable upstream url or the
                upstream has no such item
        """
        tree = parse_expand(expand, self.settings.max_expand_depth)
        type_name, reference = from_global_id(global_id)
        if type_name != "url":
            raise NotFoundError(f"Ids of type '{type_name}' cannot be looked up", id=global_id)
        if not reference.startswith(f"{self.client.base_url}/"):
            raise NotFoundError("Id does not name an upstream resource", id=global_id)

        item = await self._load_reference(reference, f"No node with id {global_id}")
        [resolved] = await self._resolve_tree([item], tree)
        return resolved

    async def link_connection(
        self,
        resource: str,
        item_id: str,
        field: str,
        first: Optional[int] = None,
        after: Optional[str] = None,
        expand: Sequence[str] = ()
    ) -> Connection:
        """Connection over the objects an item links to through a URL list.

        The URL list is sliced first so only the requested window is fetched.
        """
        tree = parse_expand(expand, self.settings.max_expand_depth)
        item = await self._load_item(resource, item_id)

        if field not in item:
            raise NotFoundError(f"{resource} has no field '{field}'")
        urls = item[field]
        if not _is_link_list(urls):
            raise InvalidArgumentError(f"Field '{field}' is not a list of links")

        url_connection = list_connection(urls, first=first, after=after)
        future = self.loader.load_many(get_edge_nodes(url_connection))
        await self.dispatch()
        loaded = await future

        nodes = await self._resolve_tree(loaded, tree)
        return replace_edge_nodes(url_connection, nodes)

    async def resolve(self, nodes: Sequence[Any], expand: Sequence[str]) -> List[Any]:
        """Expand the given dotted link paths on copies of ``nodes``."""
        tree = parse_expand(expand, self.settings.max_expand_depth)
        return await self._resolve_tree(nodes, tree)

    async def _resolve_tree(self, nodes: Sequence[Any], tree: ExpandTree) -> List[Any]:
        roots = [_copy(node) for node in nodes]
        level = [(node, tree) for node in roots if isinstance(node, dict) and tree]

        while level:
            pending = self._register_level(level)
            if not pending:
                break

            await self.dispatch()
            results = await asyncio.gather(
                *(entry.future for entry in pending),
                return_exceptions=True
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result

            level = []
            for entry, result in zip(pending, results):
                if entry.many:
                    values = [_copy(value) for value in result]
                    entry.parent[entry.field] = values
                    children = [value for value in values if isinstance(value, dict)]
                else:
                    value = _copy(result)
                    entry.parent[entry.field] = value
                    children = [value] if isinstance(value, dict) else []
                if entry.children:
                    level.extend((child, entry.children) for child in children)

        return roots

    def _register_level(self, level) -> List[_PendingField]:
        pending: List[_PendingField] = []
        for node, tree in level:
            for field, children in tree.items():
                value = node.get(field)
                if value is None:
                    continue
                if _is_link(value):
                    future, many = self.loader.load(value), False
                elif _is_link_list(value):
                    future, many = self.loader.load_many(value), True
                else:
                    raise InvalidArgumentError(f"Field '{field}' is not a link and cannot be expanded")
                pending.append(_PendingField(node, field, future, children, many))
        return pending
