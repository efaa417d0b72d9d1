"""Connections over fully known in-memory lists.

Items often hold every link they have as a list of resource URLs. Those lists
are sliced here with plain index cursors before anything is fetched, so only
the requested window of URLs is ever loaded.
"""

import base64
from typing import Any, List, Optional, Sequence

from .connection import Connection, Edge, PageInfo, empty_connection
from .cursor import cursor_to_offset, offset_to_cursor
from ..errors.problem_details import InvalidArgumentError


def list_connection(
    items: Sequence[Any],
    first: Optional[int] = None,
    after: Optional[str] = None
) -> Connection:
    """Slice a list into a connection.

    Args:
        items: The complete list
        first: Maximum number of edges, or None for all remaining items
        after: Exclusive list cursor to continue from

    Returns:
        Connection whose edges carry list index cursors

    Raises:
        InvalidArgumentError: If first is negative
        InvalidCursorError: If after is not a list cursor
    """
    if first is not None and first < 0:
        raise InvalidArgumentError("You must provide a non-negative value for 'first'", first=first)

    start = cursor_to_offset(after) + 1 if after is not None else 0
    end = len(items) if first is None else min(len(items), start + first)

    if start >= end:
        return empty_connection()

    edges = [Edge(node=items[i], cursor=offset_to_cursor(i)) for i in range(start, end)]
    return Connection(
        edges=edges,
        page_info=PageInfo(
            start_cursor=edges[0].cursor,
            end_cursor=edges[-1].cursor,
            has_previous_page=False,
            has_next_page=end < len(items)
        )
    )


def get_edge_nodes(connection: Connection) -> List[Any]:
    """Return the nodes of a connection in edge order."""
    return [edge.node for edge in connection.edges]


def replace_edge_nodes(connection: Connection, nodes: Sequence[Any]) -> Connection:
    """Swap edge nodes for ``nodes`` (same length, same order)."""
    if len(nodes) != len(connection.edges):
        raise ValueError(
            f"Expected {len(connection.edges)} nodes, got {len(nodes)}"
        )
    return Connection(
        edges=[Edge(node=node, cursor=edge.cursor) for edge, node in zip(connection.edges, nodes)],
        page_info=connection.page_info
    )


def to_global_id(type_name: str, local_id: str) -> str:
    """Build a globally unique id from a type name and a local id."""
    return base64.b64encode(f"{type_name}:{local_id}".encode("utf-8")).decode("ascii")


def from_global_id(global_id: str) -> tuple[str, str]:
    """Split a global id back into its type name and local id."""
    try:
        decoded = base64.b64decode(global_id.encode("ascii"), validate=True).decode("utf-8")
    except (ValueError, UnicodeError) as e:
        raise InvalidArgumentError(f"Invalid global id: {e}")

    type_name, sep, local_id = decoded.partition(":")
    if not sep or to_global_id(type_name, local_id) != global_id:
        raise InvalidArgumentError(f"Invalid global id: {decoded!r}")
    return type_name, local_id
