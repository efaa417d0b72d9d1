"""Pagination module for cursor-based connections."""

from .connection import (
    Connection,
    Edge,
    PageInfo,
    PagedResult,
    empty_connection
)
from .cursor import (
    CursorPosition,
    ZERO_CURSOR,
    encode_cursor,
    decode_cursor,
    offset_to_cursor,
    cursor_to_offset
)
from .list_connection import (
    list_connection,
    get_edge_nodes,
    replace_edge_nodes,
    to_global_id,
    from_global_id
)
from .pager import PageReader, get_connection

__all__ = [
    "Connection",
    "Edge",
    "PageInfo",
    "PagedResult",
    "empty_connection",
    "CursorPosition",
    "ZERO_CURSOR",
    "encode_cursor",
    "decode_cursor",
    "offset_to_cursor",
    "cursor_to_offset",
    "list_connection",
    "get_edge_nodes",
    "replace_edge_nodes",
    "to_global_id",
    "from_global_id",
    "PageReader",
    "get_connection"
]
