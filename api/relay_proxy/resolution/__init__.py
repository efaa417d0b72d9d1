"""Request-scoped resolution of connections and link expansions."""

from .expand import ExpandTree, parse_expand, split_expand
from .resolver import ResourceResolver, add_global_id

__all__ = [
    "ExpandTree",
    "parse_expand",
    "split_expand",
    "ResourceResolver",
    "add_global_id"
]
