"""Data models for the Relay Proxy API."""

from .resources import (
    ResourceName,
    LIST_LINK_FIELDS,
    is_list_link_field
)

__all__ = [
    "ResourceName",
    "LIST_LINK_FIELDS",
    "is_list_link_field"
]
