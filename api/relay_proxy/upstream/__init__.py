"""Upstream REST API access."""

from .client import UpstreamClient, PAGE_SCHEMA, RESOURCE_SCHEMA

__all__ = [
    "UpstreamClient",
    "PAGE_SCHEMA",
    "RESOURCE_SCHEMA"
]
