"""API routes for the Relay Proxy API."""

from .resources import resources_router

__all__ = ["resources_router"]
