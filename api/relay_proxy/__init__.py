"""Relay Proxy: cursor connections and batched loading over a page-oriented REST API."""

__version__ = "1.0.0"
