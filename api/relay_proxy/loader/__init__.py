"""Request-scoped batching loader for resources fetched by reference."""

from .batch_loader import BatchingResourceLoader, FetchFunction, is_blank_reference

__all__ = [
    "BatchingResourceLoader",
    "FetchFunction",
    "is_blank_reference"
]
