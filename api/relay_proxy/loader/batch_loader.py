"""Request-scoped batching, deduplicating and caching resource loader.

Resolvers call ``load``/``load_many`` freely; nothing is fetched until the
coordinator calls ``dispatch()``, which fetches every distinct pending
reference concurrently. Results are cached for the lifetime of the loader,
which is one request. The loader never dispatches on its own.

All mutating methods except ``dispatch`` are synchronous, so with a single
event loop they cannot interleave: the first ``load`` or ``prime`` of a
reference wins and later callers observe its entry.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

from ..errors.problem_details import UpstreamFetchError


logger = logging.getLogger(__name__)

FetchFunction = Callable[[str], Awaitable[Any]]


def is_blank_reference(ref: Optional[str]) -> bool:
    """Blank references resolve to None without a backend call."""
    return ref is None or not str(ref).strip()


class BatchingResourceLoader:
    """Batches, deduplicates and caches fetches of resources by reference.

    Usage:
        loader = BatchingResourceLoader(client.fetch_by_reference)
        father = loader.load(character["father"])
        books = loader.load_many(character["books"])
        await loader.dispatch()
        father, books = await father, await books
    """

    def __init__(self, fetch: FetchFunction, name: str = "resources"):
        """Initialize with the raw fetch-by-reference function.

        Args:
            fetch: Async callable fetching one resource by reference
            name: Label used in log records
        """
        self._fetch = fetch
        self.name = name
        self._cache: Dict[str, asyncio.Future] = {}
        self._pending: Dict[str, asyncio.Future] = {}

    def __contains__(self, ref: str) -> bool:
        return ref in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    @property
    def has_pending(self) -> bool:
        """Whether any reference is waiting for the next dispatch."""
        return bool(self._pending)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @staticmethod
    def _resolved(value: Any) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.set_result(value)
        return future

    def load(self, ref: Optional[str]) -> asyncio.Future:
        """Return a future for the resource behind ``ref``.

        Cached references (resolved or still pending) return their existing
        future. Anything else joins the pending batch and resolves on the
        next ``dispatch()``.
        """
        if is_blank_reference(ref):
            return self._resolved(None)

        future = self._cache.get(ref)
        if future is not None:
            return future

        future = asyncio.get_running_loop().create_future()
        self._cache[ref] = future
        self._pending[ref] = future
        return future

    def load_many(self, refs: Sequence[Optional[str]]) -> asyncio.Future:
        """Return a future of the resources behind ``refs`` in input order.

        The returned future is the caller's own. Cancelling it leaves the
        shared per-reference futures alone. If several references fail it
        raises the error of the first one in input order.
        """
        if not refs:
            return self._resolved([])

        futures = [self.load(ref) for ref in refs]
        joined = asyncio.get_running_loop().create_future()

        def join(_: asyncio.Future) -> None:
            if joined.done() or not all(future.done() for future in futures):
                return
            if any(future.cancelled() for future in futures):
                joined.cancel()
                return
            # Reading every exception marks all of them as retrieved
            errors = [future.exception() for future in futures]
            failure = next((error for error in errors if error is not None), None)
            if failure is not None:
                joined.set_exception(failure)
            else:
                joined.set_result([future.result() for future in futures])

        for future in set(futures):
            future.add_done_callback(join)
        return joined

    def prime(self, ref: Optional[str], value: Any) -> bool:
        """Seed the cache with an already known value.

        Never overwrites an entry that is cached or pending.

        Returns:
            True if the value was stored
        """
        if is_blank_reference(ref) or ref in self._cache:
            return False
        self._cache[ref] = self._resolved(value)
        return True

    def prime_many(self, items: Iterable[Any], key: Callable[[Any], Optional[str]]) -> int:
        """Prime every item under the reference ``key(item)`` returns."""
        primed = 0
        for item in items:
            if self.prime(key(item), item):
                primed += 1
        return primed

    def prime_from_page(self, items: Iterable[Any], key_field: str = "url") -> int:
        """Prime the items of a page read, keyed by their reference field."""
        return self.prime_many(
            items,
            key=lambda item: item.get(key_field) if isinstance(item, dict) else None
        )

    def clear(self, ref: str) -> None:
        """Evict ``ref`` from the cache. A pending fetch still resolves its waiters."""
        self._cache.pop(ref, None)

    def clear_all(self) -> None:
        """Evict every cache entry. Pending fetches still resolve their waiters."""
        self._cache.clear()

    async def _fetch_one(self, ref: str) -> Any:
        try:
            return await self._fetch(ref)
        except UpstreamFetchError:
            raise
        except Exception as e:
            raise UpstreamFetchError(f"Failed to fetch {ref}: {e}", reference=ref) from e

    async def dispatch(self) -> int:
        """Fetch every pending reference concurrently and resolve the waiters.

        All fetches complete before any future is resolved. A failed fetch
        fails only the futures waiting on that reference and is evicted so a
        later load may try again.

        Returns:
            Number of distinct references fetched
        """
        if not self._pending:
            return 0

        batch = self._pending
        self._pending = {}
        refs: List[str] = list(batch)

        logger.debug(f"Dispatching {len(refs)} {self.name} references")
        results = await asyncio.gather(
            *(self._fetch_one(ref) for ref in refs),
            return_exceptions=True
        )

        failures = 0
        for ref, result in zip(refs, results):
            future = batch[ref]
            if future.done():
                continue
            if isinstance(result, BaseException):
                failures += 1
                if self._cache.get(ref) is future:
                    del self._cache[ref]
                future.set_exception(result)
            else:
                future.set_result(result)

        if failures:
            logger.warning(
                f"Dispatched {len(refs)} {self.name} references, {failures} failed",
                extra={"batch_size": len(refs), "failures": failures}
            )
        else:
            logger.info(
                f"Dispatched {len(refs)} {self.name} references",
                extra={"batch_size": len(refs)}
            )
        return len(refs)
