"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/loader.py.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Hashable
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

logger = logging.getLogger("extjwt.cache")

_MISSING = object()


class CacheLoader(Generic[K, V]):
    """
    Get-or-load cache with validity checks and single-flight loads.

    ``load(key)`` produces a value; ``assert_valid(value)`` raises when a
    value may no longer be served. Settled values live in one map and
    in-flight loads in another, so a key is either settled or pending from
    the point of view of ``get``. At most one load per key is outstanding.

    Failed loads are logged at WARNING unless the error is an instance of
    ``expected_errors``, which callers treat as a normal outcome.
    """

    def __init__(
        self,
        load: Callable[[K], Awaitable[V]],
        assert_valid: Callable[[V], None],
        *,
        expected_errors: tuple[type[BaseException], ...] = (),
    ) -> None:
        self._load_fn = load
        self._assert_valid = assert_valid
        self._expected_errors = expected_errors
        self._cache: dict[K, V] = {}
        self._loading: dict[K, asyncio.Future[V]] = {}

    def get(self, key: K) -> V | asyncio.Future[V]:
        """
        Return a valid cached value, or the shared future of its load.

        Must be called from a running event loop when a load is needed.
        """
        pending = self._loading.get(key)
        if pending is not None:
            return pending

        cached = self._cache.get(key, _MISSING)
        if cached is not _MISSING:
            try:
                self._assert_valid(cached)  # type: ignore[arg-type]
            except Exception as exc:
                logger.warning("Cached value for %r failed validation: %s", key, exc)
                self._cache.pop(key, None)
            else:
                return cached  # type: ignore[return-value]

        return self.load(key)

    def load(self, key: K) -> asyncio.Future[V]:
        """Start a load for ``key`` or join the one already in flight."""
        pending = self._loading.get(key)
        if pending is not None:
            return pending

        task: asyncio.Task[V] = asyncio.ensure_future(self._settle(key))
        self._loading[key] = task
        task.add_done_callback(lambda done: self._report(key, done))
        return task

    async def _settle(self, key: K) -> V:
        try:
            value = await self._load_fn(key)
            self._assert_valid(value)
            self._cache[key] = value
            return value
        finally:
            self._loading.pop(key, None)

    def _report(self, key: K, task: asyncio.Future[V]) -> None:
        if task.cancelled():
            logger.debug("Load for %r was cancelled", key)
            return
        exc = task.exception()
        if exc is None:
            return
        if isinstance(exc, self._expected_errors):
            logger.debug("Load for %r ended with %s", key, type(exc).__name__)
        else:
            logger.warning("Load for %r failed: %s", key, exc)

    def peek(self, key: K) -> V | None:
        """Return the settled value for ``key`` without validating it."""
        return self._cache.get(key)

    def is_loading(self, key: K) -> bool:
        return key in self._loading

    def invalidate(self, key: K) -> None:
        """Drop the settled value for ``key``; an in-flight load is kept."""
        self._cache.pop(key, None)

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
