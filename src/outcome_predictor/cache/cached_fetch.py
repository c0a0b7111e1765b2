"""
Cache-fronted upstream fetching.

CachedFetcher is the only way a configured provider gets called: callers
hand it a key and a zero-argument fetch function, and it decides whether
the upstream call is needed at all. The fetch runs outside the cache lock,
on a worker thread bounded by a timeout; the result is committed only if
the caller has not cancelled in the meantime.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable, Generic, Optional, TypeVar

from outcome_predictor.cache.ttl_cache import TTLCache
from outcome_predictor.cancellation import CancellationToken, check_cancelled
from outcome_predictor.errors import ProviderUnavailable

logger = logging.getLogger(__name__)

V = TypeVar("V")

_MISSING = object()


class CachedFetcher(Generic[V]):
    """
    Read-through wrapper around a TTLCache for one upstream category.

    Parameters
    ----------
    cache:
        The cache instance owned by this data category.
    provider_name:
        Used in ProviderUnavailable errors and log lines.
    timeout_seconds:
        Upper bound on a single upstream call. None runs the fetch inline
        without a timeout (useful for in-process providers).
    max_workers:
        Size of the worker pool that runs upstream calls.
    """

    def __init__(
        self,
        cache: TTLCache[V],
        provider_name: str,
        timeout_seconds: Optional[float] = 10.0,
        max_workers: int = 4,
    ) -> None:
        self.cache = cache
        self.provider_name = provider_name
        self.timeout_seconds = timeout_seconds
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()
        self._max_workers = max_workers

    def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], V],
        cancel: Optional[CancellationToken] = None,
        ttl: Optional[float] = None,
    ) -> V:
        """
        Return the live cached value for `key`, fetching it on a miss.

        Raises:
            ProviderUnavailable: the upstream call failed or timed out and
                there is no live value to return.
            CancellationRequested: `cancel` fired before the fetch or before
                the commit; the cache is left untouched.
        """
        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            return cached  # type: ignore[return-value]

        logger.debug("%s cache miss for %s", self.provider_name, key)
        check_cancelled(cancel, f"{self.provider_name} fetch")
        value = self._call_upstream(fetch)
        check_cancelled(cancel, f"{self.provider_name} cache commit")
        self.cache.set(key, value, ttl=ttl)
        return value

    def refresh(
        self,
        key: str,
        fetch: Callable[[], V],
        cancel: Optional[CancellationToken] = None,
        ttl: Optional[float] = None,
    ) -> V:
        """
        Force an upstream fetch for `key`.

        If the fetch fails while a live value is still cached, the live
        value is served. Once the entry has expired the failure propagates;
        an expired value is never returned.
        """
        check_cancelled(cancel, f"{self.provider_name} fetch")
        try:
            value = self._call_upstream(fetch)
        except ProviderUnavailable as exc:
            live = self.cache.peek(key, _MISSING)
            if live is not _MISSING:
                logger.warning(
                    "%s refresh failed for %s (%s); serving cached value",
                    self.provider_name,
                    key,
                    exc.reason,
                )
                return live  # type: ignore[return-value]
            raise
        check_cancelled(cancel, f"{self.provider_name} cache commit")
        self.cache.set(key, value, ttl=ttl)
        return value

    def close(self) -> None:
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=False)

    def _call_upstream(self, fetch: Callable[[], V]) -> V:
        if self.timeout_seconds is None:
            return self._guarded(fetch)

        future = self._worker_pool().submit(self._guarded, fetch)
        try:
            return future.result(timeout=self.timeout_seconds)
        except FutureTimeoutError as exc:
            future.cancel()
            logger.warning(
                "%s fetch timed out after %.1fs", self.provider_name, self.timeout_seconds
            )
            raise ProviderUnavailable(
                self.provider_name,
                ProviderUnavailable.TIMEOUT,
                f"no response within {self.timeout_seconds}s",
            ) from exc

    def _worker_pool(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers,
                    thread_name_prefix=f"{self.provider_name}-fetch",
                )
            return self._executor

    def _guarded(self, fetch: Callable[[], V]) -> V:
        try:
            return fetch()
        except ProviderUnavailable as exc:
            logger.warning("%s fetch failed: %s", self.provider_name, exc)
            raise
