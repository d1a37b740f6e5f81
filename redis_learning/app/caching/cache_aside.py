"""
Cache-aside accessor.

Looks a key up first and only runs the producing function on a miss, storing
its result with a time-to-live. Two concurrent misses on the same key both
compute and both write; there is no stampede protection.
"""

import inspect
import math
from datetime import timedelta
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar, Union

from shared.errors import SerializationError, ValidationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..store.redis_store import KeyValueStore, TTL, ttl_seconds
from .serializers import JsonSerializer, Serializer

T = TypeVar("T")
Compute = Callable[[], Union[T, Awaitable[T]]]


def _validate(key: str, ttl: TTL = None) -> None:
    if not isinstance(key, str) or not key:
        raise ValidationError("Cache key must be a non-empty string", {"key": repr(key)})
    if ttl is None:
        return
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float, timedelta)):
        raise ValidationError("TTL must be seconds or a timedelta", {"key": key, "ttl": repr(ttl)})
    seconds = ttl.total_seconds() if isinstance(ttl, timedelta) else ttl
    if not math.isfinite(seconds):
        raise ValidationError("TTL must be finite", {"key": key, "ttl": str(ttl)})
    if seconds < 0:
        raise ValidationError("TTL must not be negative", {"key": key, "ttl": str(ttl)})


class CacheAside:
    """Cache-aside accessor over a ``KeyValueStore``."""

    def __init__(
        self,
        store: KeyValueStore,
        serializer: Optional[Serializer] = None,
        *,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.store = store
        self.serializer = serializer or JsonSerializer()
        self.metrics = metrics
        self.logger = get_logger("learning.cache")

    def _record(self, result: str) -> None:
        if self.metrics:
            self.metrics.record_cache_lookup(result)

    async def _lookup(self, key: str) -> Tuple[bool, Any]:
        """Return ``(hit, value)``; an undecodable entry counts as a miss."""
        try:
            payload = await self.store.get(key)
            if payload is None:
                self._record("miss")
                return False, None
            value = self.serializer.loads(payload)
        except SerializationError as e:
            self.logger.warning("Discarding undecodable cache entry", key=key, error=e.message)
            self._record("decode_error")
            return False, None

        self._record("hit")
        return True, value

    async def get_or_compute(self, key: str, ttl: TTL, compute: Compute) -> Any:
        """
        Return the cached value for ``key`` or compute, store and return it.

        ``compute`` may be a plain callable or return an awaitable. It runs at
        most once per call, and only on a miss. A ``ttl`` of ``None`` or ``0``
        stores without expiry. A computed ``None`` is returned but not cached.
        """
        _validate(key, ttl)

        hit, value = await self._lookup(key)
        if hit:
            self.logger.debug("Cache hit", key=key)
            return value

        result = compute()
        if inspect.isawaitable(result):
            result = await result

        if result is None:
            self.logger.debug("Cache miss produced no value", key=key)
            return None

        await self.put(key, result, ttl)
        self.logger.debug("Cache miss", key=key, ttl=ttl_seconds(ttl))
        return result

    async def get(self, key: str) -> Any:
        """Cached value or ``None``; never computes."""
        _validate(key)
        _, value = await self._lookup(key)
        return value

    async def put(self, key: str, value: Any, ttl: TTL = None) -> None:
        """Serialize and write ``value`` unconditionally."""
        _validate(key, ttl)
        payload = self.serializer.dumps(value)
        await self.store.set(key, payload, ttl_seconds(ttl))
        if self.metrics:
            self.metrics.record_cache_write()

    async def invalidate(self, key: str) -> bool:
        """Delete ``key``; True when an entry was removed."""
        _validate(key)
        removed = await self.store.delete(key) > 0
        if self.metrics:
            self.metrics.record_invalidation(removed)
        self.logger.debug("Cache invalidated", key=key, removed=removed)
        return removed
