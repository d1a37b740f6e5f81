"""
Write-through, write-behind and warming call sequences.
"""

import inspect
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Mapping, Optional, Tuple, Union

from shared.logging import get_logger
from ..store.redis_store import TTL
from .cache_aside import CacheAside

Persist = Callable[[str, Any], Union[None, Awaitable[None]]]

logger = get_logger("learning.cache.patterns")


async def _call_persist(persist: Persist, key: str, value: Any) -> None:
    result = persist(key, value)
    if inspect.isawaitable(result):
        await result


async def write_through(
    cache: CacheAside,
    key: str,
    value: Any,
    persist: Persist,
    ttl: TTL = None,
) -> None:
    """Write the cache, then the system of record."""
    await cache.put(key, value, ttl)
    logger.info("Write-through: cached", key=key)
    await _call_persist(persist, key, value)
    logger.info("Write-through: persisted", key=key)


class WriteBehindBuffer:
    """
    Cache writes land immediately; persistence is queued until ``flush``.

    The buffer is explicit and caller driven: nothing flushes in the
    background.
    """

    def __init__(self, cache: CacheAside):
        self.cache = cache
        self._queue: Deque[Tuple[str, Any]] = deque()

    @property
    def pending(self) -> int:
        return len(self._queue)

    async def write(self, key: str, value: Any, ttl: TTL = None) -> None:
        await self.cache.put(key, value, ttl)
        self._queue.append((key, value))
        logger.info("Write-behind: cached and queued", key=key, pending=self.pending)

    async def flush(self, persist: Persist, limit: Optional[int] = None) -> int:
        """Persist queued writes oldest first; returns how many were flushed."""
        flushed = 0
        while self._queue and (limit is None or flushed < limit):
            key, value = self._queue[0]
            await _call_persist(persist, key, value)
            self._queue.popleft()
            flushed += 1

        logger.info("Write-behind: flushed", flushed=flushed, pending=self.pending)
        return flushed


async def warm_cache(cache: CacheAside, entries: Mapping[str, Any], ttl: TTL = None) -> int:
    """Pre-load ``entries`` into the cache; returns the count written."""
    written = 0
    for key, value in entries.items():
        await cache.put(key, value, ttl)
        written += 1

    logger.info("Cache warmed", entries=written)
    return written
