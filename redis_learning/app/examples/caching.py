"""
Caching with Redis: simple cache, TTL, invalidation, warming and patterns.

Every example goes through ``CacheAside``; the "database" and "API" on the
other side are in-memory stand-ins that count how often they are hit.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..caching.cache_aside import CacheAside
from ..caching.patterns import WriteBehindBuffer, warm_cache, write_through
from ..caching.serializers import ModelSerializer
from ..store.redis_store import RedisStore
from .models import Product, User

TIME_TTL = 5
USER_TTL = 300
PRODUCT_TTL = 600
PATTERN_TTL = 300

POPULAR_PRODUCTS = [
    Product(id=1, name="iPhone 15", price=999),
    Product(id=2, name="Samsung Galaxy S24", price=899),
    Product(id=3, name="MacBook Pro", price=1999),
    Product(id=4, name="iPad Air", price=599),
    Product(id=5, name="AirPods Pro", price=249),
]


def fibonacci(n: int) -> int:
    """Deliberately slow, to give the cache something to save."""
    if n <= 1:
        return n
    return fibonacci(n - 1) + fibonacci(n - 2)


class CachingExamples:
    """Cache-aside in its common shapes."""

    def __init__(
        self,
        store: RedisStore,
        *,
        metrics: Optional[MetricsCollector] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        ttl_wait: float = TIME_TTL + 1,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.store = store
        self.metrics = metrics
        self.sleep = sleep
        self.ttl_wait = ttl_wait
        self.clock = clock
        self.logger = get_logger("learning.examples.caching")

    def _cache(self, serializer=None) -> CacheAside:
        return CacheAside(self.store, serializer, metrics=self.metrics)

    async def simple_cache(self, n: int = 10) -> Dict[str, Any]:
        """Memoize an expensive calculation without expiry."""
        cache = self._cache()
        key = f"fib:{n}"
        await cache.invalidate(key)
        computations = 0

        def compute() -> int:
            nonlocal computations
            computations += 1
            self.logger.info("Computing fibonacci", n=n)
            return fibonacci(n)

        first = await cache.get_or_compute(key, None, compute)
        second = await cache.get_or_compute(key, None, compute)

        self.logger.info("Simple cache", key=key, first=first, second=second, computations=computations)
        return {"first": first, "second": second, "computations": computations}

    async def cache_with_ttl(self) -> Dict[str, Any]:
        """A value that expires after TIME_TTL seconds and is then fetched again."""
        cache = self._cache()
        key = "current_time"
        await cache.invalidate(key)
        fetches = 0

        def fetch_time() -> str:
            nonlocal fetches
            fetches += 1
            self.logger.info("Fetching current time from API")
            return self.clock().isoformat()

        first = await cache.get_or_compute(key, TIME_TTL, fetch_time)
        second = await cache.get_or_compute(key, TIME_TTL, fetch_time)

        self.logger.info("Waiting for TTL to pass", seconds=self.ttl_wait, ttl=TIME_TTL)
        await self.sleep(self.ttl_wait)

        third = await cache.get_or_compute(key, TIME_TTL, fetch_time)

        self.logger.info("Cache with TTL", first=first, second=second, third=third, fetches=fetches)
        return {"first": first, "second": second, "third": third, "fetches": fetches}

    async def cache_invalidation(self) -> Dict[str, Any]:
        """Drop a cached user when the record behind it changes."""
        cache = self._cache(ModelSerializer(User))
        database = {
            1: User(id=1, name="Alice", email="alice@example.com"),
            2: User(id=2, name="Bob", email="bob@example.com"),
        }
        db_reads = 0

        def get_user_from_db(user_id: int) -> Optional[User]:
            nonlocal db_reads
            db_reads += 1
            self.logger.info("Fetching user from database", user_id=user_id)
            return database.get(user_id)

        async def get_user(user_id: int) -> Optional[User]:
            return await cache.get_or_compute(f"user:{user_id}", USER_TTL, lambda: get_user_from_db(user_id))

        async def update_user(user_id: int, **updates) -> Optional[User]:
            if user_id not in database:
                return None
            database[user_id] = database[user_id].model_copy(update=updates)
            await cache.invalidate(f"user:{user_id}")
            self.logger.info("User updated, cache invalidated", user_id=user_id)
            return database[user_id]

        await cache.invalidate("user:1")
        first = await get_user(1)
        cached = await get_user(1)
        updated = await update_user(1, name="Alice Updated")
        after_update = await get_user(1)

        self.logger.info("Cache invalidation", db_reads=db_reads, name_after_update=after_update.name)
        return {
            "first": first,
            "cached": cached,
            "updated": updated,
            "after_update": after_update,
            "db_reads": db_reads,
        }

    async def cache_warming(self, product_ids: Optional[List[int]] = None) -> Dict[str, Any]:
        """Pre-load popular products so the first reads are already hits."""
        cache = self._cache(ModelSerializer(Product))
        catalog = {product.id: product for product in POPULAR_PRODUCTS}
        api_calls = 0

        def get_product_from_api(product_id: int) -> Optional[Product]:
            nonlocal api_calls
            api_calls += 1
            self.logger.info("Fetching product from API", product_id=product_id)
            return catalog.get(product_id)

        warmed = await warm_cache(
            cache,
            {f"product:{product.id}": product for product in POPULAR_PRODUCTS},
            PRODUCT_TTL
        )

        products = []
        for product_id in product_ids or [1, 3]:
            products.append(await cache.get_or_compute(
                f"product:{product_id}",
                PRODUCT_TTL,
                lambda: get_product_from_api(product_id)
            ))

        self.logger.info("Cache warming", warmed=warmed, api_calls=api_calls)
        return {"warmed": warmed, "products": products, "api_calls": api_calls}

    async def cache_patterns(self) -> Dict[str, Any]:
        """Cache-aside, write-through and write-behind side by side."""
        cache = self._cache()
        database: Dict[str, Any] = {}

        async def fetch_from_database() -> str:
            return "Data from database"

        async def save_to_database(key: str, value: Any) -> None:
            self.logger.info("Writing to database", key=key)
            database[key] = value

        await cache.invalidate("test:1")
        cache_aside = await cache.get_or_compute("test:1", PATTERN_TTL, fetch_from_database)

        await write_through(cache, "test:2", "New data", save_to_database, PATTERN_TTL)

        buffer = WriteBehindBuffer(cache)
        await buffer.write("test:3", "Another data", PATTERN_TTL)
        queued = buffer.pending
        flushed = await buffer.flush(save_to_database)

        self.logger.info("Cache patterns", queued=queued, flushed=flushed, database_keys=sorted(database))
        return {
            "cache_aside": cache_aside,
            "write_through_cached": await cache.get("test:2"),
            "write_behind_queued": queued,
            "write_behind_flushed": flushed,
            "database": database,
        }

    async def run_all_examples(self) -> Dict[str, Any]:
        """Run every caching example in order."""
        results: Dict[str, Any] = {}
        try:
            results["simple_cache"] = await self.simple_cache()
            results["cache_with_ttl"] = await self.cache_with_ttl()
            results["cache_invalidation"] = await self.cache_invalidation()
            results["cache_warming"] = await self.cache_warming()
            results["cache_patterns"] = await self.cache_patterns()
        except Exception as e:
            self.logger.error("Caching examples failed", completed=list(results), error=str(e))
            raise

        self.logger.info("All caching examples completed")
        return results
