"""
Redis connection handle.

One ``RedisStore`` is created by the runner and passed to every consumer;
nothing in the project reaches for a process-wide client.
"""

from contextlib import contextmanager
from datetime import timedelta
from typing import Any, Dict, Optional, Protocol, Union

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from shared.config import LearningConfig
from shared.errors import SerializationError, StoreUnavailable
from shared.logging import get_logger
from shared.metrics import MetricsCollector

Payload = Union[str, bytes]
TTL = Union[int, float, timedelta, None]


class KeyValueStore(Protocol):
    """Minimal store interface needed by the cache-aside accessor."""

    async def get(self, key: str) -> Optional[Payload]:
        ...

    async def set(self, key: str, value: Payload, ttl: Optional[float] = None) -> None:
        ...

    async def delete(self, key: str) -> int:
        ...


def ttl_seconds(ttl: TTL) -> Optional[float]:
    """Normalize a ttl to seconds; ``None`` means no expiry."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        ttl = ttl.total_seconds()
    return float(ttl) if ttl > 0 else None


class RedisStore:
    """Redis client lifecycle plus the get/set/delete subset used for caching."""

    def __init__(self, config: LearningConfig, metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.metrics = metrics
        self.logger = get_logger("learning.store")
        self._client: Optional[redis.Redis] = None
        self._raw_client: Optional[redis.Redis] = None

    async def __aenter__(self) -> "RedisStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    def _create_client(self, decode_responses: bool = True) -> redis.Redis:
        return redis.from_url(
            self.config.redis_url,
            encoding="utf-8",
            decode_responses=decode_responses,
            socket_connect_timeout=self.config.redis_socket_timeout,
            socket_timeout=self.config.redis_socket_timeout,
            retry_on_timeout=True,
            health_check_interval=30
        )

    async def connect(self) -> None:
        """Create the client and verify the server answers."""
        if self._client is not None:
            return

        client = self._create_client()
        try:
            await client.ping()
        except (RedisConnectionError, RedisTimeoutError) as e:
            self.logger.error(
                "Failed to connect to Redis",
                host=self.config.redis_host,
                port=self.config.redis_port,
                error=str(e)
            )
            await client.aclose()
            raise StoreUnavailable(
                f"Cannot reach Redis at {self.config.redis_host}:{self.config.redis_port}",
                {"error": str(e)}
            ) from e

        self._client = client
        self._raw_client = self._create_client(decode_responses=False)
        self.logger.info(
            "Redis client ready",
            host=self.config.redis_host,
            port=self.config.redis_port,
            db=self.config.redis_db
        )

    async def disconnect(self) -> None:
        """Close the client; safe to call more than once."""
        if self._client is None:
            return
        client, self._client = self._client, None
        raw_client, self._raw_client = self._raw_client, None
        await client.aclose()
        if raw_client is not None:
            await raw_client.aclose()
        self.logger.info("Redis client disconnected")

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> redis.Redis:
        """The live redis client, for commands outside the caching subset."""
        if self._client is None:
            raise StoreUnavailable("Redis client is not connected")
        return self._client

    @property
    def payload_client(self) -> redis.Redis:
        """Client returning raw bytes; cache payloads are decoded by the serializer."""
        if self._raw_client is None:
            raise StoreUnavailable("Redis client is not connected")
        return self._raw_client

    @contextmanager
    def _command(self, command: str):
        """Translate connection failures and time the command."""
        try:
            if self.metrics:
                with self.metrics.time_command(command):
                    yield
            else:
                yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            self.logger.error("Redis command failed", command=command, error=str(e))
            raise StoreUnavailable(f"Redis {command} failed", {"error": str(e)}) from e

    async def get(self, key: str) -> Optional[bytes]:
        with self._command("get"):
            try:
                return await self.payload_client.get(key)
            except ResponseError as e:
                if not str(e).startswith("WRONGTYPE"):
                    raise
                raise SerializationError(
                    "Key does not hold a cache payload",
                    {"key": key, "error": str(e)}
                ) from e

    async def set(self, key: str, value: Payload, ttl: Optional[float] = None) -> None:
        """Write ``value``; a positive ``ttl`` (seconds) sets an expiry."""
        seconds = ttl_seconds(ttl)
        with self._command("set"):
            if seconds is None:
                await self.payload_client.set(key, value)
            elif seconds.is_integer():
                await self.payload_client.set(key, value, ex=int(seconds))
            else:
                # PX 0 is rejected by the server
                await self.payload_client.set(key, value, px=max(1, round(seconds * 1000)))

    async def delete(self, key: str) -> int:
        with self._command("delete"):
            return await self.payload_client.delete(key)

    async def ping(self) -> bool:
        with self._command("ping"):
            return bool(await self.client.ping())

    async def info(self, section: Optional[str] = None) -> Dict[str, Any]:
        """Server INFO as a dict."""
        with self._command("info"):
            if section:
                return await self.client.info(section)
            return await self.client.info()

    async def memory_usage(self) -> Optional[str]:
        """Human readable memory in use, e.g. ``1.02M``."""
        info = await self.info("memory")
        return info.get("used_memory_human")

    async def flush_all(self) -> None:
        with self._command("flushall"):
            await self.client.flushall()
        self.logger.warning("Flushed all Redis databases")

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            return await self.ping()
        except StoreUnavailable:
            return False
