"""
Store package.

Provides the injected Redis handle and the minimal ``KeyValueStore``
protocol the caching helpers are written against.
"""

from .redis_store import KeyValueStore, RedisStore, ttl_seconds

__all__ = ["KeyValueStore", "RedisStore", "ttl_seconds"]
