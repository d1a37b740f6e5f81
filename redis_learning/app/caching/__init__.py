"""
Caching package.

A cache-aside accessor over any ``KeyValueStore`` plus the write-through,
write-behind and warming call sequences built on it. The cache is advisory:
undecodable entries are recomputed, never surfaced.
"""

from .cache_aside import CacheAside
from .patterns import WriteBehindBuffer, warm_cache, write_through
from .serializers import JsonSerializer, ModelSerializer, Serializer

__all__ = [
    "CacheAside",
    "JsonSerializer",
    "ModelSerializer",
    "Serializer",
    "WriteBehindBuffer",
    "warm_cache",
    "write_through",
]
