"""
Fixtures shared by the application tests.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Union

import pytest

from shared.errors import StoreUnavailable
from shared.metrics import MetricsCollector


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.advance(seconds)

    def datetime(self) -> datetime:
        return datetime.fromtimestamp(self.now, timezone.utc)


class FakeStore:
    """In-memory KeyValueStore honouring TTLs against a ManualClock."""

    def __init__(self, clock: ManualClock):
        self.clock = clock
        self.data: Dict[str, Tuple[Union[str, bytes], Optional[float]]] = {}
        self.calls: List[tuple] = []
        self.available = True

    def _check(self) -> None:
        if not self.available:
            raise StoreUnavailable("Fake store is down")

    def _live(self, key: str):
        entry = self.data.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return None
        return payload

    async def get(self, key: str):
        self._check()
        self.calls.append(("get", key))
        return self._live(key)

    async def set(self, key: str, value, ttl: Optional[float] = None) -> None:
        self._check()
        self.calls.append(("set", key, value, ttl))
        expires_at = self.clock() + ttl if ttl else None
        self.data[key] = (value, expires_at)

    async def delete(self, key: str) -> int:
        self._check()
        self.calls.append(("delete", key))
        if self._live(key) is None:
            return 0
        del self.data[key]
        return 1

    def writes(self) -> List[tuple]:
        return [call for call in self.calls if call[0] == "set"]


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store(clock):
    return FakeStore(clock)


@pytest.fixture
def metrics():
    return MetricsCollector("test")
