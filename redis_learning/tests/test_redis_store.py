"""
Unit tests for the Redis store handle.
"""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from redis_learning.app.store.redis_store import RedisStore, ttl_seconds
from shared.config import LearningConfig
from shared.errors import SerializationError, StoreUnavailable


@pytest.fixture
def config():
    return LearningConfig(redis_host="redis.local", redis_port=6380, redis_db=2)


@pytest.fixture
def mock_client():
    client = AsyncMock()
    client.ping.return_value = True
    return client


@pytest.fixture
def payload_client():
    return AsyncMock()


@pytest.fixture
def redis_store(config, metrics, mock_client, payload_client):
    store = RedisStore(config, metrics=metrics)

    def create_client(decode_responses=True):
        return mock_client if decode_responses else payload_client

    with patch.object(store, "_create_client", side_effect=create_client):
        yield store


class TestLifecycle:

    @pytest.mark.asyncio
    async def test_connect_pings(self, redis_store, mock_client):
        await redis_store.connect()

        mock_client.ping.assert_awaited_once()
        assert redis_store.connected
        assert redis_store.client is mock_client

    @pytest.mark.asyncio
    async def test_connect_twice_reuses_client(self, redis_store, mock_client):
        await redis_store.connect()
        await redis_store.connect()

        assert mock_client.ping.await_count == 1

    @pytest.mark.asyncio
    async def test_connect_failure_raises_store_unavailable(self, redis_store, mock_client):
        mock_client.ping.side_effect = RedisConnectionError("Connection refused")

        with pytest.raises(StoreUnavailable) as exc_info:
            await redis_store.connect()

        assert "redis.local:6380" in exc_info.value.message
        mock_client.aclose.assert_awaited_once()
        assert not redis_store.connected

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self, redis_store, mock_client, payload_client):
        await redis_store.connect()

        await redis_store.disconnect()
        await redis_store.disconnect()

        mock_client.aclose.assert_awaited_once()
        payload_client.aclose.assert_awaited_once()
        assert not redis_store.connected

    @pytest.mark.asyncio
    async def test_async_context_manager(self, redis_store, mock_client):
        async with redis_store as store:
            assert store.connected

        mock_client.aclose.assert_awaited_once()

    def test_client_before_connect(self, redis_store):
        with pytest.raises(StoreUnavailable):
            redis_store.client
        with pytest.raises(StoreUnavailable):
            redis_store.payload_client

    def test_create_client_uses_config_url(self, config):
        store = RedisStore(config)

        with patch("redis_learning.app.store.redis_store.redis.from_url") as from_url:
            store._create_client()

        assert from_url.call_args.args[0] == "redis://redis.local:6380/2"
        assert from_url.call_args.kwargs["decode_responses"] is True
        assert from_url.call_args.kwargs["socket_timeout"] == 5.0

    def test_payload_client_does_not_decode(self, config):
        store = RedisStore(config)

        with patch("redis_learning.app.store.redis_store.redis.from_url") as from_url:
            store._create_client(decode_responses=False)

        assert from_url.call_args.kwargs["decode_responses"] is False


class TestCommands:

    @pytest.mark.asyncio
    async def test_get_returns_raw_payload(self, redis_store, mock_client, payload_client):
        payload_client.get.return_value = b'"cached"'
        await redis_store.connect()

        assert await redis_store.get("k") == b'"cached"'
        payload_client.get.assert_awaited_once_with("k")
        mock_client.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_get_wrong_type_raises_serialization_error(self, redis_store, payload_client):
        payload_client.get.side_effect = ResponseError(
            "WRONGTYPE Operation against a key holding the wrong kind of value"
        )
        await redis_store.connect()

        with pytest.raises(SerializationError):
            await redis_store.get("k")

    @pytest.mark.asyncio
    async def test_get_other_response_errors_propagate(self, redis_store, payload_client):
        payload_client.get.side_effect = ResponseError("ERR unknown")
        await redis_store.connect()

        with pytest.raises(ResponseError):
            await redis_store.get("k")

    @pytest.mark.asyncio
    async def test_set_without_ttl(self, redis_store, payload_client):
        await redis_store.connect()

        await redis_store.set("k", "v")

        payload_client.set.assert_awaited_once_with("k", "v")

    @pytest.mark.asyncio
    async def test_set_whole_seconds_uses_ex(self, redis_store, payload_client):
        await redis_store.connect()

        await redis_store.set("k", "v", 300)

        payload_client.set.assert_awaited_once_with("k", "v", ex=300)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl, px", [(1.5, 1500), (1.1, 1100), (0.25, 250), (0.0004, 1)])
    async def test_set_fractional_seconds_uses_px(self, redis_store, payload_client, ttl, px):
        await redis_store.connect()

        await redis_store.set("k", "v", ttl)

        payload_client.set.assert_awaited_once_with("k", "v", px=px)

    @pytest.mark.asyncio
    async def test_delete_returns_count(self, redis_store, payload_client):
        payload_client.delete.return_value = 1
        await redis_store.connect()

        assert await redis_store.delete("k") == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [RedisConnectionError("reset"), RedisTimeoutError("timed out")])
    async def test_connection_errors_become_store_unavailable(self, redis_store, payload_client, error):
        payload_client.get.side_effect = error
        await redis_store.connect()

        with pytest.raises(StoreUnavailable) as exc_info:
            await redis_store.get("k")

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_command_before_connect(self, redis_store):
        with pytest.raises(StoreUnavailable):
            await redis_store.get("k")

    @pytest.mark.asyncio
    async def test_command_duration_recorded(self, redis_store, mock_client, metrics):
        await redis_store.connect()

        await redis_store.get("k")

        assert metrics.sample("store_command_duration_seconds_count", command="get") == 1

    @pytest.mark.asyncio
    async def test_memory_usage(self, redis_store, mock_client):
        mock_client.info.return_value = {"used_memory": 1048576, "used_memory_human": "1.00M"}
        await redis_store.connect()

        assert await redis_store.memory_usage() == "1.00M"
        mock_client.info.assert_awaited_once_with("memory")

    @pytest.mark.asyncio
    async def test_flush_all(self, redis_store, mock_client):
        await redis_store.connect()

        await redis_store.flush_all()

        mock_client.flushall.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_health_check(self, redis_store, mock_client):
        assert await redis_store.health_check() is False

        await redis_store.connect()
        assert await redis_store.health_check() is True

        mock_client.ping.side_effect = RedisTimeoutError("timed out")
        assert await redis_store.health_check() is False


@pytest.mark.parametrize("ttl, expected", [
    (None, None),
    (0, None),
    (5, 5.0),
    (0.25, 0.25),
    (timedelta(minutes=10), 600.0),
])
def test_ttl_seconds(ttl, expected):
    assert ttl_seconds(ttl) == expected
