"""
Basic Redis operations: SET/GET, EXISTS, DEL, EXPIRE/TTL, MSET/MGET, INCR/DECR.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict

from shared.logging import get_logger
from ..store.redis_store import RedisStore


class BasicOperations:
    """String-key commands, one example per method."""

    def __init__(
        self,
        store: RedisStore,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        ttl_wait: float = 3.0,
    ):
        self.store = store
        self.sleep = sleep
        self.ttl_wait = ttl_wait
        self.logger = get_logger("learning.examples.basic")

    async def set_and_get(self) -> Dict[str, Any]:
        """SET three string keys and GET them back."""
        client = self.store.client

        await client.set("name", "Nguyen Van A")
        await client.set("age", "25")
        await client.set("city", "Ho Chi Minh")

        result = {
            "name": await client.get("name"),
            "age": await client.get("age"),
            "city": await client.get("city"),
        }
        self.logger.info("SET/GET", **result)
        return result

    async def check_exists(self) -> Dict[str, Any]:
        """EXISTS on a present and a missing key."""
        client = self.store.client

        result = {
            "name": bool(await client.exists("name")),
            "email": bool(await client.exists("email")),
        }
        self.logger.info("EXISTS", name_exists=result["name"], email_exists=result["email"])
        return result

    async def delete_keys(self) -> Dict[str, Any]:
        """DEL a key and confirm it is gone."""
        client = self.store.client

        deleted = await client.delete("city")
        still_exists = bool(await client.exists("city"))

        self.logger.info("DEL", deleted=deleted, still_exists=still_exists)
        return {"deleted": deleted, "still_exists": still_exists}

    async def expire_and_ttl(self) -> Dict[str, Any]:
        """EXPIRE a key for 10 seconds and read its TTL twice."""
        client = self.store.client

        await client.set("temp_data", "This will expire in 10 seconds")
        await client.expire("temp_data", 10)
        ttl = await client.ttl("temp_data")
        self.logger.info("EXPIRE/TTL", key="temp_data", ttl_seconds=ttl)

        await self.sleep(self.ttl_wait)
        ttl_after = await client.ttl("temp_data")
        self.logger.info("TTL after wait", waited=self.ttl_wait, ttl_seconds=ttl_after)

        return {"ttl": ttl, "ttl_after": ttl_after}

    async def multiple_operations(self) -> Dict[str, Any]:
        """MSET two users' fields at once and MGET them per user."""
        client = self.store.client

        await client.mset({
            "user:1:name": "Alice",
            "user:1:email": "alice@example.com",
            "user:1:age": "30",
            "user:2:name": "Bob",
            "user:2:email": "bob@example.com",
            "user:2:age": "25",
        })

        user1 = await client.mget(["user:1:name", "user:1:email", "user:1:age"])
        user2 = await client.mget(["user:2:name", "user:2:email", "user:2:age"])

        self.logger.info("MSET/MGET", user1=user1, user2=user2)
        return {"user1": user1, "user2": user2}

    async def increment_decrement(self) -> Dict[str, Any]:
        """INCR, DECR and INCRBY on a counter."""
        client = self.store.client

        await client.set("counter", "0")
        for _ in range(3):
            await client.incr("counter")
        after_incr = int(await client.get("counter"))

        await client.decr("counter")
        after_decr = int(await client.get("counter"))

        await client.incrby("counter", 5)
        after_incrby = int(await client.get("counter"))

        self.logger.info(
            "INCR/DECR",
            after_incr=after_incr,
            after_decr=after_decr,
            after_incrby=after_incrby
        )
        return {"after_incr": after_incr, "after_decr": after_decr, "after_incrby": after_incrby}

    async def run_all_examples(self) -> Dict[str, Any]:
        """Run every basic example in order."""
        results: Dict[str, Any] = {}
        try:
            results["set_and_get"] = await self.set_and_get()
            results["check_exists"] = await self.check_exists()
            results["delete_keys"] = await self.delete_keys()
            results["expire_and_ttl"] = await self.expire_and_ttl()
            results["multiple_operations"] = await self.multiple_operations()
            results["increment_decrement"] = await self.increment_decrement()
        except Exception as e:
            self.logger.error("Basic operations failed", completed=list(results), error=str(e))
            raise

        self.logger.info("All basic examples completed")
        return results
