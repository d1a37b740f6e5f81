"""
Redis collection types: lists, sets, sorted sets and hashes.
"""

from typing import Any, Dict

from shared.logging import get_logger
from ..store.redis_store import RedisStore

SHOPPING_LIST = "shopping_list"
FRUITS = "fruits"
CITRUS = "citrus"
LEADERBOARD = "leaderboard"
USER_HASH = "user:1001"


class DataStructures:
    """Each example starts from a clean key so repeated runs print the same thing."""

    def __init__(self, store: RedisStore):
        self.store = store
        self.logger = get_logger("learning.examples.structures")

    async def list_operations(self) -> Dict[str, Any]:
        client = self.store.client
        await client.delete(SHOPPING_LIST)

        await client.lpush(SHOPPING_LIST, "milk", "bread", "eggs")
        await client.rpush(SHOPPING_LIST, "cheese", "butter")

        result = {
            "all_items": await client.lrange(SHOPPING_LIST, 0, -1),
            "first": await client.lindex(SHOPPING_LIST, 0),
            "last": await client.lindex(SHOPPING_LIST, -1),
            "length": await client.llen(SHOPPING_LIST),
            "popped": await client.lpop(SHOPPING_LIST),
        }
        result["after_pop"] = await client.lrange(SHOPPING_LIST, 0, -1)

        self.logger.info("LIST", **result)
        return result

    async def set_operations(self) -> Dict[str, Any]:
        client = self.store.client
        await client.delete(FRUITS, CITRUS)

        # "apple" twice: sets keep one copy
        await client.sadd(FRUITS, "apple", "banana", "orange", "apple")

        result: Dict[str, Any] = {
            "fruits": sorted(await client.smembers(FRUITS)),
            "has_apple": bool(await client.sismember(FRUITS, "apple")),
            "has_grape": bool(await client.sismember(FRUITS, "grape")),
            "count": await client.scard(FRUITS),
        }

        await client.srem(FRUITS, "banana")
        result["after_remove"] = sorted(await client.smembers(FRUITS))

        await client.sadd(CITRUS, "orange", "lemon", "lime")
        result["intersection"] = sorted(await client.sinter(FRUITS, CITRUS))
        result["union"] = sorted(await client.sunion(FRUITS, CITRUS))

        self.logger.info("SET", **result)
        return result

    async def sorted_set_operations(self) -> Dict[str, Any]:
        client = self.store.client
        await client.delete(LEADERBOARD)

        await client.zadd(LEADERBOARD, {
            "player1": 100,
            "player2": 150,
            "player3": 75,
            "player4": 200,
        })

        with_scores = await client.zrange(LEADERBOARD, 0, -1, withscores=True)
        result = {
            "ascending": await client.zrange(LEADERBOARD, 0, -1),
            "descending": await client.zrevrange(LEADERBOARD, 0, -1),
            "with_scores": [(member, score) for member, score in with_scores],
            "player2_rank": await client.zrank(LEADERBOARD, "player2"),
            "player2_score": await client.zscore(LEADERBOARD, "player2"),
            "count_100_200": await client.zcount(LEADERBOARD, 100, 200),
        }

        self.logger.info("SORTED SET", **result)
        return result

    async def hash_operations(self) -> Dict[str, Any]:
        client = self.store.client
        await client.delete(USER_HASH)

        await client.hset(USER_HASH, mapping={
            "name": "Nguyen Van A",
            "email": "nguyenvana@example.com",
            "age": "30",
            "city": "Ho Chi Minh",
        })

        result: Dict[str, Any] = {
            "name": await client.hget(USER_HASH, "name"),
            "email": await client.hget(USER_HASH, "email"),
            "all_fields": await client.hgetall(USER_HASH),
            "keys": await client.hkeys(USER_HASH),
            "values": await client.hvals(USER_HASH),
            "has_age": bool(await client.hexists(USER_HASH, "age")),
            "has_phone": bool(await client.hexists(USER_HASH, "phone")),
        }

        await client.hincrby(USER_HASH, "age", 1)
        result["age_after_increment"] = await client.hget(USER_HASH, "age")

        await client.hdel(USER_HASH, "city")
        result["after_delete"] = await client.hgetall(USER_HASH)

        self.logger.info("HASH", **result)
        return result

    async def run_all_examples(self) -> Dict[str, Any]:
        """Run every data structure example in order."""
        results: Dict[str, Any] = {}
        try:
            results["list_operations"] = await self.list_operations()
            results["set_operations"] = await self.set_operations()
            results["sorted_set_operations"] = await self.sorted_set_operations()
            results["hash_operations"] = await self.hash_operations()
        except Exception as e:
            self.logger.error("Data structure examples failed", completed=list(results), error=str(e))
            raise

        self.logger.info("All data structure examples completed")
        return results
