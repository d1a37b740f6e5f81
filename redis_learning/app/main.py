"""
Runner for the Redis learning examples.

Connects once, runs the selected sections in order against the same store
handle, and always disconnects.
"""

import argparse
import asyncio
from typing import Any, Dict, List, Optional, Sequence

from shared.config import LearningConfig, get_config
from shared.errors import LearningException
from shared.logging import clear_context, configure_logging, get_logger, set_run_id, set_section
from shared.metrics import MetricsCollector, get_metrics_collector
from .examples.basic_operations import BasicOperations
from .examples.caching import CachingExamples
from .examples.data_structures import DataStructures
from .store.redis_store import RedisStore

SECTIONS = ("basic", "structures", "caching")
INFO_LINES = 10

logger = get_logger("learning.runner")


def build_suite(section: str, store: RedisStore, metrics: Optional[MetricsCollector], ttl_wait: Optional[float]):
    """Create the example suite for ``section``."""
    if section == "basic":
        return BasicOperations(store)
    if section == "structures":
        return DataStructures(store)
    if section == "caching":
        if ttl_wait is None:
            return CachingExamples(store, metrics=metrics)
        return CachingExamples(store, metrics=metrics, ttl_wait=ttl_wait)
    raise ValueError(f"Unknown section: {section}")


async def run(
    config: LearningConfig,
    sections: Sequence[str],
    *,
    flush: bool = False,
    ttl_wait: Optional[float] = None,
    store: Optional[RedisStore] = None,
    metrics: Optional[MetricsCollector] = None,
) -> Dict[str, Any]:
    """Run ``sections`` and return their results keyed by section."""
    metrics = metrics or get_metrics_collector(config.app_name)
    store = store or RedisStore(config, metrics=metrics)
    set_run_id()
    results: Dict[str, Any] = {}

    logger.info("Connecting to Redis", host=config.redis_host, port=config.redis_port)
    try:
        await store.connect()
        logger.info("Redis connection test", pong=await store.ping())

        info = await store.info()
        logger.info("Redis server info", server=dict(list(info.items())[:INFO_LINES]))

        if flush:
            await store.flush_all()

        for section in sections:
            set_section(section)
            suite = build_suite(section, store, metrics, ttl_wait)
            results[section] = await suite.run_all_examples()

        logger.info("All selected sections completed", sections=list(sections))
        logger.info("Memory usage", used_memory_human=await store.memory_usage())
    finally:
        set_section(None)
        logger.info("Closing Redis connection")
        await store.disconnect()

    return results


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the Redis learning examples.")
    parser.add_argument(
        "--section",
        choices=SECTIONS + ("all",),
        default="all",
        help="Example section to run"
    )
    parser.add_argument("--flush", action="store_true", help="FLUSHALL before running the examples")
    parser.add_argument(
        "--ttl-wait",
        type=float,
        default=None,
        help="Seconds to wait for the TTL example to expire (default: TTL + 1)"
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    config = get_config()
    configure_logging(config.app_name, config.log_level, config.log_format)

    metrics = get_metrics_collector(config.app_name)
    if config.metrics_port:
        metrics.start_metrics_server(config.metrics_port)

    sections = SECTIONS if args.section == "all" else (args.section,)
    try:
        asyncio.run(run(config, sections, flush=args.flush, ttl_wait=args.ttl_wait, metrics=metrics))
    except KeyboardInterrupt:
        return 130
    except LearningException as e:
        logger.error("Run failed", code=e.code, error=e.message, details=e.details)
        return 1
    except Exception as e:
        logger.exception("Run failed", error=str(e))
        return 1
    finally:
        clear_context()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
