"""Operation counters reported by the /stats endpoint."""

from functools import lru_cache

from src.objectstore.configs.config import StatsBackend, get_config

from .counters import (
    COUNTER_NAMES,
    InMemoryStatsCounter,
    RedisStatsCounter,
    StatsCounter,
)


@lru_cache
def get_stats_counter() -> StatsCounter:
    config = get_config()
    if config.stats_backend == StatsBackend.REDIS:
        return RedisStatsCounter(config.redis_url, key_prefix=config.stats_key_prefix)
    return InMemoryStatsCounter()


__all__ = [
    "COUNTER_NAMES",
    "InMemoryStatsCounter",
    "RedisStatsCounter",
    "StatsCounter",
    "get_stats_counter",
]
