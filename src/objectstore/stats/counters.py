"""Request counters for the /stats endpoint."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from redis import Redis
from redis.exceptions import RedisError

from src.objectstore.errors import StatsUnavailable

logger = logging.getLogger("objectstore.stats")

COUNTER_NAMES = ("uploads", "gets", "deletes")


class StatsCounter(ABC):
    """
    Contract for the counters the service reports.
    Callers increment only after an operation has been confirmed.
    """

    @abstractmethod
    def increment(self, name: str) -> None:
        ...

    @abstractmethod
    def snapshot(self) -> Dict[str, int]:
        """Return the current value of every counter in COUNTER_NAMES."""
        ...

    def is_available(self) -> bool:
        """Whether the backend holding the counters can be reached."""
        return True


class InMemoryStatsCounter(StatsCounter):
    """Process-local counters guarded by a lock."""

    def __init__(self):
        self._counts: Dict[str, int] = {name: 0 for name in COUNTER_NAMES}
        self._lock = threading.Lock()

    def increment(self, name: str) -> None:
        if name not in self._counts:
            raise KeyError(f"Unknown counter: {name}")
        with self._lock:
            self._counts[name] += 1

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)


class RedisStatsCounter(StatsCounter):
    """Counters shared by every worker process through Redis INCR."""

    def __init__(self, redis_url: str, key_prefix: str = "objectstore:stats", client: Optional[Redis] = None):
        self._redis = client or Redis.from_url(redis_url, decode_responses=True)
        self._key_prefix = key_prefix

    def _key(self, name: str) -> str:
        return f"{self._key_prefix}:{name}"

    def increment(self, name: str) -> None:
        if name not in COUNTER_NAMES:
            raise KeyError(f"Unknown counter: {name}")
        try:
            self._redis.incr(self._key(name))
        except RedisError as e:
            # Best-effort: the counted operation has already completed
            logger.warning(f"Failed to increment counter {name}: {e}")

    def snapshot(self) -> Dict[str, int]:
        try:
            values = self._redis.mget([self._key(name) for name in COUNTER_NAMES])
        except RedisError as e:
            logger.error(f"Failed to read counters: {e}")
            raise StatsUnavailable() from e
        return {name: int(value or 0) for name, value in zip(COUNTER_NAMES, values)}

    def is_available(self) -> bool:
        try:
            return bool(self._redis.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
