"""Time-boxed cache in front of the recommendation traversals."""

from typing import Protocol

import redis
import structlog
from pydantic import ValidationError
from redis.exceptions import RedisError

from rankflow.recommendations.models import RecommendationResult


logger = structlog.get_logger()


class RecommendationCache(Protocol):
    """Protocol for recommendation result storage.

    Entries expire by TTL only; nothing invalidates them on graph writes.
    """

    def get(self, key: str) -> RecommendationResult | None:
        """Return the cached result, or None on a miss."""
        ...

    def set(self, key: str, result: RecommendationResult, ttl_seconds: int) -> None:
        """Store a result for ``ttl_seconds``."""
        ...


class RedisRecommendationCache:
    """Recommendation cache stored as JSON strings in Redis.

    The cache is best effort: an unreachable Redis or an unreadable entry is
    logged and behaves as a miss, so recommendations are recomputed.
    """

    def __init__(self, client: redis.Redis) -> None:
        """Initialize the cache.

        Args:
            client: Redis client created with ``decode_responses=True``.
        """
        self._client = client
        self._log = logger.bind(component="recommendation_cache")

    @classmethod
    def from_url(cls, url: str) -> "RedisRecommendationCache":
        """Create a cache from a Redis URL."""
        return cls(redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> RecommendationResult | None:
        """Return the cached result, or None on a miss or failure."""
        try:
            raw = self._client.get(key)
        except RedisError as e:
            self._log.warning("recommendation_cache_read_failed", key=key, error=str(e))
            return None
        if raw is None:
            return None

        try:
            return RecommendationResult.model_validate_json(raw)
        except ValidationError as e:
            self._log.warning(
                "recommendation_cache_entry_invalid", key=key, error_count=e.error_count()
            )
            return None

    def set(self, key: str, result: RecommendationResult, ttl_seconds: int) -> None:
        """Store a result with ``SET key value EX ttl``."""
        try:
            self._client.set(key, result.model_dump_json(), ex=ttl_seconds)
        except RedisError as e:
            self._log.warning("recommendation_cache_write_failed", key=key, error=str(e))
