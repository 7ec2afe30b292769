"""Metrics collection for the recommendation engine."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class RecommendationMetrics:
    """Metrics for recommendation queries.

    Attributes:
        cache_hits: Queries answered from the cache.
        cache_misses: Queries that had to be computed.
        queries_by_type: Graph traversals run per recommendation type.
        empty_by_type: Results returned empty because the graph was down.
    """

    cache_hits: int = 0
    cache_misses: int = 0
    queries_by_type: dict[str, int] = field(default_factory=dict)
    empty_by_type: dict[str, int] = field(default_factory=dict)

    _instance: ClassVar["RecommendationMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RecommendationMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_cache_hit(self) -> None:
        """Record a cache hit."""
        self.cache_hits += 1

    def record_cache_miss(self) -> None:
        """Record a cache miss."""
        self.cache_misses += 1

    def record_query(self, rec_type: str) -> None:
        """Record a graph traversal.

        Args:
            rec_type: Recommendation type value.
        """
        self.queries_by_type[rec_type] = self.queries_by_type.get(rec_type, 0) + 1

    def record_empty(self, rec_type: str) -> None:
        """Record an empty result caused by graph unavailability."""
        self.empty_by_type[rec_type] = self.empty_by_type.get(rec_type, 0) + 1

    @property
    def hit_ratio(self) -> float:
        """Fraction of lookups served from the cache (0.0-1.0)."""
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return 0.0
        return self.cache_hits / lookups

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric values.
        """
        return {
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "hit_ratio": round(self.hit_ratio, 4),
            "queries_by_type": dict(self.queries_by_type),
            "empty_by_type": dict(self.empty_by_type),
        }
