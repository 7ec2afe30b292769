"""Graph-based recommendations with a TTL cache."""

from rankflow.recommendations.cache import RecommendationCache, RedisRecommendationCache
from rankflow.recommendations.engine import RecommendationEngine
from rankflow.recommendations.metrics import RecommendationMetrics
from rankflow.recommendations.models import RecommendationResult, RecommendationType


__all__ = [
    "RecommendationCache",
    "RecommendationEngine",
    "RecommendationMetrics",
    "RecommendationResult",
    "RecommendationType",
    "RedisRecommendationCache",
]
