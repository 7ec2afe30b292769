"""Graph-based recommendations fronted by a TTL cache."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import structlog

from rankflow.graph.models import GraphStatistics
from rankflow.graph.store import GraphStore
from rankflow.recommendations.cache import RecommendationCache
from rankflow.recommendations.constants import (
    ALGORITHM_COMMON_FOLLOWERS,
    ALGORITHM_COMMON_TAGS_AND_CATEGORIES,
    ALGORITHM_FOLLOWER_COUNT,
    ALGORITHM_LIKES_INTERACTION,
    ALGORITHM_TAGS_AND_CATEGORIES,
    CACHE_KEY_PREFIX,
    DEFAULT_RECOMMENDATION_LIMIT,
)
from rankflow.recommendations.metrics import RecommendationMetrics
from rankflow.recommendations.models import RecommendationResult, RecommendationType
from rankflow.settings import RecommendationLimits
from rankflow.sync.models import GraphSyncStats
from rankflow.sync.pipeline import GraphSyncPipeline


logger = structlog.get_logger()


def _utc_now() -> datetime:
    return datetime.now(UTC)


class RecommendationEngine:
    """Answers recommendation queries over the social/content graph.

    Every query follows the same steps:

    1. Clamp the requested limit to the per-type maximum.
    2. Look the result up in the cache, keyed by type, subject and limit.
    3. On a miss, return an empty result tagged ``{"empty": True}`` if the
       graph is unavailable; otherwise run the traversal, wrap the rows and
       cache them for ``cache_ttl`` seconds.

    Empty results caused by an unavailable graph are not cached, so a
    recovered graph is visible as soon as its adapter re-probes. This
    includes a connection lost while the traversal ran.
    """

    def __init__(  # noqa: PLR0913
        self,
        graph: GraphStore,
        cache: RecommendationCache,
        limits: RecommendationLimits | None = None,
        pipeline: GraphSyncPipeline | None = None,
        metrics: RecommendationMetrics | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the engine.

        Args:
            graph: Graph store to query.
            cache: Result cache.
            limits: Per-type caps, threshold and cache TTL.
            pipeline: Graph synchronization pipeline used by
                ``sync_from_database``.
            metrics: Metrics collector (default: process-wide instance).
            clock: Source of ``generated_at`` timestamps.
        """
        self._graph = graph
        self._cache = cache
        self._limits = limits or RecommendationLimits()
        self._pipeline = pipeline
        self._metrics = metrics or RecommendationMetrics.get_instance()
        self._clock = clock
        self._log = logger.bind(component="recommendations")

    # ===== Queries =====

    def get_recommended_users(
        self, user_id: str, limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> RecommendationResult:
        """Suggest users followed by the people ``user_id`` follows.

        Items: ``{id, name, username, common_followers}``.
        """
        limit = _clamp(limit, self._limits.max_users)
        return self._remember(
            f"{CACHE_KEY_PREFIX}:users:{user_id}:{limit}",
            RecommendationType.USERS,
            lambda: self._graph.users_with_common_follows(user_id, limit),
            {"algorithm": ALGORITHM_COMMON_FOLLOWERS},
            for_user_id=user_id,
        )

    def get_recommended_articles(
        self, user_id: str, limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> RecommendationResult:
        """Suggest published articles similar to the ones a user liked.

        Items: ``{id, title, slug, author_id, relevance_score}``. Articles
        the user already liked are excluded.
        """
        limit = _clamp(limit, self._limits.max_articles)
        return self._remember(
            f"{CACHE_KEY_PREFIX}:articles:{user_id}:{limit}",
            RecommendationType.ARTICLES,
            lambda: self._graph.recommended_articles_for_user(user_id, limit),
            {"algorithm": ALGORITHM_TAGS_AND_CATEGORIES},
            for_user_id=user_id,
        )

    def get_related_articles(
        self, article_id: str, limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> RecommendationResult:
        """Find published articles sharing tags or categories with an article.

        Items: ``{id, title, slug, author_id, common_tags}``, ranked by the
        number of shared tags and categories, then by views.
        """
        limit = _clamp(limit, self._limits.max_articles)
        return self._remember(
            f"{CACHE_KEY_PREFIX}:related:{article_id}:{limit}",
            RecommendationType.RELATED_ARTICLES,
            lambda: self._graph.related_articles(article_id, limit),
            {"algorithm": ALGORITHM_COMMON_TAGS_AND_CATEGORIES},
            for_article_id=article_id,
        )

    def get_recommended_authors(
        self, limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> RecommendationResult:
        """List authors with at least the configured number of followers.

        Items: ``{id, name, username, followers, articles}``.
        """
        limit = _clamp(limit, self._limits.max_authors)
        min_followers = self._limits.min_followers_for_influential
        return self._remember(
            f"{CACHE_KEY_PREFIX}:authors:{limit}:{min_followers}",
            RecommendationType.AUTHORS,
            lambda: self._graph.influential_authors(min_followers, limit),
            {"algorithm": ALGORITHM_FOLLOWER_COUNT, "min_followers": min_followers},
        )

    def get_topics_of_interest(
        self, user_id: str, limit: int = DEFAULT_RECOMMENDATION_LIMIT
    ) -> RecommendationResult:
        """Rank the tags and categories of the articles a user liked.

        Items: ``{name, interactions, type}`` with type ``tag`` or
        ``category``.
        """
        limit = _clamp(limit, self._limits.max_topics)
        return self._remember(
            f"{CACHE_KEY_PREFIX}:topics:{user_id}:{limit}",
            RecommendationType.TOPICS,
            lambda: self._graph.topics_of_interest(user_id, limit),
            {"algorithm": ALGORITHM_LIKES_INTERACTION},
            for_user_id=user_id,
        )

    # ===== Graph passthroughs =====

    def is_available(self) -> bool:
        """Check whether the graph store is reachable."""
        return self._graph.is_connected()

    def get_statistics(self) -> GraphStatistics:
        """Return node and relationship counts of the graph."""
        return self._graph.statistics()

    def sync_from_database(self, clear: bool = False) -> GraphSyncStats:
        """Rebuild the graph from the system of record.

        Raises:
            ValueError: If the engine was built without a pipeline.
        """
        if self._pipeline is None:
            raise ValueError("RecommendationEngine has no sync pipeline")
        return self._pipeline.sync_from_database(clear=clear)

    # ===== Internals =====

    def _remember(  # noqa: PLR0913
        self,
        cache_key: str,
        rec_type: RecommendationType,
        query: Callable[[], list[dict[str, Any]]],
        metadata: dict[str, Any],
        for_user_id: str | None = None,
        for_article_id: str | None = None,
    ) -> RecommendationResult:
        cached = self._cache.get(cache_key)
        if cached is not None:
            self._metrics.record_cache_hit()
            self._log.debug("recommendation_cache_hit", key=cache_key)
            return cached
        self._metrics.record_cache_miss()

        if not self._graph.is_connected():
            self._metrics.record_empty(rec_type.value)
            self._log.info("recommendation_graph_unavailable", type=rec_type.value)
            return RecommendationResult.empty(rec_type, for_user_id, for_article_id)

        items = query()
        if not self._graph.is_connected():
            self._metrics.record_empty(rec_type.value)
            self._log.info("recommendation_graph_lost", type=rec_type.value)
            return RecommendationResult.empty(rec_type, for_user_id, for_article_id)
        self._metrics.record_query(rec_type.value)
        result = RecommendationResult(
            type=rec_type,
            items=items,
            total_count=len(items),
            for_user_id=for_user_id,
            for_article_id=for_article_id,
            metadata={**metadata, "generated_at": self._clock().isoformat()},
        )
        self._cache.set(cache_key, result, self._limits.cache_ttl)
        self._log.debug(
            "recommendation_computed", type=rec_type.value, key=cache_key, count=len(items)
        )
        return result


def _clamp(limit: int, maximum: int) -> int:
    """Cap a requested limit to ``maximum``; non-positive limits become 0."""
    return max(0, min(limit, maximum))
