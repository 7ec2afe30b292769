"""Keeps the recommendation graph consistent with the system of record."""

import time
from collections.abc import Callable, Iterable
from typing import Any

import structlog

from rankflow.graph.errors import GraphStoreError
from rankflow.graph.models import ArticleNode, EdgeType, NodeLabel, UserNode
from rankflow.graph.store import GraphStore
from rankflow.sync.metrics import GraphSyncMetrics
from rankflow.sync.models import FollowRecord, GraphSyncStats, LikeRecord, SyncOutcome
from rankflow.sync.protocols import GraphSyncSource


logger = structlog.get_logger()


class GraphSyncPipeline:
    """Applies entity changes to the graph store.

    Event handlers call the single-entity methods as users, articles, follows
    and likes change. ``sync_from_database`` streams the whole system of
    record through the same methods to rebuild the graph.

    Graph failures are logged and reported through the return value; they
    never propagate to the caller.
    """

    def __init__(
        self,
        graph: GraphStore,
        source: GraphSyncSource | None = None,
        metrics: GraphSyncMetrics | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            graph: Graph store to write to.
            source: System of record streamed by ``sync_from_database``.
            metrics: Metrics collector (default: process-wide instance).
        """
        self._graph = graph
        self._source = source
        self._metrics = metrics or GraphSyncMetrics.get_instance()
        self._log = logger.bind(component="graph_sync")

    # ===== Event-driven operations =====

    def sync_article(self, article: ArticleNode) -> bool:
        """Mirror an article into the graph.

        A published article is upserted together with its AUTHORED edge and
        its current tags and categories. Any other status removes the
        article from the graph.

        Returns:
            True if the graph was mutated.
        """
        if not article.is_published:
            return self.delete_article(article.id)
        return self._upsert_article(article) == SyncOutcome.APPLIED

    def delete_article(self, article_id: str) -> bool:
        """Remove an article and all its relationships."""
        return self._delete(
            "article", article_id, lambda: self._graph.delete_node(NodeLabel.ARTICLE, article_id)
        )

    def sync_user(self, user: UserNode) -> bool:
        """Upsert a user node."""
        return self._upsert_user(user) == SyncOutcome.APPLIED

    def delete_user(self, user_id: str) -> bool:
        """Remove a user and all its relationships."""
        return self._delete(
            "user", user_id, lambda: self._graph.delete_node(NodeLabel.USER, user_id)
        )

    def sync_follow(self, follower_id: str, following_id: str) -> bool:
        """Add a FOLLOWS edge between two existing users."""
        follow = FollowRecord(follower_id=follower_id, following_id=following_id)
        return self._upsert_follow(follow) == SyncOutcome.APPLIED

    def delete_follow(self, follower_id: str, following_id: str) -> bool:
        """Remove a FOLLOWS edge."""
        return self._delete(
            "follow",
            f"{follower_id}->{following_id}",
            lambda: self._graph.delete_edge(EdgeType.FOLLOWS, follower_id, following_id),
        )

    def sync_like(self, user_id: str, article_id: str) -> bool:
        """Add a LIKES edge from a user to an existing article."""
        like = LikeRecord(user_id=user_id, article_id=article_id)
        return self._upsert_like(like) == SyncOutcome.APPLIED

    def delete_like(self, user_id: str, article_id: str) -> bool:
        """Remove a LIKES edge."""
        return self._delete(
            "like",
            f"{user_id}->{article_id}",
            lambda: self._graph.delete_edge(EdgeType.LIKES, user_id, article_id),
        )

    # ===== Bulk synchronization =====

    def sync_from_database(self, clear: bool = False) -> GraphSyncStats:
        """Rebuild the graph from the system of record.

        Users are written first, then published articles, follows and likes,
        so that every edge finds its endpoints. Entities are streamed one at
        a time. A failed entity is logged and counted; the run continues.
        If the graph becomes unreachable the run stops and is reported as
        incomplete.

        Args:
            clear: Delete every node and relationship before writing.

        Returns:
            Counters of written and failed entities.

        Raises:
            ValueError: If the pipeline was built without a source.
        """
        if self._source is None:
            raise ValueError("GraphSyncPipeline has no source to sync from")

        if not self._graph.is_connected():
            self._log.warning("graph_sync_skipped", reason="graph_unavailable")
            return GraphSyncStats(completed=False)

        start_time = time.perf_counter()
        self._log.info("graph_sync_started", clear=clear)

        if clear and not self._clear():
            return GraphSyncStats(completed=False)

        stats = GraphSyncStats()
        source = self._source
        published = (a for a in source.iter_published_articles_for_sync() if a.is_published)
        stats.completed = (
            self._run_pass(stats, "users", source.iter_users_for_sync(), self._upsert_user)
            and self._run_pass(stats, "articles", published, self._upsert_article)
            and self._run_pass(
                stats, "follows", source.iter_follows_for_sync(), self._upsert_follow
            )
            and self._run_pass(stats, "likes", source.iter_likes_for_sync(), self._upsert_like)
        )

        duration_ms = (time.perf_counter() - start_time) * 1000
        self._metrics.record_bulk_duration(duration_ms)
        self._log.info(
            "graph_sync_complete",
            **stats.to_dict(),
            duration_ms=round(duration_ms, 2),
        )
        return stats

    def _run_pass(
        self,
        stats: GraphSyncStats,
        counter: str,
        entities: Iterable[Any],
        apply: Callable[[Any], SyncOutcome],
    ) -> bool:
        """Apply one entity stream; return False if the graph went away."""
        for entity in entities:
            outcome = apply(entity)
            if outcome == SyncOutcome.APPLIED:
                setattr(stats, counter, getattr(stats, counter) + 1)
            elif outcome == SyncOutcome.FAILED:
                stats.failed += 1
            else:
                self._log.warning("graph_sync_aborted", stage=counter)
                return False
        return True

    def _clear(self) -> bool:
        try:
            cleared = self._graph.clear_all()
        except GraphStoreError as e:
            self._log.error("graph_clear_failed", error=str(e))
            return False
        return cleared

    # ===== Single-entity writes =====

    def _upsert_user(self, user: UserNode) -> SyncOutcome:
        return self._apply(
            "user",
            user.id,
            lambda: self._graph.upsert_node(NodeLabel.USER, user.to_properties()),
        )

    def _upsert_article(self, article: ArticleNode) -> SyncOutcome:
        def write() -> bool:
            if not self._graph.upsert_node(NodeLabel.ARTICLE, article.to_properties()):
                return False
            if article.author_id:
                self._graph.upsert_edge(EdgeType.AUTHORED, article.author_id, article.id)
            return self._graph.replace_article_terms(
                article.id, article.tags, article.categories
            )

        return self._apply("article", article.id, write)

    def _upsert_follow(self, follow: FollowRecord) -> SyncOutcome:
        return self._apply(
            "follow",
            f"{follow.follower_id}->{follow.following_id}",
            lambda: self._graph.upsert_edge(
                EdgeType.FOLLOWS, follow.follower_id, follow.following_id
            ),
        )

    def _upsert_like(self, like: LikeRecord) -> SyncOutcome:
        return self._apply(
            "like",
            f"{like.user_id}->{like.article_id}",
            lambda: self._graph.upsert_edge(EdgeType.LIKES, like.user_id, like.article_id),
        )

    def _apply(self, entity: str, entity_id: str, write: Callable[[], bool]) -> SyncOutcome:
        """Run a graph write and classify its outcome."""
        try:
            written = write()
        except GraphStoreError as e:
            self._metrics.record_failure(entity)
            self._log.warning(
                "graph_sync_failed", entity=entity, entity_id=entity_id, error=str(e)
            )
            return SyncOutcome.FAILED

        if not written:
            self._metrics.record_skipped()
            self._log.debug("graph_write_skipped", entity=entity, entity_id=entity_id)
            return SyncOutcome.SKIPPED

        self._metrics.record_upsert(entity)
        return SyncOutcome.APPLIED

    def _delete(self, entity: str, entity_id: str, write: Callable[[], bool]) -> bool:
        try:
            deleted = write()
        except GraphStoreError as e:
            self._metrics.record_failure(entity)
            self._log.warning(
                "graph_delete_failed", entity=entity, entity_id=entity_id, error=str(e)
            )
            return False

        if deleted:
            self._metrics.record_delete(entity)
        else:
            self._metrics.record_skipped()
        return deleted
