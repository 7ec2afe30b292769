"""Views leaderboard for articles."""

from collections.abc import Iterator

import structlog

from rankflow.ranking.constants import (
    ARTICLE_RANKING_KEY,
    DEFAULT_RANKING_TTL_DAYS,
    DEFAULT_SYNC_BATCH_SIZE,
    DEFAULT_TOP_LIMIT,
    PUBLISHED_STATUS,
    SECONDS_PER_DAY,
)
from rankflow.ranking.leaderboard import Leaderboard
from rankflow.ranking.models import (
    ArticleRanking,
    ArticleRankingStatistics,
    ArticleScore,
    EnrichedArticleEntry,
    RebuildResult,
)
from rankflow.ranking.protocols import ArticleDirectory
from rankflow.scores import ScoreStore


logger = structlog.get_logger()


class ArticleRankingEngine:
    """Maintains the article popularity leaderboard.

    Views are incremented on every read of an article; ``sync_from_database``
    periodically overwrites the whole leaderboard with the authoritative
    ``view_count`` of each published article.
    """

    def __init__(
        self,
        store: ScoreStore,
        articles: ArticleDirectory,
        ttl_seconds: int = DEFAULT_RANKING_TTL_DAYS * SECONDS_PER_DAY,
        batch_size: int = DEFAULT_SYNC_BATCH_SIZE,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Score store holding the leaderboard.
            articles: System-of-record access to articles.
            ttl_seconds: Leaderboard expiration refreshed on every write.
            batch_size: Articles written per round trip during a resync.
        """
        self._articles = articles
        self._board = Leaderboard(store, ARTICLE_RANKING_KEY, ttl_seconds, batch_size)
        self._log = logger.bind(component="article_ranking")

    def increment_view(self, article_id: str, delta: int = 1) -> None:
        """Record ``delta`` views of an article.

        Never raises: a failed update is logged so the read that triggered
        it still succeeds.

        Args:
            article_id: Article that was viewed.
            delta: Number of views to add.
        """
        if self._board.increment(article_id, float(delta)) is None:
            self._log.warning("view_increment_failed", article_id=article_id, delta=delta)

    def get_top_articles(self, limit: int = DEFAULT_TOP_LIMIT) -> list[ArticleScore]:
        """Return the most viewed articles, highest first."""
        return [
            ArticleScore(article_id=entry.member, score=entry.score)
            for entry in self._board.top(limit)
        ]

    def get_article_rank(self, article_id: str) -> int | None:
        """Return an article's 1-based rank, or None when unranked."""
        return self._board.rank(article_id)

    def get_article_score(self, article_id: str) -> float:
        """Return an article's view score, 0.0 when unranked."""
        return self._board.score(article_id)

    def remove_article(self, article_id: str) -> None:
        """Evict an article from the leaderboard."""
        self._board.remove(article_id)

    def reset_ranking(self) -> None:
        """Delete the whole leaderboard."""
        self._board.reset()

    def sync_from_database(self) -> RebuildResult:
        """Rebuild the leaderboard from published article view counts.

        This is a full overwrite: increments recorded since the previous sync
        are replaced by the view_count stored at sync time. Articles without
        views are left out.

        Returns:
            Rebuild outcome with the number of articles written.
        """
        self._log.info("article_ranking_sync_started")
        result = self._board.rebuild(self._published_view_counts())
        self._log.info(
            "article_ranking_sync_complete",
            entries_written=result.entries_written,
            completed=result.completed,
        )
        return result

    def _published_view_counts(self) -> Iterator[tuple[str, float]]:
        for article in self._articles.iter_published_articles():
            if article.status == PUBLISHED_STATUS and article.view_count > 0:
                yield article.id, float(article.view_count)

    def get_statistics(self) -> ArticleRankingStatistics:
        """Return cardinality, total views and top score."""
        summary = self._board.summary()
        return ArticleRankingStatistics(
            total_articles=summary.count,
            total_views=summary.total,
            top_score=summary.top,
        )

    def get_enriched_top_articles(
        self, limit: int = DEFAULT_TOP_LIMIT
    ) -> list[EnrichedArticleEntry]:
        """Return the top articles joined with their summaries.

        Summaries are loaded in a single bulk lookup. An article deleted
        since it was ranked keeps its position with ``article=None``.
        """
        ranking = self.get_top_articles(limit)
        if not ranking:
            return []

        found = self._articles.find_articles_by_ids([r.article_id for r in ranking])
        return [
            EnrichedArticleEntry(
                rank=index,
                article_id=entry.article_id,
                views=int(entry.score),
                article=found.get(entry.article_id),
            )
            for index, entry in enumerate(ranking, start=1)
        ]

    def get_enriched_article_ranking(self, article_id: str) -> ArticleRanking:
        """Return rank and views of one article with its summary.

        A missing article yields ``rank=None`` and zero views.
        """
        article = self._articles.find_article_by_id(article_id)
        if article is None:
            return ArticleRanking(article_id=article_id, rank=None, views=0)

        return ArticleRanking(
            article_id=article_id,
            rank=self.get_article_rank(article_id),
            views=int(self.get_article_score(article_id)),
            article=article,
        )
