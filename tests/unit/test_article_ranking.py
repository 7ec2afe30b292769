"""Unit tests for the article views leaderboard."""

import pytest

from rankflow.ranking import ArticleRankingEngine, ArticleScore, ArticleSummary
from rankflow.ranking.constants import ARTICLE_RANKING_KEY
from tests.helpers.fakes import FakeContentSource, InMemoryScoreStore


def _article(article_id: str, views: int, status: str = "published") -> ArticleSummary:
    return ArticleSummary(
        id=article_id,
        title=f"Title {article_id}",
        slug=article_id,
        author_id="u1",
        status=status,
        view_count=views,
    )


@pytest.fixture
def store() -> InMemoryScoreStore:
    """In-memory score store."""
    return InMemoryScoreStore()


@pytest.fixture
def source() -> FakeContentSource:
    """Empty content source."""
    return FakeContentSource()


@pytest.fixture
def engine(store: InMemoryScoreStore, source: FakeContentSource) -> ArticleRankingEngine:
    """Engine with a small batch size and a short TTL."""
    return ArticleRankingEngine(store, source, ttl_seconds=3600, batch_size=2)


class TestIncrementView:
    """Tests for view increments."""

    def test_three_views_rank_first(self, engine: ArticleRankingEngine) -> None:
        """Test three increments on an empty board give score 3 and rank 1."""
        for _ in range(3):
            engine.increment_view("a1")

        assert engine.get_article_score("a1") == 3.0
        assert engine.get_article_rank("a1") == 1

    def test_increment_refreshes_ttl(
        self, engine: ArticleRankingEngine, store: InMemoryScoreStore
    ) -> None:
        """Test every increment refreshes the key expiration."""
        engine.increment_view("a1")
        assert store.expirations[ARTICLE_RANKING_KEY] == 3600

    def test_custom_delta(self, engine: ArticleRankingEngine) -> None:
        """Test increments accept a delta."""
        engine.increment_view("a1", delta=5)
        assert engine.get_article_score("a1") == 5.0

    def test_store_down_does_not_raise(
        self, engine: ArticleRankingEngine, store: InMemoryScoreStore
    ) -> None:
        """Test an unavailable store is swallowed on the request path."""
        store.failing = True
        engine.increment_view("a1")


class TestQueries:
    """Tests for leaderboard reads."""

    def test_top_articles_descending(self, engine: ArticleRankingEngine) -> None:
        """Test top articles come highest first."""
        engine.increment_view("a1", 1)
        engine.increment_view("a2", 5)
        engine.increment_view("a3", 3)

        assert engine.get_top_articles(2) == [
            ArticleScore("a2", 5.0),
            ArticleScore("a3", 3.0),
        ]

    def test_rank_matches_top_order(self, engine: ArticleRankingEngine) -> None:
        """Test rank equals the 1-based position in the top list."""
        for article_id, views in [("a1", 4), ("a2", 9), ("a3", 1)]:
            engine.increment_view(article_id, views)

        top = engine.get_top_articles(10)
        for position, entry in enumerate(top, start=1):
            assert engine.get_article_rank(entry.article_id) == position

    def test_unknown_article(self, engine: ArticleRankingEngine) -> None:
        """Test unranked articles have no rank and zero score."""
        assert engine.get_article_rank("missing") is None
        assert engine.get_article_score("missing") == 0.0

    def test_non_positive_limit(self, engine: ArticleRankingEngine) -> None:
        """Test a zero limit yields an empty list."""
        engine.increment_view("a1")
        assert engine.get_top_articles(0) == []

    def test_reads_degrade_when_store_down(
        self, engine: ArticleRankingEngine, store: InMemoryScoreStore
    ) -> None:
        """Test reads return sentinels instead of raising."""
        engine.increment_view("a1")
        store.failing = True

        assert engine.get_top_articles() == []
        assert engine.get_article_rank("a1") is None
        assert engine.get_article_score("a1") == 0.0
        assert engine.get_statistics().total_articles == 0

    def test_remove_and_reset(self, engine: ArticleRankingEngine) -> None:
        """Test eviction and full reset."""
        engine.increment_view("a1")
        engine.increment_view("a2")

        engine.remove_article("a1")
        assert engine.get_article_rank("a1") is None

        engine.reset_ranking()
        assert engine.get_top_articles() == []


class TestSyncFromDatabase:
    """Tests for the full resync."""

    def test_overwrites_increments(
        self, engine: ArticleRankingEngine, source: FakeContentSource
    ) -> None:
        """Test resync replaces live increments with stored view counts."""
        source.articles = {"a1": _article("a1", 10), "a2": _article("a2", 20)}
        engine.increment_view("a1", 500)
        engine.increment_view("stale", 1)

        result = engine.sync_from_database()

        assert result.entries_written == 2
        assert result.completed
        assert engine.get_article_score("a1") == 10.0
        assert engine.get_article_rank("stale") is None

    def test_skips_unviewed_and_unpublished(
        self, engine: ArticleRankingEngine, source: FakeContentSource
    ) -> None:
        """Test drafts and zero-view articles are left out."""
        source.articles = {
            "a1": _article("a1", 10),
            "a2": _article("a2", 0),
            "a3": _article("a3", 50, status="draft"),
        }

        result = engine.sync_from_database()

        assert result.entries_written == 1
        assert [e.article_id for e in engine.get_top_articles()] == ["a1"]

    def test_idempotent(
        self, engine: ArticleRankingEngine, source: FakeContentSource
    ) -> None:
        """Test two resyncs without writes in between give the same board."""
        source.articles = {f"a{i}": _article(f"a{i}", i) for i in range(1, 6)}

        engine.sync_from_database()
        first = engine.get_top_articles(10)
        engine.sync_from_database()

        assert engine.get_top_articles(10) == first

    def test_writes_in_batches(
        self,
        engine: ArticleRankingEngine,
        source: FakeContentSource,
        store: InMemoryScoreStore,
    ) -> None:
        """Test scores are written in batch_size chunks."""
        source.articles = {f"a{i}": _article(f"a{i}", i) for i in range(1, 6)}

        engine.sync_from_database()

        assert store.batch_sizes == [2, 2, 1]
        assert store.expirations[ARTICLE_RANKING_KEY] == 3600

    def test_partial_failure_reported(
        self,
        engine: ArticleRankingEngine,
        source: FakeContentSource,
        store: InMemoryScoreStore,
    ) -> None:
        """Test a store failure mid-rebuild is reported as incomplete."""
        source.articles = {f"a{i}": _article(f"a{i}", i) for i in range(1, 6)}
        store.fail_after_writes = 2  # clear + first batch

        result = engine.sync_from_database()

        assert not result.completed
        assert result.entries_written == 2


class TestStatisticsAndEnrichment:
    """Tests for statistics and enriched views."""

    def test_statistics(self, engine: ArticleRankingEngine) -> None:
        """Test cardinality, total and top score."""
        engine.increment_view("a1", 3)
        engine.increment_view("a2", 7)

        stats = engine.get_statistics()

        assert stats.to_dict() == {"total_articles": 2, "total_views": 10.0, "top_score": 7.0}

    def test_empty_statistics(self, engine: ArticleRankingEngine) -> None:
        """Test an empty board reports zeros."""
        assert engine.get_statistics().to_dict() == {
            "total_articles": 0,
            "total_views": 0.0,
            "top_score": 0.0,
        }

    def test_enriched_top_uses_one_bulk_lookup(
        self, engine: ArticleRankingEngine, source: FakeContentSource
    ) -> None:
        """Test summaries are joined by id and deleted articles keep their row."""
        source.articles = {"a1": _article("a1", 0)}
        engine.increment_view("a1", 2)
        engine.increment_view("gone", 5)

        entries = engine.get_enriched_top_articles(10)

        assert source.bulk_lookups == 1
        assert [(e.rank, e.article_id, e.views) for e in entries] == [
            (1, "gone", 5),
            (2, "a1", 2),
        ]
        assert entries[0].article is None
        assert entries[1].article is not None
        assert entries[1].article.title == "Title a1"

    def test_enriched_top_empty_board(
        self, engine: ArticleRankingEngine, source: FakeContentSource
    ) -> None:
        """Test an empty board skips the bulk lookup."""
        assert engine.get_enriched_top_articles() == []
        assert source.bulk_lookups == 0

    def test_enriched_ranking_missing_article(self, engine: ArticleRankingEngine) -> None:
        """Test a missing article yields rank None and zero views."""
        ranking = engine.get_enriched_article_ranking("missing")

        assert ranking.rank is None
        assert ranking.views == 0
        assert ranking.article is None

    def test_enriched_ranking(
        self, engine: ArticleRankingEngine, source: FakeContentSource
    ) -> None:
        """Test an existing article carries rank, views and summary."""
        source.articles = {"a1": _article("a1", 0)}
        engine.increment_view("a1", 4)

        ranking = engine.get_enriched_article_ranking("a1")

        assert ranking.rank == 1
        assert ranking.views == 4
        assert ranking.article == source.articles["a1"]
