"""Unit tests for domain event routing."""

import pytest
from pydantic import ValidationError

from rankflow.graph import ArticleNode, EdgeType, NodeLabel, UserNode
from rankflow.ranking import ArticleRankingEngine, UserRankingEngine
from rankflow.sync import (
    ArticleChanged,
    ArticleDeleted,
    ArticleViewed,
    DomainEvent,
    DomainEventRouter,
    FollowCreated,
    FollowDeleted,
    GraphSyncMetrics,
    GraphSyncPipeline,
    LikeCreated,
    LikeDeleted,
    UserChanged,
    UserDeleted,
)
from tests.helpers.fakes import FakeContentSource, FakeGraphStore, InMemoryScoreStore


class UnknownEvent(DomainEvent):
    """Event type nothing handles."""

    payload: str = ""


@pytest.fixture(autouse=True)
def reset_metrics() -> None:
    """Start every test with fresh metrics."""
    GraphSyncMetrics.reset()


@pytest.fixture
def source() -> FakeContentSource:
    """Two users, both present in the profile store."""
    source = FakeContentSource()
    source.add_user("u1")
    source.add_user("u2")
    return source


@pytest.fixture
def graph() -> FakeGraphStore:
    """Connected in-memory graph."""
    return FakeGraphStore()


@pytest.fixture
def articles(source: FakeContentSource) -> ArticleRankingEngine:
    """Views leaderboard over an in-memory store."""
    return ArticleRankingEngine(InMemoryScoreStore(), source)


@pytest.fixture
def users(source: FakeContentSource) -> UserRankingEngine:
    """Influence leaderboard over an in-memory store."""
    return UserRankingEngine(InMemoryScoreStore(), source, source, source)


@pytest.fixture
def router(
    articles: ArticleRankingEngine, users: UserRankingEngine, graph: FakeGraphStore
) -> DomainEventRouter:
    """Router wired to the fakes."""
    return DomainEventRouter(articles, users, GraphSyncPipeline(graph))


def _article(status: str = "published") -> ArticleNode:
    return ArticleNode(id="a1", title="Title", slug="title", status=status, tags=["py"])


class TestArticleEvents:
    """Tests for article events."""

    def test_view_increments_leaderboard(
        self, router: DomainEventRouter, articles: ArticleRankingEngine
    ) -> None:
        """Test views land on the views leaderboard."""
        router.dispatch(ArticleViewed(article_id="a1"))
        router.dispatch(ArticleViewed(article_id="a1", delta=4))

        assert articles.get_article_score("a1") == 5.0

    def test_view_delta_must_be_positive(self) -> None:
        """Test a zero delta is rejected."""
        with pytest.raises(ValidationError):
            ArticleViewed(article_id="a1", delta=0)

    def test_change_syncs_graph(self, router: DomainEventRouter, graph: FakeGraphStore) -> None:
        """Test a published article is written to the graph."""
        router.dispatch(ArticleChanged(article=_article()))

        assert (NodeLabel.ARTICLE, "a1") in graph.nodes
        assert graph.edges_of(EdgeType.HAS_TAG) == {("a1", "py")}

    def test_unpublish_evicts(
        self,
        router: DomainEventRouter,
        graph: FakeGraphStore,
        articles: ArticleRankingEngine,
    ) -> None:
        """Test moving back to draft removes the article from graph and board."""
        router.dispatch(ArticleChanged(article=_article()))
        router.dispatch(ArticleViewed(article_id="a1"))

        router.dispatch(ArticleChanged(article=_article(status="draft")))

        assert (NodeLabel.ARTICLE, "a1") not in graph.nodes
        assert articles.get_article_rank("a1") is None

    def test_delete_evicts(
        self,
        router: DomainEventRouter,
        graph: FakeGraphStore,
        articles: ArticleRankingEngine,
    ) -> None:
        """Test deleting an article removes it everywhere."""
        router.dispatch(ArticleChanged(article=_article()))
        router.dispatch(ArticleViewed(article_id="a1"))

        router.dispatch(ArticleDeleted(article_id="a1"))

        assert (NodeLabel.ARTICLE, "a1") not in graph.nodes
        assert articles.get_article_rank("a1") is None


class TestUserEvents:
    """Tests for user, follow and like events."""

    def test_user_change_and_delete(
        self, router: DomainEventRouter, graph: FakeGraphStore, users: UserRankingEngine
    ) -> None:
        """Test a deleted user leaves both the graph and the board."""
        router.dispatch(UserChanged(user=UserNode(id="u1", name="Ann")))
        users.update_score("u1", 5.0)

        router.dispatch(UserDeleted(user_id="u1"))

        assert (NodeLabel.USER, "u1") not in graph.nodes
        assert users.get_user_rank("u1") is None

    def test_follow_recalculates_influence(
        self,
        router: DomainEventRouter,
        graph: FakeGraphStore,
        users: UserRankingEngine,
        source: FakeContentSource,
    ) -> None:
        """Test a new follower updates the followed user's score."""
        router.dispatch(UserChanged(user=UserNode(id="u1")))
        router.dispatch(UserChanged(user=UserNode(id="u2")))
        source.followers["u2"] = 1

        router.dispatch(FollowCreated(follower_id="u1", following_id="u2"))

        assert graph.edges_of(EdgeType.FOLLOWS) == {("u1", "u2")}
        assert users.get_user_score("u2") == 2.0

    def test_unfollow_recalculates_influence(
        self,
        router: DomainEventRouter,
        graph: FakeGraphStore,
        users: UserRankingEngine,
        source: FakeContentSource,
    ) -> None:
        """Test losing a follower lowers the followed user's score."""
        router.dispatch(UserChanged(user=UserNode(id="u1")))
        router.dispatch(UserChanged(user=UserNode(id="u2")))
        source.followers["u2"] = 1
        router.dispatch(FollowCreated(follower_id="u1", following_id="u2"))

        source.followers["u2"] = 0
        router.dispatch(FollowDeleted(follower_id="u1", following_id="u2"))

        assert graph.edges_of(EdgeType.FOLLOWS) == set()
        assert users.get_user_score("u2") == 0.0

    def test_likes(self, router: DomainEventRouter, graph: FakeGraphStore) -> None:
        """Test likes only touch the graph."""
        router.dispatch(UserChanged(user=UserNode(id="u1")))
        router.dispatch(ArticleChanged(article=_article()))

        router.dispatch(LikeCreated(user_id="u1", article_id="a1"))
        assert graph.edges_of(EdgeType.LIKES) == {("u1", "a1")}

        router.dispatch(LikeDeleted(user_id="u1", article_id="a1"))
        assert graph.edges_of(EdgeType.LIKES) == set()


class TestDispatch:
    """Tests for the dispatch contract."""

    def test_unknown_event(self, router: DomainEventRouter) -> None:
        """Test an unregistered event type raises TypeError."""
        with pytest.raises(TypeError, match="UnknownEvent"):
            router.dispatch(UnknownEvent())

    def test_events_reject_extra_fields(self) -> None:
        """Test events are strict about their payload."""
        with pytest.raises(ValidationError):
            ArticleDeleted(article_id="a1", reason="spam")  # type: ignore[call-arg]

    def test_graph_down_does_not_raise(
        self, router: DomainEventRouter, graph: FakeGraphStore, articles: ArticleRankingEngine
    ) -> None:
        """Test dispatch still updates the leaderboard when the graph is down."""
        graph.connected = False

        router.dispatch(ArticleDeleted(article_id="a1"))
        router.dispatch(ArticleViewed(article_id="a2"))

        assert articles.get_article_score("a2") == 1.0
