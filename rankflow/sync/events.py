"""Domain events and their routing to the ranking engines and the graph."""

from collections.abc import Callable
from typing import Annotated, Any

import structlog
from pydantic import BaseModel, ConfigDict, Field

from rankflow.graph.models import ArticleNode, UserNode
from rankflow.ranking.articles import ArticleRankingEngine
from rankflow.ranking.users import UserRankingEngine
from rankflow.sync.pipeline import GraphSyncPipeline


logger = structlog.get_logger()


class DomainEvent(BaseModel):
    """Base class of every event the router accepts."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ArticleViewed(DomainEvent):
    """An article was read."""

    article_id: str
    delta: Annotated[int, Field(ge=1)] = 1


class ArticleChanged(DomainEvent):
    """An article was created, updated, restored or changed status."""

    article: ArticleNode


class ArticleDeleted(DomainEvent):
    """An article was deleted."""

    article_id: str


class UserChanged(DomainEvent):
    """A user was created or updated."""

    user: UserNode


class UserDeleted(DomainEvent):
    """A user was deleted."""

    user_id: str


class FollowCreated(DomainEvent):
    """``follower_id`` started following ``following_id``."""

    follower_id: str
    following_id: str


class FollowDeleted(DomainEvent):
    """``follower_id`` stopped following ``following_id``."""

    follower_id: str
    following_id: str


class LikeCreated(DomainEvent):
    """A user liked an article."""

    user_id: str
    article_id: str


class LikeDeleted(DomainEvent):
    """A user withdrew a like."""

    user_id: str
    article_id: str


class DomainEventRouter:
    """Routes write-path events to the engines that must react to them.

    Handlers run synchronously in the caller's thread. Engines degrade on
    store failures, so dispatching never raises for infrastructure errors.
    """

    def __init__(
        self,
        article_ranking: ArticleRankingEngine,
        user_ranking: UserRankingEngine,
        pipeline: GraphSyncPipeline,
    ) -> None:
        """Initialize the router.

        Args:
            article_ranking: Views leaderboard.
            user_ranking: Influence leaderboard.
            pipeline: Graph synchronization pipeline.
        """
        self._articles = article_ranking
        self._users = user_ranking
        self._pipeline = pipeline
        self._handlers: dict[type[DomainEvent], Callable[[Any], None]] = {
            ArticleViewed: self._on_article_viewed,
            ArticleChanged: self._on_article_changed,
            ArticleDeleted: self._on_article_deleted,
            UserChanged: self._on_user_changed,
            UserDeleted: self._on_user_deleted,
            FollowCreated: self._on_follow_created,
            FollowDeleted: self._on_follow_deleted,
            LikeCreated: self._on_like_created,
            LikeDeleted: self._on_like_deleted,
        }
        self._log = logger.bind(component="event_router")

    def dispatch(self, event: DomainEvent) -> None:
        """Apply one event.

        Args:
            event: Event to route.

        Raises:
            TypeError: If no handler is registered for the event type.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            raise TypeError(f"No handler registered for {type(event).__name__}")
        self._log.debug("event_dispatched", event_type=type(event).__name__)
        handler(event)

    def _on_article_viewed(self, event: ArticleViewed) -> None:
        self._articles.increment_view(event.article_id, event.delta)

    def _on_article_changed(self, event: ArticleChanged) -> None:
        self._pipeline.sync_article(event.article)
        if not event.article.is_published:
            self._articles.remove_article(event.article.id)

    def _on_article_deleted(self, event: ArticleDeleted) -> None:
        self._pipeline.delete_article(event.article_id)
        self._articles.remove_article(event.article_id)

    def _on_user_changed(self, event: UserChanged) -> None:
        self._pipeline.sync_user(event.user)

    def _on_user_deleted(self, event: UserDeleted) -> None:
        self._pipeline.delete_user(event.user_id)
        self._users.remove_user(event.user_id)

    def _on_follow_created(self, event: FollowCreated) -> None:
        self._pipeline.sync_follow(event.follower_id, event.following_id)
        self._users.recalculate_user(event.following_id)

    def _on_follow_deleted(self, event: FollowDeleted) -> None:
        self._pipeline.delete_follow(event.follower_id, event.following_id)
        self._users.recalculate_user(event.following_id)

    def _on_like_created(self, event: LikeCreated) -> None:
        self._pipeline.sync_like(event.user_id, event.article_id)

    def _on_like_deleted(self, event: LikeDeleted) -> None:
        self._pipeline.delete_like(event.user_id, event.article_id)
