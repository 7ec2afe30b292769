"""Collaborator interfaces consumed by the ranking engines.

The system of record (users, articles, follows) lives outside this package.
Implementations must stream from their ``iter_*`` methods rather than
materialize whole collections.
"""

from collections.abc import Iterable, Iterator, Mapping
from typing import Protocol

from rankflow.ranking.models import ArticleSummary, AuthorStats, UserProfile


class UserDirectory(Protocol):
    """Read access to user profiles."""

    def find_user_by_id(self, user_id: str) -> UserProfile | None:
        """Return a user's profile, or None when the user does not exist."""
        ...

    def find_users_by_ids(self, user_ids: Iterable[str]) -> Mapping[str, UserProfile]:
        """Bulk-load profiles in one query, keyed by user id.

        Missing ids are simply absent from the mapping.
        """
        ...

    def iter_user_ids(self) -> Iterator[str]:
        """Stream the id of every user."""
        ...


class FollowerDirectory(Protocol):
    """Read access to the follow relation."""

    def get_follower_count(self, user_id: str) -> int:
        """Return how many users follow ``user_id``."""
        ...


class ArticleDirectory(Protocol):
    """Read access to articles and per-author aggregates."""

    def get_published_article_stats_by_author(self, author_id: str) -> AuthorStats:
        """Aggregate views, likes, comments and count of published articles."""
        ...

    def find_article_by_id(self, article_id: str) -> ArticleSummary | None:
        """Return an article, or None when it does not exist."""
        ...

    def find_articles_by_ids(
        self, article_ids: Iterable[str]
    ) -> Mapping[str, ArticleSummary]:
        """Bulk-load articles in one query, keyed by article id."""
        ...

    def iter_published_articles(self) -> Iterator[ArticleSummary]:
        """Stream every published article."""
        ...
