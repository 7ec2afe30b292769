"""Sources the graph synchronization pipeline reads from."""

from collections.abc import Iterator
from typing import Protocol

from rankflow.graph.models import ArticleNode, UserNode
from rankflow.ranking.protocols import ArticleDirectory, FollowerDirectory, UserDirectory
from rankflow.sync.models import FollowRecord, LikeRecord


class GraphSyncSource(Protocol):
    """Streams every entity that belongs in the graph.

    Each method must be a generator (or otherwise lazy), never a fully
    materialized list: a bulk sync walks the whole system of record.
    """

    def iter_users_for_sync(self) -> Iterator[UserNode]:
        """Stream every user."""
        ...

    def iter_published_articles_for_sync(self) -> Iterator[ArticleNode]:
        """Stream every published article with its tag and category names."""
        ...

    def iter_follows_for_sync(self) -> Iterator[FollowRecord]:
        """Stream every follow relation."""
        ...

    def iter_likes_for_sync(self) -> Iterator[LikeRecord]:
        """Stream every like."""
        ...


class ContentSource(
    UserDirectory, FollowerDirectory, ArticleDirectory, GraphSyncSource, Protocol
):
    """Everything the CLI needs from the system of record."""
