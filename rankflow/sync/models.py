"""Records and results of the graph synchronization pipeline."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class FollowRecord(BaseModel):
    """A follow relation read from the system of record."""

    model_config = ConfigDict(frozen=True)

    follower_id: str
    following_id: str


class LikeRecord(BaseModel):
    """A like of an article read from the system of record."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    article_id: str


class SyncOutcome(str, Enum):
    """Result of applying one entity to the graph.

    APPLIED: The statement ran.
    SKIPPED: The graph was unavailable; nothing was written.
    FAILED: The graph rejected the statement or dropped the connection.
    """

    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class GraphSyncStats:
    """Counters of a bulk graph synchronization.

    Attributes:
        users: User nodes upserted.
        articles: Article nodes upserted.
        follows: FOLLOWS edges upserted.
        likes: LIKES edges upserted.
        failed: Entities whose write failed.
        completed: False when the graph was unreachable or became
            unreachable before every entity was written.
    """

    users: int = 0
    articles: int = 0
    follows: int = 0
    likes: int = 0
    failed: int = 0
    completed: bool = True

    @property
    def total(self) -> int:
        """Number of entities successfully written."""
        return self.users + self.articles + self.follows + self.likes

    def to_dict(self) -> dict[str, int | bool]:
        """Convert to dictionary for serialization."""
        return {
            "users": self.users,
            "articles": self.articles,
            "follows": self.follows,
            "likes": self.likes,
            "failed": self.failed,
            "completed": self.completed,
        }
