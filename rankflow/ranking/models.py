"""Data models for the article and user leaderboards."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class AuthorStats(BaseModel):
    """Aggregate statistics over an author's published articles."""

    model_config = ConfigDict(frozen=True)

    articles_count: Annotated[int, Field(ge=0)] = 0
    total_views: Annotated[int, Field(ge=0)] = 0
    total_likes: Annotated[int, Field(ge=0)] = 0
    total_comments: Annotated[int, Field(ge=0)] = 0


class UserProfile(BaseModel):
    """Public profile fields denormalized into enriched rankings."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    username: str
    avatar_url: str | None = None
    bio: str | None = None
    created_at: datetime | None = None


class ArticleSummary(BaseModel):
    """Article fields needed by the views leaderboard."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    slug: str
    author_id: str
    status: str = "draft"
    view_count: Annotated[int, Field(ge=0)] = 0
    excerpt: str | None = None
    published_at: datetime | None = None


@dataclass(frozen=True)
class ArticleScore:
    """An article's entry on the views leaderboard."""

    article_id: str
    score: float


@dataclass(frozen=True)
class UserScore:
    """A user's entry on the influence leaderboard."""

    user_id: str
    score: float


@dataclass(frozen=True)
class LeaderboardSummary:
    """Aggregate figures over one leaderboard key.

    Attributes:
        count: Number of ranked members.
        total: Sum of all scores.
        top: Highest score, 0.0 when empty.
    """

    count: int = 0
    total: float = 0.0
    top: float = 0.0


@dataclass(frozen=True)
class RebuildResult:
    """Outcome of a full leaderboard resync.

    Attributes:
        entries_written: Members written before the rebuild stopped.
        completed: False when the score store failed part-way.
    """

    entries_written: int = 0
    completed: bool = True


@dataclass(frozen=True)
class ArticleRankingStatistics:
    """Statistics over the views leaderboard."""

    total_articles: int
    total_views: float
    top_score: float

    def to_dict(self) -> dict[str, int | float]:
        """Convert to dictionary for serialization."""
        return {
            "total_articles": self.total_articles,
            "total_views": self.total_views,
            "top_score": self.top_score,
        }


@dataclass(frozen=True)
class UserRankingStatistics:
    """Statistics over the influence leaderboard."""

    total_users: int
    total_score: float
    top_score: float
    average_score: float

    def to_dict(self) -> dict[str, int | float]:
        """Convert to dictionary for serialization."""
        return {
            "total_users": self.total_users,
            "total_score": self.total_score,
            "top_score": self.top_score,
            "average_score": self.average_score,
        }


@dataclass(frozen=True)
class InfluenceFactor:
    """One weighted term of the influence formula.

    Attributes:
        name: Factor name (followers, views, likes, comments, articles).
        value: Raw count.
        weight: Multiplier applied to the count.
        contribution: value * weight.
    """

    name: str
    value: int
    weight: float
    contribution: float


@dataclass(frozen=True)
class InfluenceBreakdown:
    """Per-factor view of an influence score."""

    factors: list[InfluenceFactor] = field(default_factory=list)

    @property
    def total(self) -> float:
        """Sum of contributions rounded like the stored score."""
        return round(sum(f.contribution for f in self.factors), 2)

    def get(self, name: str) -> InfluenceFactor | None:
        """Look up a factor by name."""
        for factor in self.factors:
            if factor.name == name:
                return factor
        return None

    def to_dict(self) -> dict[str, dict[str, float | int]]:
        """Convert to the ``{factor: {value, weight, contribution}}`` shape."""
        return {
            f.name: {
                "value": f.value,
                "weight": f.weight,
                "contribution": f.contribution,
            }
            for f in self.factors
        }


@dataclass(frozen=True)
class EnrichedRankEntry:
    """Influence leaderboard row joined with the user's profile.

    ``user`` is None when the profile was deleted after being ranked.
    """

    rank: int
    user_id: str
    score: float
    user: UserProfile | None = None


@dataclass(frozen=True)
class EnrichedArticleEntry:
    """Views leaderboard row joined with the article summary."""

    rank: int
    article_id: str
    views: int
    article: ArticleSummary | None = None


@dataclass(frozen=True)
class ArticleRanking:
    """Ranking position and views of a single article."""

    article_id: str
    rank: int | None
    views: int
    article: ArticleSummary | None = None


class UserRanking(BaseModel):
    """Enriched influence ranking for a single user.

    A user that does not exist yields ``rank=None`` and a zero score.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: str
    rank: int | None = None
    score: float = 0.0
    followers_count: int = 0
    articles_count: int = 0
    total_views: int = 0
    total_likes: int = 0
    total_comments: int = 0
    user: UserProfile | None = None

    def stats(self) -> AuthorStats:
        """Return the article statistics carried by this ranking."""
        return AuthorStats(
            articles_count=self.articles_count,
            total_views=self.total_views,
            total_likes=self.total_likes,
            total_comments=self.total_comments,
        )

    def influence_breakdown(self) -> InfluenceBreakdown:
        """Break the influence score into its weighted factors."""
        # rankflow.ranking.influence imports this module.
        from rankflow.ranking.influence import build_influence_breakdown

        return build_influence_breakdown(self.followers_count, self.stats())
