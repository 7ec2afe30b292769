"""Recommendation result envelope."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RecommendationType(str, Enum):
    """Kinds of recommendation the engine produces."""

    USERS = "users"
    ARTICLES = "articles"
    AUTHORS = "authors"
    TOPICS = "topics"
    RELATED_ARTICLES = "related_articles"

    @property
    def label(self) -> str:
        """Display name."""
        return _LABELS[self]

    @property
    def description(self) -> str:
        """One-line explanation shown next to the label."""
        return _DESCRIPTIONS[self]


_LABELS: dict[RecommendationType, str] = {
    RecommendationType.USERS: "Recommended Users",
    RecommendationType.ARTICLES: "Recommended Articles",
    RecommendationType.AUTHORS: "Suggested Authors",
    RecommendationType.TOPICS: "Topics of Interest",
    RecommendationType.RELATED_ARTICLES: "Related Articles",
}

_DESCRIPTIONS: dict[RecommendationType, str] = {
    RecommendationType.USERS: "Users with common followers",
    RecommendationType.ARTICLES: "Articles based on your interests",
    RecommendationType.AUTHORS: "Influential authors on the platform",
    RecommendationType.TOPICS: "Topics based on your interactions",
    RecommendationType.RELATED_ARTICLES: "Similar articles by tags and categories",
}


class RecommendationResult(BaseModel):
    """Uniform envelope around the rows of one recommendation query.

    Attributes:
        type: Kind of recommendation.
        items: Result rows in ranking order.
        total_count: Number of rows.
        for_user_id: Subject user, when the query has one.
        for_article_id: Subject article, when the query has one.
        metadata: Algorithm name, generation time and query parameters;
            ``{"empty": True}`` when the graph was unavailable.
    """

    model_config = ConfigDict(frozen=True)

    type: RecommendationType
    items: list[dict[str, Any]] = Field(default_factory=list)
    total_count: int = 0
    for_user_id: str | None = None
    for_article_id: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def empty(
        cls,
        rec_type: RecommendationType,
        for_user_id: str | None = None,
        for_article_id: str | None = None,
    ) -> "RecommendationResult":
        """Build the result returned when no graph query could run."""
        return cls(
            type=rec_type,
            for_user_id=for_user_id,
            for_article_id=for_article_id,
            metadata={"empty": True},
        )

    def is_empty(self) -> bool:
        """Check if the result has no items."""
        return not self.items

    def count(self) -> int:
        """Number of items."""
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")
