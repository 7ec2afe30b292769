"""Node, edge and statistics models for the recommendation graph."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from rankflow.graph.constants import PUBLISHED_STATUS


class NodeLabel(str, Enum):
    """Node labels in the graph.

    User and Article mirror domain entities and are keyed by id; Tag and
    Category are auxiliary nodes keyed by name.
    """

    USER = "User"
    ARTICLE = "Article"
    TAG = "Tag"
    CATEGORY = "Category"

    @property
    def key(self) -> str:
        """Property that identifies a node of this label."""
        if self in (NodeLabel.TAG, NodeLabel.CATEGORY):
            return "name"
        return "id"


class EdgeType(str, Enum):
    """Relationship types in the graph."""

    AUTHORED = "AUTHORED"
    FOLLOWS = "FOLLOWS"
    LIKES = "LIKES"
    HAS_TAG = "HAS_TAG"
    IN_CATEGORY = "IN_CATEGORY"

    @property
    def endpoints(self) -> tuple[NodeLabel, NodeLabel]:
        """(source label, target label) of this relationship."""
        return _EDGE_ENDPOINTS[self]

    @property
    def creates_target(self) -> bool:
        """Whether upserting the edge also creates a missing target node."""
        return self in (EdgeType.HAS_TAG, EdgeType.IN_CATEGORY)


_EDGE_ENDPOINTS: dict[EdgeType, tuple[NodeLabel, NodeLabel]] = {
    EdgeType.AUTHORED: (NodeLabel.USER, NodeLabel.ARTICLE),
    EdgeType.FOLLOWS: (NodeLabel.USER, NodeLabel.USER),
    EdgeType.LIKES: (NodeLabel.USER, NodeLabel.ARTICLE),
    EdgeType.HAS_TAG: (NodeLabel.ARTICLE, NodeLabel.TAG),
    EdgeType.IN_CATEGORY: (NodeLabel.ARTICLE, NodeLabel.CATEGORY),
}


class UserNode(BaseModel):
    """User as stored in the graph."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    email: str = ""
    username: str = ""

    def to_properties(self) -> dict[str, Any]:
        """Node properties written on upsert."""
        return self.model_dump()


class ArticleNode(BaseModel):
    """Article as stored in the graph, with its tag and category names."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    slug: str = ""
    status: str = "draft"
    author_id: str = ""
    view_count: int = 0
    like_count: int = 0
    tags: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)

    @property
    def is_published(self) -> bool:
        """Only published articles belong in the graph."""
        return self.status == PUBLISHED_STATUS

    def to_properties(self) -> dict[str, Any]:
        """Node properties written on upsert; tags and categories are edges."""
        return self.model_dump(exclude={"tags", "categories"})


@dataclass(frozen=True)
class GraphStatistics:
    """Node and relationship counts of the graph."""

    users: int = 0
    articles: int = 0
    follows: int = 0
    likes: int = 0
    tags: int = 0
    categories: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        return {
            "users": self.users,
            "articles": self.articles,
            "follows": self.follows,
            "likes": self.likes,
            "tags": self.tags,
            "categories": self.categories,
        }
