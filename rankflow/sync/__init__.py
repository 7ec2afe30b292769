"""Synchronization of the recommendation graph with the system of record."""

from rankflow.sync.errors import ContentSourceError
from rankflow.sync.events import (
    ArticleChanged,
    ArticleDeleted,
    ArticleViewed,
    DomainEvent,
    DomainEventRouter,
    FollowCreated,
    FollowDeleted,
    LikeCreated,
    LikeDeleted,
    UserChanged,
    UserDeleted,
)
from rankflow.sync.metrics import GraphSyncMetrics
from rankflow.sync.models import FollowRecord, GraphSyncStats, LikeRecord, SyncOutcome
from rankflow.sync.pipeline import GraphSyncPipeline
from rankflow.sync.protocols import ContentSource, GraphSyncSource
from rankflow.sync.source import load_content_source


__all__ = [
    "ArticleChanged",
    "ArticleDeleted",
    "ArticleViewed",
    "ContentSource",
    "ContentSourceError",
    "DomainEvent",
    "DomainEventRouter",
    "FollowCreated",
    "FollowDeleted",
    "FollowRecord",
    "GraphSyncMetrics",
    "GraphSyncPipeline",
    "GraphSyncSource",
    "GraphSyncStats",
    "LikeCreated",
    "LikeDeleted",
    "LikeRecord",
    "SyncOutcome",
    "UserChanged",
    "UserDeleted",
    "load_content_source",
]
