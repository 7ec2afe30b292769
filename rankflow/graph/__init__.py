"""Recommendation graph stored in Neo4j.

Users, published articles, tags and categories are nodes; authorship,
follows, likes and classification are relationships. The adapter degrades
to no-op writes and empty reads whenever the database is unreachable.
"""

from rankflow.graph.errors import GraphQueryError, GraphStoreError, GraphUnavailableError
from rankflow.graph.models import ArticleNode, EdgeType, GraphStatistics, NodeLabel, UserNode
from rankflow.graph.state_machine import (
    GraphAvailability,
    GraphAvailabilityStateError,
    GraphAvailabilityStateMachine,
    ProbeOncePolicy,
    ProbePolicy,
    TtlProbePolicy,
)
from rankflow.graph.store import GraphStore, Neo4jGraphStore


__all__ = [
    "ArticleNode",
    "EdgeType",
    "GraphAvailability",
    "GraphAvailabilityStateError",
    "GraphAvailabilityStateMachine",
    "GraphQueryError",
    "GraphStatistics",
    "GraphStore",
    "GraphStoreError",
    "GraphUnavailableError",
    "Neo4jGraphStore",
    "NodeLabel",
    "ProbeOncePolicy",
    "ProbePolicy",
    "TtlProbePolicy",
    "UserNode",
]
