"""Neo4j implementation of the graph store."""

from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

import structlog
from neo4j import Driver, GraphDatabase, RoutingControl
from neo4j.exceptions import DriverError, Neo4jError, ServiceUnavailable, SessionExpired

from rankflow.graph import queries
from rankflow.graph.constants import DEFAULT_NEO4J_DATABASE, PROBE_QUERY, PUBLISHED_STATUS
from rankflow.graph.errors import GraphQueryError, GraphUnavailableError
from rankflow.graph.models import EdgeType, GraphStatistics, NodeLabel
from rankflow.graph.state_machine import (
    GraphAvailability,
    GraphAvailabilityStateMachine,
    ProbePolicy,
    TtlProbePolicy,
)
from rankflow.settings import AppSettings


logger = structlog.get_logger()

Row = dict[str, Any]

# Errors meaning the server cannot be reached, as opposed to a bad query.
_CONNECTIVITY_ERRORS: tuple[type[Exception], ...] = (ServiceUnavailable, SessionExpired)


class GraphStore(Protocol):
    """Protocol for the recommendation graph.

    Writes return False without touching the database when the store is
    unavailable; reads return empty results.
    """

    def is_connected(self) -> bool:
        """Check availability, probing if the policy requires it."""
        ...

    def upsert_node(self, label: NodeLabel, attrs: Mapping[str, Any]) -> bool:
        """MERGE a node by key and overwrite its properties."""
        ...

    def delete_node(self, label: NodeLabel, key: str) -> bool:
        """Delete a node and every incident edge."""
        ...

    def upsert_edge(self, edge_type: EdgeType, from_key: str, to_key: str) -> bool:
        """MERGE a relationship."""
        ...

    def delete_edge(self, edge_type: EdgeType, from_key: str, to_key: str) -> bool:
        """Delete a relationship."""
        ...

    def replace_article_terms(
        self, article_id: str, tags: Sequence[str], categories: Sequence[str]
    ) -> bool:
        """Replace all tag and category edges of an article."""
        ...

    def users_with_common_follows(self, user_id: str, limit: int) -> list[Row]:
        """Users followed by someone the subject follows."""
        ...

    def related_articles(self, article_id: str, limit: int) -> list[Row]:
        """Published articles sharing a tag or category with an article."""
        ...

    def recommended_articles_for_user(self, user_id: str, limit: int) -> list[Row]:
        """Published articles sharing attributes with the user's likes."""
        ...

    def influential_authors(self, min_followers: int, limit: int) -> list[Row]:
        """Users with at least ``min_followers`` followers."""
        ...

    def topics_of_interest(self, user_id: str, limit: int) -> list[Row]:
        """Tags and categories of the articles a user liked."""
        ...

    def statistics(self) -> GraphStatistics:
        """Node and relationship counts."""
        ...

    def clear_all(self) -> bool:
        """Delete every node and relationship."""
        ...


class Neo4jGraphStore:
    """Graph store backed by a Neo4j database.

    The driver is created lazily on first use. Availability is tracked by a
    GraphAvailabilityStateMachine: by default the database is probed once
    per adapter and the answer is kept for the adapter's lifetime, so an
    adapter that found Neo4j down must be ``reset()`` (or recreated) to
    notice it came back. Pass a TtlProbePolicy to re-probe automatically.
    """

    def __init__(  # noqa: PLR0913
        self,
        uri: str,
        username: str,
        password: str,
        database: str = DEFAULT_NEO4J_DATABASE,
        probe_policy: ProbePolicy | None = None,
        driver_factory: Callable[[], Driver] | None = None,
    ) -> None:
        """Initialize the adapter without connecting.

        Args:
            uri: Bolt or neo4j URI.
            username: Database user.
            password: Database password.
            database: Database name.
            probe_policy: When to re-check availability (default: once).
            driver_factory: Builds the driver; overrides uri and credentials.
        """
        self._uri = uri
        self._database = database
        self._driver_factory = driver_factory or (
            lambda: GraphDatabase.driver(uri, auth=(username, password))
        )
        self._driver: Driver | None = None
        self._availability = GraphAvailabilityStateMachine(policy=probe_policy)
        self._log = logger.bind(component="graph_store", uri=uri, database=database)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "Neo4jGraphStore":
        """Build an adapter from application settings."""
        policy: ProbePolicy | None = None
        if settings.neo4j_probe_ttl_seconds is not None:
            policy = TtlProbePolicy(settings.neo4j_probe_ttl_seconds)
        return cls(
            uri=settings.neo4j_uri,
            username=settings.neo4j_username,
            password=settings.neo4j_password,
            database=settings.neo4j_database,
            probe_policy=policy,
        )

    @property
    def availability(self) -> GraphAvailability:
        """Get the current availability state without probing."""
        return self._availability.state

    def _get_driver(self) -> Driver:
        if self._driver is None:
            self._driver = self._driver_factory()
        return self._driver

    def is_connected(self) -> bool:
        """Check whether the graph store is reachable.

        Runs a liveness probe only when no answer is cached or the probe
        policy declared the cached answer stale.
        """
        if self._availability.probe_due():
            self._probe()
        return self._availability.is_available

    def _probe(self) -> None:
        try:
            self._get_driver().execute_query(
                PROBE_QUERY, database_=self._database, routing_=RoutingControl.READ
            )
        except (Neo4jError, DriverError, OSError, ValueError) as e:
            self._log.warning("graph_probe_failed", error=str(e))
            self._availability.record_probe(success=False, reason=str(e))
            return
        self._availability.record_probe(success=True)

    def reset(self) -> None:
        """Forget the cached availability so the next call probes again."""
        self._availability.reset()

    def close(self) -> None:
        """Close the driver if it was created."""
        if self._driver is not None:
            self._driver.close()
            self._driver = None
            self._log.info("graph_driver_closed")

    def __enter__(self) -> "Neo4jGraphStore":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()

    # ===== Query execution =====

    def _write(self, operation: str, query: str, params: Mapping[str, Any]) -> bool:
        """Run a write statement.

        Returns:
            False if the store is unavailable, True once the statement ran.

        Raises:
            GraphUnavailableError: If the connection dropped.
            GraphQueryError: If the database rejected the statement.
        """
        if not self.is_connected():
            return False
        try:
            self._get_driver().execute_query(
                query, parameters_=dict(params), database_=self._database
            )
        except _CONNECTIVITY_ERRORS as e:
            self._availability.mark_unavailable(str(e))
            raise GraphUnavailableError(operation, str(e)) from e
        except (Neo4jError, DriverError) as e:
            self._log.error("graph_write_failed", op=operation, error=str(e))
            raise GraphQueryError(operation, str(e)) from e
        return True

    def _read(self, operation: str, query: str, params: Mapping[str, Any]) -> list[Row]:
        """Run a read statement, returning [] on any failure."""
        if not self.is_connected():
            return []
        try:
            records, _, _ = self._get_driver().execute_query(
                query,
                parameters_=dict(params),
                database_=self._database,
                routing_=RoutingControl.READ,
            )
        except _CONNECTIVITY_ERRORS as e:
            self._availability.mark_unavailable(str(e))
            self._log.warning("graph_read_failed", op=operation, error=str(e))
            return []
        except (Neo4jError, DriverError) as e:
            self._log.warning("graph_read_failed", op=operation, error=str(e))
            return []
        return [_row(record.data()) for record in records]

    # ===== Nodes and edges =====

    def upsert_node(self, label: NodeLabel, attrs: Mapping[str, Any]) -> bool:
        """MERGE a node by its key property and overwrite its properties.

        Args:
            label: Node label.
            attrs: Properties; must include the label's key (id or name).

        Returns:
            True if the statement ran.

        Raises:
            KeyError: If attrs lacks the key property.
        """
        key = str(attrs[label.key])
        return self._write(
            f"upsert_{label.value.lower()}",
            queries.upsert_node_query(label),
            {"key": key, "props": dict(attrs)},
        )

    def delete_node(self, label: NodeLabel, key: str) -> bool:
        """Delete a node and, with it, every incident relationship."""
        return self._write(
            f"delete_{label.value.lower()}",
            queries.delete_node_query(label),
            {"key": key},
        )

    def upsert_edge(self, edge_type: EdgeType, from_key: str, to_key: str) -> bool:
        """MERGE a relationship; edges are set-like, never duplicated."""
        return self._write(
            f"upsert_{edge_type.value.lower()}",
            queries.upsert_edge_query(edge_type),
            {"from_key": from_key, "to_key": to_key},
        )

    def delete_edge(self, edge_type: EdgeType, from_key: str, to_key: str) -> bool:
        """Delete a relationship, leaving both endpoints in place."""
        return self._write(
            f"delete_{edge_type.value.lower()}",
            queries.delete_edge_query(edge_type),
            {"from_key": from_key, "to_key": to_key},
        )

    def replace_article_terms(
        self, article_id: str, tags: Sequence[str], categories: Sequence[str]
    ) -> bool:
        """Replace every HAS_TAG and IN_CATEGORY edge of an article."""
        return self._write(
            "replace_article_terms",
            queries.REPLACE_ARTICLE_TERMS,
            {
                "article_id": article_id,
                "tags": list(dict.fromkeys(tags)),
                "categories": list(dict.fromkeys(categories)),
            },
        )

    # ===== Traversals =====

    def users_with_common_follows(self, user_id: str, limit: int) -> list[Row]:
        """Users followed by someone the subject follows.

        Excludes the subject and users it already follows; ranked by the
        number of shared follow targets.
        """
        return self._read(
            "users_with_common_follows",
            queries.USERS_WITH_COMMON_FOLLOWS,
            {"user_id": user_id, "limit": limit},
        )

    def related_articles(self, article_id: str, limit: int) -> list[Row]:
        """Published articles sharing tags or categories with an article."""
        return self._read(
            "related_articles",
            queries.RELATED_ARTICLES,
            {"article_id": article_id, "limit": limit, "published": PUBLISHED_STATUS},
        )

    def recommended_articles_for_user(self, user_id: str, limit: int) -> list[Row]:
        """Published articles similar to the user's likes, minus the likes."""
        return self._read(
            "recommended_articles_for_user",
            queries.RECOMMENDED_ARTICLES_FOR_USER,
            {"user_id": user_id, "limit": limit, "published": PUBLISHED_STATUS},
        )

    def influential_authors(self, min_followers: int, limit: int) -> list[Row]:
        """Users with at least ``min_followers`` followers."""
        return self._read(
            "influential_authors",
            queries.INFLUENTIAL_AUTHORS,
            {"min_followers": min_followers, "limit": limit},
        )

    def topics_of_interest(self, user_id: str, limit: int) -> list[Row]:
        """Tags and categories of liked articles, by interaction count.

        Tags and categories are each limited to ``limit`` first, then merged,
        re-sorted and truncated. A small limit can therefore leave out a
        category that would have beaten the last tag.
        """
        params = {"user_id": user_id, "limit": limit}
        tags = self._read("tags_of_interest", queries.TAGS_OF_INTEREST, params)
        categories = self._read(
            "categories_of_interest", queries.CATEGORIES_OF_INTEREST, params
        )
        merged = sorted(
            tags + categories,
            key=lambda row: (-int(row["interactions"]), str(row["name"]), str(row["type"])),
        )
        return merged[:limit]

    def statistics(self) -> GraphStatistics:
        """Count users, articles, follows, likes, tags and categories."""
        rows = self._read("statistics", queries.GRAPH_STATISTICS, {})
        if not rows:
            return GraphStatistics()
        row = rows[0]
        return GraphStatistics(
            users=int(row.get("users", 0)),
            articles=int(row.get("articles", 0)),
            follows=int(row.get("follows", 0)),
            likes=int(row.get("likes", 0)),
            tags=int(row.get("tags", 0)),
            categories=int(row.get("categories", 0)),
        )

    def clear_all(self) -> bool:
        """Delete every node and relationship."""
        cleared = self._write("clear_all", queries.CLEAR_ALL, {})
        if cleared:
            self._log.warning("graph_cleared")
        return cleared


def _row(data: Mapping[str, Any]) -> Row:
    """Read missing node properties as empty strings."""
    return {key: "" if value is None else value for key, value in data.items()}
