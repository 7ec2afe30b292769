"""Constants for the graph store adapter."""

PROBE_QUERY: str = "RETURN 1 AS test"

DEFAULT_NEO4J_DATABASE: str = "neo4j"

PUBLISHED_STATUS: str = "published"
