"""Metrics collection for graph synchronization."""

from dataclasses import dataclass, field
from typing import ClassVar


@dataclass
class GraphSyncMetrics:
    """Metrics for graph synchronization.

    Attributes:
        upserts_by_entity: Successful upserts per entity type.
        deletes_by_entity: Successful deletions per entity type.
        failures_by_entity: Failed writes per entity type.
        skipped_total: Writes skipped because the graph was unavailable.
        bulk_duration_ms: Duration of the last bulk synchronization.
    """

    upserts_by_entity: dict[str, int] = field(default_factory=dict)
    deletes_by_entity: dict[str, int] = field(default_factory=dict)
    failures_by_entity: dict[str, int] = field(default_factory=dict)
    skipped_total: int = 0
    bulk_duration_ms: float = 0.0

    _instance: ClassVar["GraphSyncMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "GraphSyncMetrics":
        """Get singleton metrics instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        cls._instance = None

    def record_upsert(self, entity: str) -> None:
        """Record a successful upsert.

        Args:
            entity: Entity type (user, article, follow, like).
        """
        self.upserts_by_entity[entity] = self.upserts_by_entity.get(entity, 0) + 1

    def record_delete(self, entity: str) -> None:
        """Record a successful deletion."""
        self.deletes_by_entity[entity] = self.deletes_by_entity.get(entity, 0) + 1

    def record_failure(self, entity: str) -> None:
        """Record a failed write."""
        self.failures_by_entity[entity] = self.failures_by_entity.get(entity, 0) + 1

    def record_skipped(self) -> None:
        """Record a write skipped while the graph was unavailable."""
        self.skipped_total += 1

    def record_bulk_duration(self, duration_ms: float) -> None:
        """Record the duration of a bulk synchronization.

        Args:
            duration_ms: Duration in milliseconds.
        """
        self.bulk_duration_ms = duration_ms

    @property
    def failures_total(self) -> int:
        """Total failed writes across entity types."""
        return sum(self.failures_by_entity.values())

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric values.
        """
        return {
            "upserts_by_entity": dict(self.upserts_by_entity),
            "deletes_by_entity": dict(self.deletes_by_entity),
            "failures_by_entity": dict(self.failures_by_entity),
            "failures_total": self.failures_total,
            "skipped_total": self.skipped_total,
            "bulk_duration_ms": round(self.bulk_duration_ms, 2),
        }
