"""Unit tests for the graph availability state machine."""

import threading
from typing import Any
from unittest.mock import MagicMock

import pytest

from rankflow.graph import (
    GraphAvailability,
    GraphAvailabilityStateError,
    GraphAvailabilityStateMachine,
    Neo4jGraphStore,
    ProbeOncePolicy,
    TtlProbePolicy,
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestTransitions:
    """Tests for the transition table."""

    def test_initial_state(self) -> None:
        """Test a new machine has not probed."""
        machine = GraphAvailabilityStateMachine()

        assert machine.state == GraphAvailability.UNPROBED
        assert not machine.is_available
        assert machine.probe_due()

    def test_successful_probe(self) -> None:
        """Test UNPROBED -> AVAILABLE."""
        machine = GraphAvailabilityStateMachine()
        machine.record_probe(success=True)

        assert machine.is_available
        assert not machine.probe_due()

    def test_failed_probe(self) -> None:
        """Test UNPROBED -> UNAVAILABLE."""
        machine = GraphAvailabilityStateMachine()
        machine.record_probe(success=False, reason="refused")

        assert machine.state == GraphAvailability.UNAVAILABLE

    def test_unavailable_cannot_become_available_directly(self) -> None:
        """Test UNAVAILABLE -> AVAILABLE is rejected."""
        machine = GraphAvailabilityStateMachine()
        machine.record_probe(success=False)

        with pytest.raises(GraphAvailabilityStateError) as exc_info:
            machine.transition(GraphAvailability.AVAILABLE)

        assert exc_info.value.from_state == GraphAvailability.UNAVAILABLE
        assert exc_info.value.to_state == GraphAvailability.AVAILABLE

    def test_mark_unavailable_is_idempotent(self) -> None:
        """Test repeated connection failures stay UNAVAILABLE."""
        machine = GraphAvailabilityStateMachine()
        machine.record_probe(success=True)

        machine.mark_unavailable("reset")
        machine.mark_unavailable("reset again")

        assert machine.state == GraphAvailability.UNAVAILABLE

    def test_reset_returns_to_unprobed(self) -> None:
        """Test reset forgets the cached answer."""
        machine = GraphAvailabilityStateMachine()
        machine.record_probe(success=False)

        machine.reset()

        assert machine.state == GraphAvailability.UNPROBED
        assert machine.probe_due()

    def test_reset_when_unprobed(self) -> None:
        """Test reset on a fresh machine is a no-op."""
        machine = GraphAvailabilityStateMachine()
        machine.reset()
        assert machine.state == GraphAvailability.UNPROBED


class TestProbePolicies:
    """Tests for the re-probe policies."""

    def test_probe_once_never_expires(self) -> None:
        """Test a failed answer is kept for the machine's lifetime."""
        clock = FakeClock()
        machine = GraphAvailabilityStateMachine(policy=ProbeOncePolicy(), clock=clock)
        machine.record_probe(success=False)

        clock.now = 10**9

        assert not machine.probe_due()
        assert machine.state == GraphAvailability.UNAVAILABLE

    def test_ttl_policy_expires_answer(self) -> None:
        """Test the cached answer expires after the TTL."""
        clock = FakeClock()
        machine = GraphAvailabilityStateMachine(policy=TtlProbePolicy(30), clock=clock)
        machine.record_probe(success=False)

        clock.now = 29.0
        assert not machine.probe_due()

        clock.now = 30.0
        assert machine.probe_due()
        assert machine.state == GraphAvailability.UNPROBED

    def test_ttl_must_be_positive(self) -> None:
        """Test a non-positive TTL is rejected."""
        with pytest.raises(ValueError, match="positive"):
            TtlProbePolicy(0)


class TestConcurrentFirstUse:
    """Tests for liveness checks racing on first use."""

    def test_late_answer_is_ignored(self) -> None:
        """Test a second result for an answered machine is dropped."""
        machine = GraphAvailabilityStateMachine()
        machine.record_probe(success=True)

        machine.record_probe(success=True)
        machine.record_probe(success=False, reason="late failure")

        assert machine.state == GraphAvailability.AVAILABLE

    def test_two_threads_connect_on_first_use(self) -> None:
        """Test overlapping first checks leave the adapter available."""
        barrier = threading.Barrier(2)
        driver = MagicMock()

        def execute_query(*args: Any, **kwargs: Any) -> tuple[list[Any], None, list[str]]:
            barrier.wait(timeout=5)
            return [], None, []

        driver.execute_query.side_effect = execute_query
        store = Neo4jGraphStore(
            "bolt://test:7687", "neo4j", "secret", driver_factory=lambda: driver
        )
        results: list[bool] = []
        errors: list[Exception] = []

        def connect() -> None:
            try:
                results.append(store.is_connected())
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=connect) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert results == [True, True]
        assert driver.execute_query.call_count == 2
        assert store.availability == GraphAvailability.AVAILABLE
