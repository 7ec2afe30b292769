"""Graph store availability state machine.

The adapter probes the database once and caches the answer. Whether and
when that answer is re-checked is decided by an injectable ProbePolicy:

    ProbeOncePolicy  - never re-probe; a failed adapter stays unavailable
                       until it is reset or recreated
    TtlProbePolicy   - re-probe once the last answer is older than a TTL
"""

import time
from collections.abc import Callable
from enum import Enum
from typing import ClassVar, Protocol

import structlog


logger = structlog.get_logger()


class GraphAvailability(str, Enum):
    """Availability of the graph store as seen by one adapter.

    State transitions:
        UNPROBED -> AVAILABLE: Liveness probe succeeded
        UNPROBED -> UNAVAILABLE: Liveness probe failed
        AVAILABLE -> UNAVAILABLE: Connection lost during an operation
        AVAILABLE/UNAVAILABLE -> UNPROBED: Reset, or the probe policy
            declared the cached answer stale
    """

    UNPROBED = "UNPROBED"
    AVAILABLE = "AVAILABLE"
    UNAVAILABLE = "UNAVAILABLE"


class GraphAvailabilityStateError(Exception):
    """Raised when an invalid availability transition is attempted."""

    def __init__(self, from_state: GraphAvailability, to_state: GraphAvailability) -> None:
        """Initialize the error.

        Args:
            from_state: The current state.
            to_state: The attempted target state.
        """
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Invalid graph availability transition: {from_state.value} -> {to_state.value}"
        )


class ProbePolicy(Protocol):
    """Decides when a cached probe answer must be checked again."""

    def is_stale(self, state: GraphAvailability, age_seconds: float) -> bool:
        """Return True if the answer cached in ``state`` should be re-probed.

        Args:
            state: AVAILABLE or UNAVAILABLE.
            age_seconds: Seconds since the state was entered.
        """
        ...


class ProbeOncePolicy:
    """Probe once per adapter lifetime."""

    def is_stale(self, state: GraphAvailability, age_seconds: float) -> bool:  # noqa: ARG002
        """Never stale."""
        return False


class TtlProbePolicy:
    """Re-probe when the cached answer is older than ``ttl_seconds``."""

    def __init__(self, ttl_seconds: float) -> None:
        """Initialize the policy.

        Args:
            ttl_seconds: Maximum age of a cached answer.

        Raises:
            ValueError: If ttl_seconds is not positive.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds

    def is_stale(self, state: GraphAvailability, age_seconds: float) -> bool:  # noqa: ARG002
        """Stale once the TTL has elapsed."""
        return age_seconds >= self.ttl_seconds


class GraphAvailabilityStateMachine:
    """Tracks whether the graph store is reachable.

    No locking: two concurrent first calls may both probe, which is harmless.
    """

    VALID_TRANSITIONS: ClassVar[dict[GraphAvailability, set[GraphAvailability]]] = {
        GraphAvailability.UNPROBED: {
            GraphAvailability.AVAILABLE,
            GraphAvailability.UNAVAILABLE,
        },
        GraphAvailability.AVAILABLE: {
            GraphAvailability.UNAVAILABLE,
            GraphAvailability.UNPROBED,
        },
        GraphAvailability.UNAVAILABLE: {GraphAvailability.UNPROBED},
    }

    def __init__(
        self,
        policy: ProbePolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the state machine in UNPROBED state.

        Args:
            policy: Re-probe policy (default: probe once).
            clock: Monotonic clock in seconds.
        """
        self._policy = policy or ProbeOncePolicy()
        self._clock = clock
        self._state = GraphAvailability.UNPROBED
        self._entered_at = clock()
        self._log = logger.bind(component="graph_availability")

    @property
    def state(self) -> GraphAvailability:
        """Get the current state."""
        return self._state

    @property
    def is_available(self) -> bool:
        """Check if the last probe succeeded and no failure followed."""
        return self._state == GraphAvailability.AVAILABLE

    def can_transition(self, to_state: GraphAvailability) -> bool:
        """Check if a transition to the given state is valid.

        Args:
            to_state: The target state.

        Returns:
            True if the transition is valid, False otherwise.
        """
        return to_state in self.VALID_TRANSITIONS.get(self._state, set())

    def transition(self, to_state: GraphAvailability, reason: str | None = None) -> None:
        """Transition to a new state.

        Args:
            to_state: The target state.
            reason: Optional reason recorded in the log.

        Raises:
            GraphAvailabilityStateError: If the transition is invalid.
        """
        if not self.can_transition(to_state):
            self._log.error(
                "invariant_violation",
                error_type="illegal_state_transition",
                from_state=self._state.value,
                to_state=to_state.value,
            )
            raise GraphAvailabilityStateError(self._state, to_state)

        old_state = self._state
        self._state = to_state
        self._entered_at = self._clock()
        self._log.info(
            "graph_availability_transition",
            from_state=old_state.value,
            to_state=to_state.value,
            reason=reason,
        )

    def probe_due(self) -> bool:
        """Check whether the caller must run a liveness probe now.

        Expires a stale cached answer back to UNPROBED as a side effect.
        """
        if self._state == GraphAvailability.UNPROBED:
            return True
        age = self._clock() - self._entered_at
        if self._policy.is_stale(self._state, age):
            self.transition(GraphAvailability.UNPROBED, reason="probe_expired")
            return True
        return False

    def record_probe(self, success: bool, reason: str | None = None) -> None:
        """Record the outcome of a liveness probe.

        Only the first answer for an UNPROBED machine is kept; a concurrent
        probe finishing later is ignored.

        Args:
            success: Whether the probe query succeeded.
            reason: Failure detail for the log.
        """
        target = GraphAvailability.AVAILABLE if success else GraphAvailability.UNAVAILABLE
        if self._state != GraphAvailability.UNPROBED:
            self._log.debug(
                "graph_probe_superseded", state=self._state.value, outcome=target.value
            )
            return
        self.transition(target, reason=reason)

    def mark_unavailable(self, reason: str) -> None:
        """Record a connection failure observed outside a probe."""
        if self._state != GraphAvailability.UNAVAILABLE:
            self.transition(GraphAvailability.UNAVAILABLE, reason=reason)

    def reset(self) -> None:
        """Forget the cached answer so the next call probes again."""
        if self._state != GraphAvailability.UNPROBED:
            self.transition(GraphAvailability.UNPROBED, reason="reset")
