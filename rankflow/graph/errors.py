"""Exceptions raised by the graph store adapter."""


class GraphStoreError(Exception):
    """Base exception for all graph store errors."""


class GraphUnavailableError(GraphStoreError):
    """Raised when the graph database dropped the connection mid-operation.

    The adapter marks itself unavailable before raising, so subsequent
    operations no-op until the availability is re-probed.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize the error.

        Args:
            operation: Adapter operation that failed.
            reason: Underlying driver error message.
        """
        self.operation = operation
        self.reason = reason
        super().__init__(f"Graph store unavailable during {operation}: {reason}")


class GraphQueryError(GraphStoreError):
    """Raised when a write query is rejected by the graph database."""

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize the error.

        Args:
            operation: Adapter operation that failed.
            reason: Underlying driver error message.
        """
        self.operation = operation
        self.reason = reason
        super().__init__(f"Graph query failed during {operation}: {reason}")
