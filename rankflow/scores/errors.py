"""Exceptions raised by the score store adapter."""


class ScoreStoreError(Exception):
    """Base exception for all score store errors."""


class ScoreStoreUnavailableError(ScoreStoreError):
    """Raised when the backing store cannot be reached or rejects a command.

    The ranking engines catch this at their public boundary and degrade to
    zero or empty results, so callers on the request path never see it.
    """

    def __init__(self, operation: str, key: str, reason: str) -> None:
        """Initialize the error.

        Args:
            operation: Store operation that failed.
            key: Leaderboard key involved.
            reason: Underlying client error message.
        """
        self.operation = operation
        self.key = key
        self.reason = reason
        super().__init__(f"Score store unavailable during {operation} on '{key}': {reason}")
