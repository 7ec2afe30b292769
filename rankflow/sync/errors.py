"""Exceptions raised while wiring the system of record."""


class ContentSourceError(Exception):
    """Raised when the configured content source cannot be loaded."""

    def __init__(self, path: str | None, message: str) -> None:
        """Initialize the error.

        Args:
            path: The ``module:callable`` path that failed, if any.
            message: Human-readable error message.
        """
        self.path = path
        self.message = message
        super().__init__(f"{message} (content source: {path})" if path else message)
