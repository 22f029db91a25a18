"""Project-wide custom exception types."""


class WeightsLoadError(RuntimeError):
    """Raised when a persisted weight snapshot is absent, unreadable or invalid."""

    def __init__(self, message: str) -> None:  # noqa: D401 – simple constructor
        super().__init__(message)


class InterviewStoreError(RuntimeError):
    """Raised when the interview store cannot fulfil a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogError(ValueError):
    """Raised when a question catalog payload is malformed."""
