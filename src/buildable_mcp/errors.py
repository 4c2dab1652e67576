"""Error types raised by the Buildable client and tools."""

from datetime import UTC, datetime
from typing import Any


def utc_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(UTC).isoformat()


class APIError(Exception):
    """Normalized failure of a Buildable API request.

    The only error type raised across the client boundary. `error` holds
    the human-readable message, preferring what the server sent.
    """

    def __init__(
        self,
        error: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ) -> None:
        self.error = error
        self.code = code
        self.details = details
        self.status_code = status_code
        self.timestamp = utc_timestamp()
        super().__init__(error)


class NotConnectedError(RuntimeError):
    """A tool was invoked before the client was initialized."""

    def __init__(self, message: str = "Not connected to Buildable API") -> None:
        super().__init__(message)
