"""Exception types raised by covid19mx.

Every fetch, parse and lookup boundary raises one of these; only the CLI
turns them into an exit code.
"""

from __future__ import annotations


class Covid19MxError(RuntimeError):
    """Base class for covid19mx failures."""


class HttpClientError(Covid19MxError):
    """Raised on transport failures and non-200 responses."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PayloadError(Covid19MxError):
    """Raised when a response body does not have the expected shape."""


class SourceNotFoundError(Covid19MxError):
    """Raised when the map page does not point to a known data source."""

    def __init__(self, message: str = "Could not find datasource!") -> None:
        super().__init__(message)


class SinceError(Covid19MxError):
    """Raised for --since values that do not name a day offset."""
