"""Error kinds raised while fetching and interpreting station data."""
from __future__ import annotations


class VilloError(RuntimeError):
    """Base class for station feed errors."""


class SourceError(VilloError):
    """A single data source could not deliver a usable payload."""


class NetworkError(SourceError):
    """Transport failure or timeout."""


class HttpStatusError(SourceError):
    def __init__(self, status_code: int, url: str = "") -> None:
        super().__init__(f"API returned HTTP code: {status_code}")
        self.status_code = status_code
        self.url = url


class ParseError(SourceError):
    """Body was not valid JSON or not the expected envelope."""


class SchemaError(VilloError):
    """Payload shape was unrecognized, or recognized but empty."""


class NoDataError(VilloError):
    """Normalization produced zero stations."""


class FetchError(VilloError):
    """Every source failed across the retry budget."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
