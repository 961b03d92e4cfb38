"""Error types raised by the catalog client."""

from typing import Optional

__all__ = [
    "CatalogError",
    "ServiceUnavailableError",
    "APIError",
    "NotFoundError",
    "MalformedResponseError",
]


class CatalogError(Exception):
    """Base class for every catalog client failure."""


class ServiceUnavailableError(CatalogError):
    """Raised when the catalog service cannot be reached (connection refused, timeout)."""


class APIError(CatalogError):
    """Raised when the service answers with an HTTP error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(APIError):
    """HTTP 404. On the by-brand/by-category paths this means "no results"."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class MalformedResponseError(CatalogError):
    """Raised when a response body cannot be interpreted at all."""
