"""W client library for wsync.

This package provides Python abstractions over the W HTTP/JSON API,
enabling clean and type-safe interactions with W pages.
"""

from .errors import (
    SyncError,
    WError,
    InvalidCredentialsError,
    PageNotFoundError,
    PageConflictError,
    APIUnreachableError,
    APIAccessError,
    UnsupportedPageVersionError,
    TokenNotFoundError,
)
from .models import Page, QueryOptions

__all__ = [
    "SyncError",
    "WError",
    "InvalidCredentialsError",
    "PageNotFoundError",
    "PageConflictError",
    "APIUnreachableError",
    "APIAccessError",
    "UnsupportedPageVersionError",
    "TokenNotFoundError",
    "Page",
    "QueryOptions",
]
