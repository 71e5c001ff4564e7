"""Typed exception hierarchy for W-related errors.

This module defines all custom exceptions used by the W client library.
All exceptions inherit from WError (itself a SyncError) for easy catching and
include descriptive messages with context to help with debugging.
"""

from typing import Optional


class SyncError(Exception):
    """Base exception for all wsync errors.

    Use this to catch any application-level error from the sync tool.
    """
    pass


class WError(SyncError):
    """Base exception for all W-related errors."""
    pass


class InvalidCredentialsError(WError):
    """Raised when the bearer token or login credentials are rejected."""

    def __init__(self, endpoint: str, message: Optional[str] = None):
        text = f"Authentication rejected by W (endpoint: {endpoint})"
        if message:
            text += f": {message}"
        super().__init__(text)
        self.endpoint = endpoint


class PageNotFoundError(WError):
    """Raised when a requested page does not exist."""

    def __init__(self, page_id: str):
        super().__init__(f"Page {page_id} not found")
        self.page_id = page_id


class PageConflictError(WError):
    """Raised when W refuses an update because its copy changed.

    The server answers 409 when its stored modification date is newer than
    the date supplied by the client and the update was not forced.
    """

    def __init__(self, page_id: str, message: Optional[str] = None):
        text = f"Conflict on page {page_id}: remote copy changed since last sync"
        if message:
            text += f" ({message})"
        super().__init__(text)
        self.page_id = page_id


class APIUnreachableError(WError):
    """Raised when the W API is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(WError):
    """Raised when an API call fails for any other reason."""

    def __init__(self, message: str = "W API failure", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class UnsupportedPageVersionError(WError):
    """Raised when a page carries a format version this client cannot handle."""

    def __init__(self, page_id: str, version: object):
        super().__init__(f"Unsupported version {version!r} for page {page_id}")
        self.page_id = page_id
        self.version = version


class TokenNotFoundError(WError):
    """Raised when no bearer token is available for the repository."""

    def __init__(self, token_path: str, reason: Optional[str] = None):
        message = f"No W token found at {token_path} (run 'wsync init' first)"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.token_path = token_path
        self.reason = reason
