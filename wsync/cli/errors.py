"""Typed exception hierarchy for CLI-related errors.

This module defines all custom exceptions used by the CLI and the
reconciliation engine. Errors fall into two groups:

- fatal errors (database, repository, init) that end the whole command,
- per-page errors (PageError subclasses) that are reported and skipped by
  the batch commands.
"""

from typing import Optional

from wsync.w_client.errors import PageConflictError, SyncError


class CLIError(SyncError):
    """Base exception for all CLI-related errors."""
    pass


class InitError(CLIError):
    """Raised when initialization fails."""

    def __init__(self, message: str):
        super().__init__(message)


class RepositoryError(CLIError):
    """Raised when the repository directory cannot be used."""

    def __init__(self, repo_path: str, reason: str):
        super().__init__(f"Repository {repo_path}: {reason}")
        self.repo_path = repo_path
        self.reason = reason


class DatabaseError(CLIError):
    """Raised when the tracking database is malformed."""

    def __init__(self, message: str, database_field: Optional[str] = None):
        if database_field:
            full_message = f"Database error in field '{database_field}': {message}"
        else:
            full_message = f"Database error: {message}"
        super().__init__(full_message)
        self.database_field = database_field
        self.original_message = message


class DatabaseFilesystemError(CLIError):
    """Raised when the tracking database file cannot be read or written."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Database file operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class PageError(CLIError):
    """Base exception for recoverable errors affecting a single page."""

    def __init__(self, page_id: str, message: str):
        super().__init__(message)
        self.page_id = page_id


class NotTrackedError(PageError):
    """Raised when modification status is asked for an untracked page."""

    def __init__(self, page_id: str):
        super().__init__(page_id, f"Page '{page_id}' not found in tracked pages")


class LocalFileNotFoundError(PageError):
    """Raised when the local file of a tracked page is missing."""

    def __init__(self, page_id: str, file_path: str):
        super().__init__(page_id, f"Local file not found: {file_path}")
        self.file_path = file_path


class AlreadyTrackedError(PageError):
    """Raised when adding a page that is already tracked."""

    def __init__(self, page_id: str):
        super().__init__(page_id, f"Page '{page_id}' is already tracked")


class LocalFileExistsError(PageError):
    """Raised when a local file would be overwritten by an untracked page."""

    def __init__(self, page_id: str, file_path: str):
        super().__init__(page_id, f"Local file already exists: {file_path}")
        self.file_path = file_path


class UntrackedPageError(PageError):
    """Raised when pulling a page that is not tracked."""

    def __init__(self, page_id: str):
        super().__init__(page_id, f"Page '{page_id}' is not tracked (use 'wsync add')")


class NotInDatabaseError(PageError):
    """Raised when pushing a page that has no tracking record."""

    def __init__(self, page_id: str):
        super().__init__(page_id, f"ID not in database: {page_id}")


class LocalModificationError(PageError):
    """Raised when a pull would overwrite unsynced local edits."""

    def __init__(self, page_id: str):
        super().__init__(
            page_id,
            f"Page '{page_id}' has local modifications (push them or use --force)"
        )


class PageFileError(PageError):
    """Base exception for local page file I/O failures."""

    operation = "access"

    def __init__(self, page_id: str, file_path: str, reason: Optional[str] = None):
        message = f"Could not {self.operation} file {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(page_id, message)
        self.file_path = file_path
        self.reason = reason


class PageReadError(PageFileError):
    """Raised when a local page file cannot be read."""

    operation = "read"


class PageWriteError(PageFileError):
    """Raised when a local page file cannot be written."""

    operation = "write"


class PageDeleteError(PageFileError):
    """Raised when a local page file cannot be deleted."""

    operation = "delete"


class UntrackError(PageError):
    """Raised when a page cannot be untracked because its status is unknown."""

    def __init__(self, page_id: str, cause: Exception):
        super().__init__(page_id, f"Tried to untrack '{page_id}': {cause}")
        self.cause = cause


class RemoteFetchError(PageError):
    """Raised when fetching a page from W fails."""

    def __init__(self, page_id: str, cause: Exception):
        super().__init__(page_id, f"Get page '{page_id}': {cause}")
        self.cause = cause


class RemoteUpdateError(PageError):
    """Raised when sending a page update to W fails."""

    def __init__(self, page_id: str, cause: Exception):
        super().__init__(page_id, f"Update page '{page_id}': {cause}")
        self.cause = cause


class ConflictError(RemoteUpdateError):
    """Raised when W rejects an update because its copy changed.

    This is the only error routed to interactive conflict resolution.
    """

    def __init__(self, page_id: str, cause: PageConflictError):
        super().__init__(page_id, cause)
