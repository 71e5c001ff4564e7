"""Unit tests for cli.errors module."""

from wsync.cli.errors import (
    CLIError,
    ConflictError,
    DatabaseError,
    DatabaseFilesystemError,
    LocalFileExistsError,
    PageDeleteError,
    PageError,
    PageReadError,
    PageWriteError,
    RemoteFetchError,
    RemoteUpdateError,
    RepositoryError,
    UntrackError,
)
from wsync.w_client.errors import PageConflictError, PageNotFoundError, SyncError


class TestCLIErrors:
    """Test cases for CLI error messages and hierarchy."""

    def test_cli_errors_are_sync_errors(self):
        """All CLI errors share the SyncError root."""
        assert issubclass(CLIError, SyncError)
        assert issubclass(PageError, CLIError)

    def test_database_error_with_field(self):
        """DatabaseError names the offending field."""
        error = DatabaseError("bad value", "pages.welcome.version")

        assert str(error) == "Database error in field 'pages.welcome.version': bad value"
        assert error.original_message == "bad value"

    def test_database_error_without_field(self):
        """DatabaseError without field has a plain message."""
        assert str(DatabaseError("broken")) == "Database error: broken"

    def test_database_filesystem_error(self):
        """DatabaseFilesystemError includes operation and reason."""
        error = DatabaseFilesystemError("/repo/.wsync/database.yaml", "write", "disk full")

        assert "'write'" in str(error)
        assert str(error).endswith(": disk full")

    def test_repository_error(self):
        """RepositoryError names the repository."""
        error = RepositoryError("/repo", "could not read folder")

        assert str(error) == "Repository /repo: could not read folder"

    def test_page_file_errors_name_operation(self):
        """File errors say which operation failed."""
        assert str(PageReadError("a", "/repo/a.md")) == "Could not read file /repo/a.md"
        assert str(PageWriteError("a", "/repo/a.md", "no space")) == "Could not write file /repo/a.md: no space"
        assert str(PageDeleteError("a", "/repo/a.md")).startswith("Could not delete file")

    def test_local_file_exists(self):
        """LocalFileExistsError keeps the page id and path."""
        error = LocalFileExistsError("a", "/repo/a.md")

        assert error.page_id == "a"
        assert str(error) == "Local file already exists: /repo/a.md"

    def test_wrapping_errors_keep_cause(self):
        """Wrapping errors name the operation and keep their cause."""
        cause = PageNotFoundError("a")

        assert str(RemoteFetchError("a", cause)) == "Get page 'a': Page a not found"
        assert str(UntrackError("a", cause)).startswith("Tried to untrack 'a'")
        assert RemoteUpdateError("a", cause).cause is cause

    def test_conflict_error_is_update_error(self):
        """ConflictError is the distinguished RemoteUpdateError."""
        error = ConflictError("a", PageConflictError("a"))

        assert isinstance(error, RemoteUpdateError)
        assert str(error).startswith("Update page 'a': Conflict on page a")
