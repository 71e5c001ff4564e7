"""Unit tests for cli.batch_command module."""

import io
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from rich.console import Console

from wsync.cli.batch_command import BatchCommand
from wsync.cli.config import DatabaseManager
from wsync.cli.errors import DatabaseError, DatabaseFilesystemError
from wsync.cli.models import ExitCode, OutcomeStatus
from wsync.cli.output import OutputHandler
from wsync.cli.prompts import AutoDecisions
from wsync.w_client.auth import Authenticator
from wsync.w_client.errors import (
    APIUnreachableError,
    PageConflictError,
    PageNotFoundError,
    TokenNotFoundError,
)
from wsync.w_client.models import Page

SYNCED = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def output():
    console = Console(file=io.StringIO(), no_color=True, width=200)
    return OutputHandler(console=console)


@pytest.fixture
def database_manager(database):
    manager = Mock(spec=DatabaseManager)
    manager.load.return_value = database
    return manager


@pytest.fixture
def authenticator():
    auth = Mock(spec=Authenticator)
    auth.get_token.return_value = "tok"
    return auth


@pytest.fixture
def make_batch(settings, output, database_manager, authenticator, api):
    """Build a BatchCommand wired to the mocks."""
    def _make_batch(decisions=None, **overrides):
        for name, value in overrides.items():
            setattr(settings, name, value)
        return BatchCommand(
            settings,
            output_handler=output,
            decisions=decisions or AutoDecisions(),
            database_manager=database_manager,
            authenticator=authenticator,
            api_factory=Mock(return_value=api),
        )
    return _make_batch


def printed(output):
    return output.console.file.getvalue()


class TestRunAdd:
    """Test cases for BatchCommand.run_add()."""

    def test_add_tracks_and_saves(self, make_batch, api, database, database_manager, settings, remote_page):
        """Adding pages writes files, tracks them and saves once."""
        api.get_page.side_effect = lambda page_id: remote_page(page_id, f"# {page_id}")
        batch = make_batch()

        exit_code = batch.run_add(["a", "b"])

        assert exit_code == ExitCode.SUCCESS
        assert database.tracked_ids() == ["a", "b"]
        assert (settings.repo_path / "a.md").read_text() == "# a"
        database_manager.save.assert_called_once_with(settings.database_path, database)
        batch.api_factory.assert_called_once_with("https://w.example.com", "tok")

    def test_add_requires_ids(self, make_batch, database_manager):
        """add without ids fails before loading anything."""
        assert make_batch().run_add([]) == ExitCode.GENERAL_ERROR

        database_manager.load.assert_not_called()

    def test_add_continues_after_failure(self, make_batch, api, database, database_manager, output, remote_page):
        """A failing page is reported and the batch goes on."""
        def get_page(page_id):
            if page_id == "missing":
                raise PageNotFoundError(page_id)
            return remote_page(page_id)
        api.get_page.side_effect = get_page

        exit_code = make_batch().run_add(["missing", "good"])

        assert exit_code == ExitCode.GENERAL_ERROR
        assert database.tracked_ids() == ["good"]
        database_manager.save.assert_called_once()
        assert "✗ missing: Get page 'missing'" in printed(output)


class TestRunRemove:
    """Test cases for BatchCommand.run_remove()."""

    def test_remove_needs_no_token(self, make_batch, authenticator, database, settings, track):
        """remove works offline and without a token."""
        track("a", date_sync=SYNCED)
        batch = make_batch()

        assert batch.run_remove(["a"]) == ExitCode.SUCCESS

        authenticator.get_token.assert_not_called()
        batch.api_factory.assert_called_once_with("https://w.example.com", None)
        assert not database.is_tracked("a")
        assert not (settings.repo_path / "a.md").exists()

    def test_remove_requires_ids(self, make_batch):
        """remove without ids is an error."""
        assert make_batch().run_remove([]) == ExitCode.GENERAL_ERROR


class TestRunPushPull:
    """Test cases for run_push() and run_pull()."""

    def test_push_defaults_to_all_tracked(self, make_batch, api, output, track):
        """Without ids every tracked page is processed in sorted order."""
        track("b", date_sync=SYNCED)
        track("a", date_sync=SYNCED, edited_after=timedelta(seconds=5))
        api.update_page.return_value = Page(page_id="a", date_modified=SYNCED + timedelta(minutes=1))

        exit_code = make_batch().run_push([])

        assert exit_code == ExitCode.SUCCESS
        api.update_page.assert_called_once()
        text = printed(output)
        assert text.index("a: pushed to W") < text.index("b: no local edits to push")

    def test_push_force_flag(self, make_batch, api, track):
        """--force reaches the API call."""
        track("a", date_sync=SYNCED, edited_after=timedelta(seconds=5))
        api.update_page.return_value = Page(page_id="a", date_modified=SYNCED)

        make_batch(force=True).run_push(["a"])

        assert api.update_page.call_args[1] == {"force": True}

    def test_pull_unreachable_is_per_page(self, make_batch, api, database_manager, track):
        """Remote failures on one page do not abort the batch."""
        track("a", date_sync=SYNCED)
        track("b", date_sync=SYNCED)
        api.get_page.side_effect = APIUnreachableError("https://w.example.com")

        exit_code = make_batch().run_pull([])

        assert exit_code == ExitCode.GENERAL_ERROR
        assert api.get_page.call_count == 2
        database_manager.save.assert_called_once()

    def test_pull_untracked_page(self, make_batch, api, output, remote_page):
        """Pulling an untracked page is a per-page failure."""
        api.get_page.return_value = remote_page("ghost")

        assert make_batch().run_pull(["ghost"]) == ExitCode.GENERAL_ERROR
        assert "not tracked" in printed(output)


class TestRunSync:
    """Test cases for BatchCommand.run_sync()."""

    def test_sync_conflict_non_interactive(self, make_batch, api, track):
        """Without -i a conflict is reported and exits with code 2."""
        track("a", content="mine", date_sync=SYNCED, edited_after=timedelta(seconds=5))
        api.update_page.side_effect = PageConflictError("a")

        assert make_batch().run_sync([]) == ExitCode.CONFLICTS

    def test_sync_conflict_interactive_keep_both(self, make_batch, api, output, track):
        """With -i the default answer keeps both versions."""
        track("a", content="mine", date_sync=SYNCED, edited_after=timedelta(seconds=5))
        api.update_page.side_effect = PageConflictError("a")

        assert make_batch(interactive=True).run_sync(["a"]) == ExitCode.CONFLICTS
        assert "conflict: both versions kept" in printed(output)

    def test_sync_conflict_interactive_take_server(self, make_batch, api, database, settings, track, remote_page):
        """Choosing the server version force pulls the page."""
        track("a", content="mine", date_sync=SYNCED, edited_after=timedelta(seconds=5))
        api.update_page.side_effect = PageConflictError("a")
        api.get_page.return_value = remote_page("a", "theirs", date_modified=SYNCED + timedelta(days=1))
        decisions = Mock()
        decisions.choose.return_value = "server"

        exit_code = make_batch(decisions=decisions, interactive=True).run_sync(["a"])

        assert exit_code == ExitCode.SUCCESS
        assert (settings.repo_path / "a.md").read_text() == "theirs"
        assert database.pages["a"].date_modified == SYNCED + timedelta(days=1)

    def test_sync_other_errors_fail(self, make_batch, api, track):
        """Non-conflict errors are failures, not conflicts."""
        track("a", date_sync=SYNCED)
        api.get_page.side_effect = PageNotFoundError("a")

        assert make_batch(interactive=True).run_sync(["a"]) == ExitCode.GENERAL_ERROR


class TestFatalErrors:
    """Test cases for errors that end the whole command."""

    def test_missing_token(self, make_batch, authenticator, database_manager, output):
        """A missing token exits with AUTH_ERROR and saves nothing."""
        authenticator.get_token.side_effect = TokenNotFoundError(".wsync/token")

        assert make_batch().run_push([]) == ExitCode.AUTH_ERROR
        database_manager.save.assert_not_called()
        assert "wsync init" in printed(output)

    def test_corrupt_database(self, make_batch, database_manager):
        """A corrupt database exits with GENERAL_ERROR."""
        database_manager.load.side_effect = DatabaseError("Invalid YAML syntax: oops")

        assert make_batch().run_sync([]) == ExitCode.GENERAL_ERROR
        database_manager.save.assert_not_called()

    def test_save_failure(self, make_batch, database_manager, track):
        """A database that cannot be saved exits with GENERAL_ERROR."""
        track("a", date_sync=SYNCED)
        database_manager.save.side_effect = DatabaseFilesystemError("db", "write", "disk full")

        assert make_batch().run_remove(["a"]) == ExitCode.GENERAL_ERROR

    def test_outcomes_recorded_per_page(self, make_batch, api, track, remote_page):
        """run_pages returns one outcome per target."""
        track("a", date_sync=SYNCED)
        api.get_page.return_value = remote_page("a")
        batch = make_batch()
        reconciler = batch.open_reconciler()

        report = batch.run_pages("pull", reconciler, ["a"], batch._pull)

        assert [o.status for o in report.outcomes] == [OutcomeStatus.UNCHANGED]
