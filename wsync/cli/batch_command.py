"""Batch command orchestration for CLI.

This module provides the BatchCommand class that runs add, remove, push, pull
and sync over a list of pages. It loads the tracking database once, applies
the per-page operation of the Reconciler to every target in order, reports
one outcome per page, and saves the database once at the end.
"""

import logging
from typing import Callable, List, Optional, Sequence

from wsync.w_client.api_wrapper import APIWrapper
from wsync.w_client.auth import Authenticator
from wsync.w_client.errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    TokenNotFoundError,
)
from .config import DatabaseManager
from .conflict_resolver import ConflictResolver
from .errors import CLIError, DatabaseError, DatabaseFilesystemError, PageError
from .models import BatchReport, ExitCode, OutcomeStatus, PageOutcome, RepoSettings
from .output import OutputHandler
from .prompts import DecisionSource, RichPrompts
from .reconciler import Reconciler

logger = logging.getLogger(__name__)

# Builds the API client from the base URL and an optional token
APIFactory = Callable[[str, Optional[str]], APIWrapper]

# Applies one operation to one page and describes what happened
PageOperation = Callable[[Reconciler, str], PageOutcome]


class BatchCommand:
    """Runs a page operation over several pages.

    Per-page errors are reported and the loop continues. Fatal errors (bad
    database, missing token, unreachable API) end the command with the
    matching exit code. The database is saved even when pages failed.

    Example:
        >>> output = OutputHandler(verbosity=1)
        >>> batch = BatchCommand(RepoSettings(repo_path=Path("./notes")), output)
        >>> exit_code = batch.run_push([])
        >>> sys.exit(exit_code)
    """

    def __init__(
        self,
        settings: RepoSettings,
        output_handler: Optional[OutputHandler] = None,
        decisions: Optional[DecisionSource] = None,
        database_manager: Optional[DatabaseManager] = None,
        authenticator: Optional[Authenticator] = None,
        api_factory: Optional[APIFactory] = None,
    ):
        """Initialize the batch command with dependencies.

        Args:
            settings: Settings of the current invocation
            output_handler: OutputHandler for terminal output (optional)
            decisions: Decision source for conflict resolution (optional)
            database_manager: DatabaseManager for loading and saving (optional)
            authenticator: Authenticator providing the token (optional)
            api_factory: Builds the API client (defaults to APIWrapper)
        """
        self.settings = settings
        self.output_handler = output_handler or OutputHandler()
        self.decisions = decisions or RichPrompts(self.output_handler.console)
        self.database_manager = database_manager or DatabaseManager()
        self.authenticator = authenticator or Authenticator(token_path=settings.token_path)
        self.api_factory = api_factory or APIWrapper

    def run_add(self, ids: Sequence[str]) -> ExitCode:
        """Start tracking pages and create their local files."""
        return self._run("add", ids, self._add, requires_ids=True)

    def run_remove(self, ids: Sequence[str]) -> ExitCode:
        """Stop tracking pages, deleting files without local edits."""
        return self._run("remove", ids, self._remove, requires_ids=True, needs_token=False)

    def run_push(self, ids: Sequence[str]) -> ExitCode:
        """Push local edits of the given (or all tracked) pages."""
        return self._run("push", ids, self._push)

    def run_pull(self, ids: Sequence[str]) -> ExitCode:
        """Pull remote changes of the given (or all tracked) pages."""
        return self._run("pull", ids, self._pull)

    def run_sync(self, ids: Sequence[str]) -> ExitCode:
        """Push then pull the given (or all tracked) pages."""
        return self._run("sync", ids, self._sync)

    def _run(
        self,
        command: str,
        ids: Sequence[str],
        operation: PageOperation,
        requires_ids: bool = False,
        needs_token: bool = True,
    ) -> ExitCode:
        """Execute one batch command."""
        if requires_ids and not ids:
            self.output_handler.error(f"'{command}' needs at least one page id")
            return ExitCode.GENERAL_ERROR

        def body() -> ExitCode:
            reconciler = self.open_reconciler(needs_token)
            report = self.run_pages(command, reconciler, ids, operation)
            self.output_handler.print_report(report)
            return report.exit_code()

        return self.guarded(command, body)

    def open_reconciler(self, needs_token: bool = True) -> Reconciler:
        """Load the database (and token) and build a Reconciler on them.

        Raises:
            DatabaseError: If the database is malformed
            DatabaseFilesystemError: If the database cannot be read
            TokenNotFoundError: If a token is needed but none is configured
        """
        database = self.database_manager.load(self.settings.database_path)
        token = self.authenticator.get_token() if needs_token else None
        api = self.api_factory(database.base_url, token)
        return Reconciler(self.settings, database, api)

    def guarded(self, command: str, body: Callable[[], ExitCode]) -> ExitCode:
        """Run a command body and translate fatal errors to exit codes."""
        try:
            return body()

        except (TokenNotFoundError, InvalidCredentialsError) as e:
            logger.error(f"Authentication failed: {e}")
            self.output_handler.error(f"Authentication failed: {e}")
            return ExitCode.AUTH_ERROR

        except (APIUnreachableError, APIAccessError) as e:
            logger.error(f"API error: {e}")
            self.output_handler.error(f"API error: {e}")
            self.output_handler.info("Check your internet connection and try again")
            return ExitCode.NETWORK_ERROR

        except (DatabaseError, DatabaseFilesystemError) as e:
            logger.error(f"Database error: {e}")
            self.output_handler.error(str(e))
            return ExitCode.GENERAL_ERROR

        except CLIError as e:
            logger.error(f"CLI error: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        except Exception as e:
            logger.exception(f"Unexpected error during {command}")
            self.output_handler.error(f"Unexpected error: {e}")
            return ExitCode.GENERAL_ERROR

    def run_pages(
        self,
        command: str,
        reconciler: Reconciler,
        ids: Sequence[str],
        operation: PageOperation,
    ) -> BatchReport:
        """Apply an operation to every target page and save the database.

        Targets are the given ids, or a snapshot of the tracked ids when none
        are given. Also used by ListCommand, which already holds a loaded
        database and reconciler.

        Raises:
            DatabaseFilesystemError: If the database cannot be saved
        """
        targets: List[str] = list(ids) if ids else reconciler.database.tracked_ids()
        report = BatchReport(command=command)
        logger.info(f"{command}: {len(targets)} page(s)")

        try:
            for page_id in targets:
                outcome = self._apply(reconciler, page_id, operation)
                report.add(outcome)
                self.output_handler.print_outcome(outcome)
        finally:
            self.database_manager.save(self.settings.database_path, reconciler.database)

        return report

    def _apply(self, reconciler: Reconciler, page_id: str, operation: PageOperation) -> PageOutcome:
        try:
            return operation(reconciler, page_id)
        except PageError as e:
            logger.warning(f"Page {page_id}: {e}")
            return PageOutcome(page_id, OutcomeStatus.FAILED, str(e))

    def _add(self, reconciler: Reconciler, page_id: str) -> PageOutcome:
        reconciler.add_page(page_id)
        path = reconciler.page_store.path_for(page_id)
        return PageOutcome(
            page_id,
            OutcomeStatus.CHANGED,
            f"added new tracked page, created new file {path}",
        )

    def _remove(self, reconciler: Reconciler, page_id: str) -> PageOutcome:
        if reconciler.remove_page(page_id):
            return PageOutcome(page_id, OutcomeStatus.CHANGED, "untracked page and deleted local file")
        return PageOutcome(
            page_id,
            OutcomeStatus.CHANGED,
            "untracked page, local file kept because it has local edits",
        )

    def _push(self, reconciler: Reconciler, page_id: str) -> PageOutcome:
        if reconciler.push_page(page_id, force=self.settings.force):
            return PageOutcome(page_id, OutcomeStatus.CHANGED, "pushed to W")
        return PageOutcome(page_id, OutcomeStatus.UNCHANGED, "no local edits to push")

    def _pull(self, reconciler: Reconciler, page_id: str) -> PageOutcome:
        if reconciler.pull_page(page_id, force=self.settings.force):
            return PageOutcome(page_id, OutcomeStatus.CHANGED, "pulled from W")
        return PageOutcome(page_id, OutcomeStatus.UNCHANGED, "already up to date")

    def _sync(self, reconciler: Reconciler, page_id: str) -> PageOutcome:
        try:
            changed = reconciler.sync_page(page_id)
        except PageError as e:
            if not reconciler.is_conflict(e):
                raise
            logger.warning(f"Page {page_id}: {e}")
            if self.settings.interactive:
                return ConflictResolver(reconciler, self.decisions).resolve(page_id)
            return PageOutcome(page_id, OutcomeStatus.CONFLICT, f"conflict: {e}")

        if changed:
            return PageOutcome(page_id, OutcomeStatus.CHANGED, "synced with W")
        return PageOutcome(page_id, OutcomeStatus.UNCHANGED, "already up to date")
