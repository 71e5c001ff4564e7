"""Per-page reconciliation between local files and W.

The Reconciler implements the add, remove, push, pull and sync operations on
a single page. There is no persisted state machine: the state of a page
(untracked, clean, locally modified, in conflict) is recomputed on every call
from the tracking record, the file modification time and the remote page.

All operations mutate the in-memory Database only; persisting it is the
caller's job (see BatchCommand).
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from wsync.w_client.api_wrapper import APIWrapper
from wsync.w_client.errors import PageConflictError, WError
from wsync.w_client.models import Page
from .change_detector import ModificationDetector
from .errors import (
    AlreadyTrackedError,
    ConflictError,
    LocalFileExistsError,
    LocalModificationError,
    NotInDatabaseError,
    PageError,
    RemoteFetchError,
    RemoteUpdateError,
    UntrackError,
    UntrackedPageError,
)
from .models import Database, RepoSettings, TrackedPage
from .page_store import PageStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Reconciler:
    """Reconciles tracked pages with their remote copies.

    Example:
        >>> reconciler = Reconciler(settings, database, api)
        >>> reconciler.add_page("welcome")
        >>> reconciler.sync_page("welcome")
        False
    """

    def __init__(
        self,
        settings: RepoSettings,
        database: Database,
        api: APIWrapper,
        page_store: Optional[PageStore] = None,
        detector: Optional[ModificationDetector] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the reconciler.

        Args:
            settings: Settings of the current invocation
            database: Loaded tracking database (mutated in place)
            api: W API client
            page_store: Local page files (defaults to the repository root)
            detector: Modification detector (created from database and store)
            clock: Returns the current time; used for date_sync
        """
        self.settings = settings
        self.database = database
        self.api = api
        self.page_store = page_store or PageStore(settings.repo_path)
        self.detector = detector or ModificationDetector(database, self.page_store)
        self.clock = clock

    def _fetch(self, page_id: str) -> Page:
        try:
            return self.api.get_page(page_id)
        except (WError, ValueError) as e:
            raise RemoteFetchError(page_id, e) from e

    def _primary(self, page: Page) -> str:
        try:
            return page.primary
        except WError as e:
            raise RemoteFetchError(page.page_id, e) from e

    def _record_from(self, page: Page) -> TrackedPage:
        return TrackedPage(
            date_modified=page.date_modified,
            date_sync=self.clock(),
            version=page.version,
        )

    def add_page(self, page_id: str) -> None:
        """Start tracking a page and create its local file.

        Raises:
            AlreadyTrackedError: If the page is already tracked
            LocalFileExistsError: If a file already exists for the page
            RemoteFetchError: If the page cannot be fetched or decoded
            PageWriteError: If the local file cannot be written
        """
        if self.database.is_tracked(page_id):
            raise AlreadyTrackedError(page_id)

        if self.page_store.exists(page_id):
            raise LocalFileExistsError(page_id, str(self.page_store.path_for(page_id)))

        page = self._fetch(page_id)
        self.page_store.write(page_id, self._primary(page))
        self.database.pages[page_id] = self._record_from(page)
        logger.info(f"Page {page_id}: now tracked")

    def remove_page(self, page_id: str) -> bool:
        """Stop tracking a page.

        The local file is deleted only when it has no unsynced edits.

        Returns:
            True if the local file was deleted, False if it was kept

        Raises:
            UntrackError: If the modification status cannot be determined
                (the record is kept in that case)
            PageDeleteError: If the unmodified file cannot be deleted
        """
        try:
            modified = self.detector.has_been_modified(page_id)
        except PageError as e:
            raise UntrackError(page_id, e) from e

        del self.database.pages[page_id]
        if modified:
            logger.info(f"Page {page_id}: untracked, local edits kept")
            return False

        self.page_store.delete(page_id)
        logger.info(f"Page {page_id}: untracked and file deleted")
        return True

    def push_page(self, page_id: str, force: bool = False) -> bool:
        """Send local edits of a page to W.

        Args:
            page_id: Tracked page identifier
            force: Overwrite the remote copy even if it changed since last sync

        Returns:
            True if the page was pushed, False if there was nothing to push

        Raises:
            NotInDatabaseError: If the page is not tracked
            PageReadError: If the local file cannot be read
            LocalFileNotFoundError: If the local file is missing
            ConflictError: If W's copy changed since the last known state
            RemoteUpdateError: If the update fails for any other reason
        """
        record = self.database.pages.get(page_id)
        if record is None:
            raise NotInDatabaseError(page_id)

        content = self.page_store.read(page_id)

        if not self.detector.has_been_modified(page_id):
            logger.debug(f"Page {page_id}: no local modification, nothing to push")
            return False

        page = Page(
            page_id=page_id,
            version=record.version,
            date_modified=record.date_modified,
        )
        try:
            page.set_primary(content)
            updated = self.api.update_page(page, force=force)
        except PageConflictError as e:
            raise ConflictError(page_id, e) from e
        except (WError, ValueError) as e:
            raise RemoteUpdateError(page_id, e) from e

        record.date_modified = updated.date_modified
        record.date_sync = self.clock()
        logger.info(f"Page {page_id}: pushed (force={force})")
        return True

    def pull_page(self, page_id: str, force: bool = False) -> bool:
        """Overwrite the local file with W's copy if W's copy is newer.

        Args:
            page_id: Page identifier
            force: Overwrite local edits

        Returns:
            True if the local file was written, False if already up to date

        Raises:
            RemoteFetchError: If the page cannot be fetched or decoded
            LocalFileExistsError: If the page is untracked but a file exists
            UntrackedPageError: If the page is untracked
            LocalFileNotFoundError: If the local file of a tracked page is missing
            LocalModificationError: If the file has local edits and force is off
            PageWriteError: If the local file cannot be written
        """
        page = self._fetch(page_id)

        record = self.database.pages.get(page_id)
        if record is None:
            if self.page_store.exists(page_id):
                raise LocalFileExistsError(page_id, str(self.page_store.path_for(page_id)))
            raise UntrackedPageError(page_id)

        if page.date_modified is not None and record.date_sync >= page.date_modified:
            logger.debug(f"Page {page_id}: already up to date")
            return False

        modified = self.detector.has_been_modified(page_id)
        if modified and not force:
            raise LocalModificationError(page_id)

        self.page_store.write(page_id, self._primary(page))
        self.database.pages[page_id] = self._record_from(page)
        logger.info(f"Page {page_id}: pulled (force={force})")
        return True

    def sync_page(self, page_id: str) -> bool:
        """Push local edits, then pull remote changes.

        Pushing first sends a pending local edit before any remote refresh.
        The first failing step aborts the sync with its error; a conflicting
        push raises ConflictError.

        Returns:
            True if either step wrote something
        """
        pushed = self.push_page(page_id, force=False)
        pulled = self.pull_page(page_id, force=False)
        return pushed or pulled

    @staticmethod
    def is_conflict(error: BaseException) -> bool:
        """Whether an error is the distinguished remote-changed conflict."""
        if isinstance(error, (ConflictError, PageConflictError)):
            return True
        return isinstance(error.__cause__, PageConflictError)
