"""Local modification detection.

A tracked page counts as locally modified when its file's modification time
is strictly after the page's last successful sync. Content is never hashed or
compared: touching a file, even with identical content, marks it modified.
"""

import logging
from typing import List

from .errors import NotTrackedError, PageError
from .models import Database
from .page_store import PageStore

logger = logging.getLogger(__name__)


class ModificationDetector:
    """Timestamp-based detector of local edits.

    Example:
        >>> detector = ModificationDetector(database, PageStore("./notes"))
        >>> detector.has_been_modified("welcome")
        False
        >>> detector.edited_pages()
        []
    """

    def __init__(self, database: Database, page_store: PageStore):
        self.database = database
        self.page_store = page_store

    def has_been_modified(self, page_id: str) -> bool:
        """Check whether the page was edited locally since its last sync.

        Args:
            page_id: Tracked page identifier

        Returns:
            True iff the file mtime is strictly after the record's date_sync

        Raises:
            NotTrackedError: If the page has no tracking record
            LocalFileNotFoundError: If the page file is missing
        """
        record = self.database.pages.get(page_id)
        if record is None:
            raise NotTrackedError(page_id)

        modified_at = self.page_store.modified_at(page_id)
        modified = modified_at > record.date_sync
        logger.debug(
            f"Page {page_id}: mtime={modified_at.isoformat()} "
            f"date_sync={record.date_sync.isoformat()} -> modified={modified}"
        )
        return modified

    def edited_pages(self) -> List[str]:
        """Return the tracked pages currently modified locally.

        Pages whose status cannot be determined (e.g. the file was deleted
        outside wsync) are treated as not edited.
        """
        edited = []
        for page_id in self.database.tracked_ids():
            try:
                if self.has_been_modified(page_id):
                    edited.append(page_id)
            except PageError as e:
                logger.debug(f"Page {page_id}: skipped in edited pages ({e})")
        return edited
