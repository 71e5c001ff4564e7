"""Status command: summary of the page files in a repository."""

import logging
from typing import List, Optional, Tuple

from .change_detector import ModificationDetector
from .config import DatabaseManager
from .errors import CLIError, RepositoryError
from .models import ExitCode, RepoSettings
from .output import OutputHandler
from .page_store import PageStore

logger = logging.getLogger(__name__)


class StatusCommand:
    """Lists page files as tracked, locally edited, or untracked.

    Only needs the local repository; W is never contacted.
    """

    def __init__(
        self,
        settings: RepoSettings,
        output_handler: Optional[OutputHandler] = None,
        database_manager: Optional[DatabaseManager] = None,
    ):
        self.settings = settings
        self.output_handler = output_handler or OutputHandler()
        self.database_manager = database_manager or DatabaseManager()

    def collect(self) -> Tuple[List[str], List[str], List[str]]:
        """Classify the repository's page files.

        Returns:
            Tuple of (tracked, edited, untracked) page ids; edited is a
            subset of tracked

        Raises:
            CLIError: If the database or a tracked file cannot be read
        """
        database = self.database_manager.load(self.settings.database_path)
        page_store = PageStore(self.settings.repo_path)
        detector = ModificationDetector(database, page_store)

        try:
            page_ids = page_store.list_page_ids()
        except OSError as e:
            raise RepositoryError(str(self.settings.repo_path), f"could not read folder: {e}") from e

        tracked, edited, untracked = [], [], []
        for page_id in page_ids:
            if not database.is_tracked(page_id):
                untracked.append(page_id)
                continue
            tracked.append(page_id)
            if detector.has_been_modified(page_id):
                edited.append(page_id)
        return tracked, edited, untracked

    def run(self) -> ExitCode:
        try:
            tracked, edited, untracked = self.collect()
        except CLIError as e:
            logger.error(f"Status failed: {e}")
            self.output_handler.error(f"Error: {e}")
            return ExitCode.GENERAL_ERROR

        self.output_handler.print_status(tracked, edited, untracked)
        return ExitCode.SUCCESS
