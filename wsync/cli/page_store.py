"""Local page files.

Each tracked page lives in ``<repo>/<id>.md``. The store owns the file bytes;
it knows nothing about tracking records.
"""

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Union

from .errors import LocalFileNotFoundError, PageDeleteError, PageReadError, PageWriteError
from .models import PAGE_SUFFIX

logger = logging.getLogger(__name__)


class PageStore:
    """Reads and writes the local file of each page.

    Example:
        >>> store = PageStore("./notes")
        >>> store.write("welcome", "# Welcome")
        >>> store.read("welcome")
        '# Welcome'
    """

    def __init__(self, repo_path: Union[str, Path]):
        self.repo_path = Path(repo_path)

    def path_for(self, page_id: str) -> Path:
        return self.repo_path / f"{page_id}{PAGE_SUFFIX}"

    def exists(self, page_id: str) -> bool:
        return self.path_for(page_id).exists()

    def read(self, page_id: str) -> str:
        """Return the content of the page file.

        Raises:
            PageReadError: If the file cannot be read
        """
        path = self.path_for(page_id)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PageReadError(page_id, str(path), str(e)) from e

    def write(self, page_id: str, content: str) -> None:
        """Write (create or overwrite) the page file.

        Raises:
            PageWriteError: If the file cannot be written
        """
        path = self.path_for(page_id)
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise PageWriteError(page_id, str(path), str(e)) from e
        logger.debug(f"Wrote {len(content)} characters to {path}")

    def delete(self, page_id: str) -> None:
        """Delete the page file.

        Raises:
            PageDeleteError: If the file cannot be deleted
        """
        path = self.path_for(page_id)
        try:
            os.remove(path)
        except OSError as e:
            raise PageDeleteError(page_id, str(path), str(e)) from e
        logger.debug(f"Deleted {path}")

    def modified_at(self, page_id: str) -> datetime:
        """Return the modification time of the page file (UTC).

        Raises:
            LocalFileNotFoundError: If the file does not exist
            PageReadError: If the file cannot be stat'ed
        """
        path = self.path_for(page_id)
        try:
            stat = path.stat()
        except FileNotFoundError as e:
            raise LocalFileNotFoundError(page_id, str(path)) from e
        except OSError as e:
            raise PageReadError(page_id, str(path), str(e)) from e
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)

    def list_page_ids(self) -> List[str]:
        """Ids of all page files in the repository root, sorted.

        Raises:
            OSError: If the repository directory cannot be listed
        """
        page_ids = []
        for entry in self.repo_path.iterdir():
            if entry.is_file() and entry.suffix == PAGE_SUFFIX:
                page_ids.append(entry.name[:-len(PAGE_SUFFIX)])
        return sorted(page_ids)
