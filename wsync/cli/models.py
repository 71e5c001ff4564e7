"""Data models for CLI operations.

This module defines all data models used by the CLI module.
All models use dataclasses for clean, type-safe data structures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path
from typing import Dict, List, Optional

from wsync.w_client.models import DEFAULT_PAGE_VERSION


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): Fatal error, or at least one page failed
    - CONFLICTS (2): Unresolved conflicts remain after sync
    - AUTH_ERROR (3): Authentication or authorization failure
    - NETWORK_ERROR (4): Network connectivity or API availability issues
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFLICTS = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


HIDDEN_DIR = ".wsync"
DATABASE_FILE = "database.yaml"
TOKEN_FILE = "token"
PAGE_SUFFIX = ".md"


@dataclass
class RepoSettings:
    """Settings of one invocation, passed explicitly to every component.

    Attributes:
        repo_path: Repository root directory holding the ``<id>.md`` files
        force: Overwrite the other side on push/pull
        interactive: Ask the user how to resolve sync conflicts

    Example:
        >>> settings = RepoSettings(repo_path=Path("./notes"), interactive=True)
        >>> settings.database_path
        PosixPath('notes/.wsync/database.yaml')
    """
    repo_path: Path = field(default_factory=lambda: Path("."))
    force: bool = False
    interactive: bool = False

    def __post_init__(self):
        self.repo_path = Path(self.repo_path)

    @property
    def hidden_dir(self) -> Path:
        return self.repo_path / HIDDEN_DIR

    @property
    def database_path(self) -> Path:
        return self.hidden_dir / DATABASE_FILE

    @property
    def token_path(self) -> Path:
        return self.hidden_dir / TOKEN_FILE


@dataclass
class TrackedPage:
    """Tracking record of one page.

    Attributes:
        date_modified: Remote modification time as of the last known server state
        date_sync: Time of the last successful reconciliation
        version: Page format version on the server
    """
    date_modified: Optional[datetime]
    date_sync: datetime
    version: int = DEFAULT_PAGE_VERSION


@dataclass
class Database:
    """Tracked pages plus repository configuration.

    Attributes:
        pages: Dict mapping page id to its tracking record
        base_url: URL where W is installed
    """
    pages: Dict[str, TrackedPage] = field(default_factory=dict)
    base_url: str = ""

    def is_tracked(self, page_id: str) -> bool:
        return page_id in self.pages

    def tracked_ids(self) -> List[str]:
        """Snapshot of tracked ids in a fixed (sorted) order."""
        return sorted(self.pages)


class OutcomeStatus(Enum):
    """Result category of one page operation."""
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    FAILED = "failed"
    CONFLICT = "conflict"


class ConflictChoice(Enum):
    """Which version to keep when both sides changed."""
    BOTH = "both"
    SERVER = "server"
    LOCAL = "local"


@dataclass
class PageOutcome:
    """Outcome of one page operation in a batch.

    Attributes:
        page_id: Page identifier
        status: Result category
        message: Human-readable detail shown to the user
    """
    page_id: str
    status: OutcomeStatus
    message: str = ""


@dataclass
class BatchReport:
    """Per-page outcomes of a batch command, in processing order.

    Example:
        >>> report = BatchReport(command="push")
        >>> report.add(PageOutcome("foo", OutcomeStatus.CHANGED, "pushed"))
        >>> report.changed_count
        1
    """
    command: str
    outcomes: List[PageOutcome] = field(default_factory=list)

    def add(self, outcome: PageOutcome) -> None:
        self.outcomes.append(outcome)

    def _count(self, status: OutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def changed_count(self) -> int:
        return self._count(OutcomeStatus.CHANGED)

    @property
    def unchanged_count(self) -> int:
        return self._count(OutcomeStatus.UNCHANGED)

    @property
    def failed_count(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    @property
    def conflict_count(self) -> int:
        return self._count(OutcomeStatus.CONFLICT)

    def exit_code(self) -> ExitCode:
        if self.failed_count:
            return ExitCode.GENERAL_ERROR
        if self.conflict_count:
            return ExitCode.CONFLICTS
        return ExitCode.SUCCESS
