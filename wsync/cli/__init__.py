"""Command-line interface for the W page sync client.

This package provides the `wsync` CLI tool that tracks W pages as local
Markdown files and reconciles them with the server: add/remove pages, push
local edits, pull remote changes, and sync both ways with conflict handling.
"""

from .batch_command import BatchCommand
from .init_command import InitCommand
from .list_command import ListCommand
from .status_command import StatusCommand
from .models import ExitCode, RepoSettings, Database, TrackedPage, BatchReport, PageOutcome
from .errors import (
    CLIError,
    InitError,
    RepositoryError,
    DatabaseError,
    DatabaseFilesystemError,
    PageError,
)

__all__ = [
    'BatchCommand',
    'InitCommand',
    'ListCommand',
    'StatusCommand',
    'ExitCode',
    'RepoSettings',
    'Database',
    'TrackedPage',
    'BatchReport',
    'PageOutcome',
    'CLIError',
    'InitError',
    'RepositoryError',
    'DatabaseError',
    'DatabaseFilesystemError',
    'PageError',
]
