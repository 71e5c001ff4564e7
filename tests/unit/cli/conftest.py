"""Shared fixtures for CLI unit tests."""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from wsync.cli.models import Database, RepoSettings, TrackedPage
from wsync.cli.page_store import PageStore
from wsync.w_client.api_wrapper import APIWrapper
from wsync.w_client.models import Page

# Remote modification date of pages that have not changed since tracking
OLD_DATE = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path):
    return RepoSettings(repo_path=tmp_path)


@pytest.fixture
def database():
    return Database(base_url="https://w.example.com")


@pytest.fixture
def page_store(tmp_path):
    return PageStore(tmp_path)


@pytest.fixture
def api():
    """APIWrapper mock; get_page/update_page answers are set per test."""
    return Mock(spec=APIWrapper)


@pytest.fixture
def set_mtime():
    """Set the modification time of a file to an aware datetime."""
    def _set_mtime(path, when):
        timestamp = when.timestamp()
        os.utime(path, (timestamp, timestamp))
    return _set_mtime


@pytest.fixture
def track(database, page_store, set_mtime):
    """Create a tracked page file synced at ``date_sync``.

    The file's mtime is set ``edited_after`` after the sync when given,
    else one minute before it.
    """
    def _track(page_id, content="# Page", date_sync=None, edited_after=None,
               date_modified=OLD_DATE, version=2):
        date_sync = date_sync or datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        page_store.write(page_id, content)
        if edited_after is None:
            set_mtime(page_store.path_for(page_id), date_sync - timedelta(minutes=1))
        else:
            set_mtime(page_store.path_for(page_id), date_sync + edited_after)
        database.pages[page_id] = TrackedPage(
            date_modified=date_modified,
            date_sync=date_sync,
            version=version,
        )
        return page_store.path_for(page_id)
    return _track


@pytest.fixture
def remote_page():
    """Build a remote Page."""
    def _remote_page(page_id, content="# Remote", date_modified=OLD_DATE, version=2):
        page = Page(page_id=page_id, version=version, date_modified=date_modified)
        page.set_primary(content)
        return page
    return _remote_page
