"""Tracking database loading and saving.

This module handles loading and saving the tracking database from the
repository's ``.wsync/database.yaml`` file. The database records which pages
are tracked, when each was last synced, and the URL of the W instance.
"""

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from wsync.w_client.models import DEFAULT_PAGE_VERSION, format_timestamp, parse_timestamp
from .errors import DatabaseError, DatabaseFilesystemError
from .models import Database, TrackedPage


class DatabaseManager:
    """Handles tracking database loading, validation, and saving.

    Database file structure:
        pages:
          welcome:
            dateModified: "2024-01-15T10:30:00+00:00"
            dateSync: "2024-01-15T10:31:02.123456+00:00"
            version: 2
        config:
          baseURL: "https://w.example.com"

    A missing or empty file is a fresh database. Anything unreadable or
    malformed is an error: the command cannot safely continue without
    knowing what is tracked.
    """

    @classmethod
    def load(cls, database_path: Union[str, Path]) -> Database:
        """Load and parse the database from a YAML file.

        Args:
            database_path: Path to the YAML database file

        Returns:
            Database object with parsed records

        Raises:
            DatabaseFilesystemError: If file cannot be read (except FileNotFoundError)
            DatabaseError: If the file is invalid or malformed
        """
        database_path = str(database_path)
        try:
            with open(database_path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            # First command in a repository
            return Database()
        except PermissionError:
            raise DatabaseFilesystemError(
                database_path,
                'read',
                'Permission denied'
            )
        except Exception as e:
            raise DatabaseFilesystemError(
                database_path,
                'read',
                str(e)
            )

        if not content.strip():
            return Database()

        try:
            database_dict = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise DatabaseError(
                f"Invalid YAML syntax: {str(e)}"
            )

        if database_dict is None:
            return Database()

        if not isinstance(database_dict, dict):
            raise DatabaseError(
                f"Database must be a YAML dictionary, got {type(database_dict).__name__}"
            )

        return cls._parse_database(database_dict)

    @classmethod
    def save(cls, database_path: Union[str, Path], database: Database) -> None:
        """Save the database to a YAML file atomically.

        The content is written to a temporary file in the same directory which
        then replaces the target, so an interrupted save never leaves a
        truncated database behind.

        Args:
            database_path: Path to the YAML database file
            database: Database object to save

        Raises:
            DatabaseFilesystemError: If file cannot be written
        """
        database_path = str(database_path)
        pages_dict = {}
        for page_id, record in database.pages.items():
            pages_dict[page_id] = {
                'dateModified': format_timestamp(record.date_modified),
                'dateSync': format_timestamp(record.date_sync),
                'version': record.version,
            }

        database_dict = {
            'pages': pages_dict,
            'config': {
                'baseURL': database.base_url,
            },
        }

        yaml_str = yaml.safe_dump(
            database_dict,
            default_flow_style=False,
            allow_unicode=True,
            sort_keys=False
        )

        database_dir = os.path.dirname(database_path)
        if database_dir:
            try:
                os.makedirs(database_dir, exist_ok=True)
            except Exception as e:
                raise DatabaseFilesystemError(
                    database_dir,
                    'create_directory',
                    str(e)
                )

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=os.path.basename(database_path) + ".",
                suffix=".tmp",
                dir=database_dir or ".",
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(yaml_str)
            os.replace(tmp_name, database_path)
        except PermissionError:
            raise DatabaseFilesystemError(
                database_path,
                'write',
                'Permission denied'
            )
        except Exception as e:
            raise DatabaseFilesystemError(
                database_path,
                'write',
                str(e)
            )
        finally:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)

    @classmethod
    def _parse_database(cls, database_dict: Dict[str, Any]) -> Database:
        """Parse and validate the database dictionary.

        Raises:
            DatabaseError: If the database is invalid
        """
        pages_raw = database_dict.get('pages') or {}
        if not isinstance(pages_raw, dict):
            raise DatabaseError(
                f"Field 'pages' must be a dictionary, got {type(pages_raw).__name__}",
                'pages'
            )

        pages = {}
        for page_id, record_dict in pages_raw.items():
            field_name = f'pages.{page_id}'
            if not isinstance(record_dict, dict):
                raise DatabaseError(
                    f"Page record must be a dictionary, got {type(record_dict).__name__}",
                    field_name
                )
            pages[str(page_id)] = cls._parse_record(record_dict, field_name)

        config_raw = database_dict.get('config') or {}
        if not isinstance(config_raw, dict):
            raise DatabaseError(
                f"Field 'config' must be a dictionary, got {type(config_raw).__name__}",
                'config'
            )
        base_url = config_raw.get('baseURL') or ''
        if not isinstance(base_url, str):
            raise DatabaseError(
                f"Field 'baseURL' must be a string, got {type(base_url).__name__}",
                'config.baseURL'
            )

        return Database(pages=pages, base_url=base_url)

    @classmethod
    def _parse_record(cls, record_dict: Dict[str, Any], field_name: str) -> TrackedPage:
        date_sync = cls._parse_date(record_dict.get('dateSync'), f'{field_name}.dateSync')
        if date_sync is None:
            raise DatabaseError("Field 'dateSync' is required", f'{field_name}.dateSync')
        date_modified = cls._parse_date(record_dict.get('dateModified'), f'{field_name}.dateModified')

        version = record_dict.get('version', DEFAULT_PAGE_VERSION)
        if version is None:
            version = DEFAULT_PAGE_VERSION
        if not isinstance(version, int) or isinstance(version, bool):
            raise DatabaseError(
                f"Field 'version' must be an integer, got {type(version).__name__}",
                f'{field_name}.version'
            )

        return TrackedPage(date_modified=date_modified, date_sync=date_sync, version=version)

    @classmethod
    def _parse_date(cls, value: Any, field_name: str) -> Optional[datetime]:
        if value is None:
            return None
        if isinstance(value, datetime):
            # Unquoted timestamps are already decoded by the YAML loader
            value = value.isoformat()
        if not isinstance(value, str):
            raise DatabaseError(
                f"Timestamp must be an ISO 8601 string, got {type(value).__name__}",
                field_name
            )
        try:
            return parse_timestamp(value.strip())
        except ValueError:
            raise DatabaseError(f"Invalid ISO 8601 timestamp: {value!r}", field_name)
