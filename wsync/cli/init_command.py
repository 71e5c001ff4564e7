"""InitCommand for repository initialization.

This module implements the init command that turns an empty directory into a
wsync repository: it checks that W answers at the given URL with a supported
version, logs in, and writes the tracking database and token file.
"""

import logging
import re
from typing import Callable, Optional, Tuple
from urllib.parse import urlparse

from wsync.w_client.api_wrapper import APIWrapper
from wsync.w_client.auth import Authenticator
from .config import DatabaseManager
from .errors import InitError
from .models import Database, RepoSettings
from .prompts import DecisionSource, RichPrompts

logger = logging.getLogger(__name__)


class InitCommand:
    """Handles initialization of a wsync repository.

    Example:
        >>> init = InitCommand(RepoSettings(repo_path=Path("./notes")))
        >>> init.run("https://w.example.com")
    """

    ACCEPTED_MAJOR = 3
    MIN_MINOR = 5

    VERSION_PATTERN = re.compile(r'^v(\d+)\.(\d+)\.(\d+)')

    def __init__(
        self,
        settings: RepoSettings,
        decisions: Optional[DecisionSource] = None,
        database_manager: Optional[DatabaseManager] = None,
        authenticator: Optional[Authenticator] = None,
        api_factory: Optional[Callable[[str], APIWrapper]] = None,
    ):
        """Initialize the init command.

        Args:
            settings: Settings of the current invocation
            decisions: Decision source for confirmations and credentials
            database_manager: DatabaseManager for saving the database
            authenticator: Authenticator used to save the token
            api_factory: Builds the API client from the base URL
        """
        self.settings = settings
        self.decisions = decisions or RichPrompts()
        self.database_manager = database_manager or DatabaseManager()
        self.authenticator = authenticator or Authenticator(token_path=settings.token_path)
        self.api_factory = api_factory or APIWrapper

    def _check_empty_directory(self) -> None:
        repo_path = self.settings.repo_path
        try:
            entries = list(repo_path.iterdir())
        except OSError as e:
            raise InitError(f"Could not read directory {repo_path}: {e}") from e
        if entries:
            raise InitError(f"Directory {repo_path.resolve()} is not empty")

    def _validate_url(self, url: str) -> None:
        """Validate that a URL has proper structure.

        Raises:
            InitError: If URL is malformed or missing required components
        """
        if not url or not url.strip():
            raise InitError("URL cannot be empty")

        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https'):
            raise InitError(
                f"Invalid URL scheme: '{parsed.scheme or '(missing)'}'\n"
                f"URL must start with http:// or https://"
            )
        if not parsed.netloc.strip():
            raise InitError(
                "Invalid URL: missing domain name\n"
                "URL must include a domain (e.g., w.example.com)"
            )

    @classmethod
    def parse_version(cls, version: str) -> Tuple[int, int, int]:
        """Parse a W version string like ``v3.5.1``.

        Raises:
            InitError: If the string does not start with vMAJOR.MINOR.PATCH
        """
        match = cls.VERSION_PATTERN.match(version)
        if not match:
            raise InitError(f"Unidentified W version: could not match version pattern in {version!r}")
        return int(match.group(1)), int(match.group(2)), int(match.group(3))

    def check_version(self, version: Optional[str]) -> None:
        """Refuse W versions this client cannot talk to.

        A server that does not report its version is accepted.

        Raises:
            InitError: If the version is unparsable or unsupported
        """
        if version is None:
            logger.info("W did not report its version, skipping version check")
            return

        major, minor, _ = self.parse_version(version)
        if major != self.ACCEPTED_MAJOR or minor < self.MIN_MINOR:
            raise InitError(f"Unsupported W version {version!r} (an upgrade could help)")
        logger.info(f"W version {version} is supported")

    def run(self, base_url: Optional[str] = None) -> None:
        """Initialize the repository.

        Args:
            base_url: URL where W is installed (asked for when omitted)

        Raises:
            InitError: If the directory is unusable, the user aborts, or the
                URL or W version is invalid
            InvalidCredentialsError: If W rejects the credentials
            APIUnreachableError: If W cannot be contacted
            APIAccessError: If W answers with an error
            DatabaseFilesystemError: If the database cannot be written
        """
        self._check_empty_directory()

        absolute_path = self.settings.repo_path.resolve()
        confirmed = self.decisions.confirm(
            f"Confirm use of path: '{absolute_path}'",
            default=False,
            description="Do you want to use this folder to store the pages?",
        )
        if not confirmed:
            raise InitError("Init aborted")

        if not base_url:
            base_url = self.decisions.ask("What is the URL where W is installed?")
        base_url = base_url.strip()
        self._validate_url(base_url)

        api = self.api_factory(base_url)
        self.check_version(api.health())
        logger.info(f"Connected to W at {base_url}")

        username = self.decisions.ask("Username")
        password = self.decisions.ask("Password", password=True)
        token = api.auth(username, password)

        self.database_manager.save(self.settings.database_path, Database(base_url=base_url))
        try:
            self.authenticator.save_token(token)
        except OSError as e:
            raise InitError(f"Could not save token to {self.settings.token_path}: {e}") from e
        logger.info("Logged in, repository initialized")
