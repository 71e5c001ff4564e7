"""Bearer token persistence for W.

The token obtained from ``POST /auth`` is stored as a plain string in the
repository's hidden ``.wsync/token`` file. A ``WSYNC_TOKEN`` environment
variable (or ``.env`` entry, loaded with python-dotenv) takes precedence over
the file, which is convenient for headless runs.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .errors import TokenNotFoundError

logger = logging.getLogger(__name__)


class Authenticator:
    """Loads and saves the W bearer token of a repository.

    Tokens are never logged.

    Example:
        >>> auth = Authenticator("./notes")
        >>> auth.save_token("abc")
        >>> auth.get_token()
        'abc'
    """

    TOKEN_ENV_VAR = "WSYNC_TOKEN"
    DEFAULT_TOKEN_FILE = ".wsync/token"

    def __init__(self, repo_path: Union[str, Path] = ".", token_path: Optional[Union[str, Path]] = None):
        """Initialize the authenticator and load environment variables from .env.

        Args:
            repo_path: Repository root directory
            token_path: Token file path (defaults to <repo_path>/.wsync/token)
        """
        load_dotenv()
        self.token_path = Path(token_path) if token_path else Path(repo_path) / self.DEFAULT_TOKEN_FILE

    def get_token(self) -> str:
        """Return the bearer token.

        Raises:
            TokenNotFoundError: If neither the environment nor the token file
                provides a token
        """
        env_token = os.getenv(self.TOKEN_ENV_VAR)
        if env_token:
            logger.debug(f"Using token from {self.TOKEN_ENV_VAR}")
            return env_token.strip()

        try:
            token = self.token_path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            raise TokenNotFoundError(str(self.token_path))
        except OSError as e:
            raise TokenNotFoundError(str(self.token_path), str(e)) from e

        if not token:
            raise TokenNotFoundError(str(self.token_path), "token file is empty")
        return token

    def save_token(self, token: str) -> None:
        """Write the token file, creating the hidden directory if needed.

        Raises:
            OSError: If the file cannot be written
        """
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        self.token_path.write_text(token, encoding="utf-8")
        os.chmod(self.token_path, 0o640)
        logger.info(f"Saved token to {self.token_path}")
