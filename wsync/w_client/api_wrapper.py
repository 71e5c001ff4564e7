"""API wrapper for the W HTTP/JSON API.

This module talks to W through a requests Session and translates HTTP
failures into our typed exception hierarchy. It knows nothing
about local files or the tracking database.
"""

import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from .errors import (
    APIAccessError,
    APIUnreachableError,
    InvalidCredentialsError,
    PageConflictError,
    PageNotFoundError,
)
from .models import Page, QueryOptions

logger = logging.getLogger(__name__)


class APIWrapper:
    """Thin client over the W API with error translation.

    This class:
    1. Injects the bearer token and User-Agent headers
    2. Encodes request bodies and decodes responses as JSON
    3. Translates HTTP status codes and transport errors to typed exceptions
    4. Sanitizes error text so tokens and passwords never reach the logs

    Example:
        >>> api = APIWrapper("https://w.example.com", token="abc")
        >>> page = api.get_page("welcome")
        >>> print(page.primary)
    """

    API_PREFIX = "/api/v0"
    USER_AGENT = "wsync"
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        """Initialize the API wrapper.

        Args:
            base_url: URL where W is installed (trailing slashes are ignored)
            token: Optional bearer token
            session: Optional requests Session (a new one is created if omitted)
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or "").rstrip("/")
        self.token = token
        self.timeout = timeout
        self._session = session or requests.Session()

    def _validate_page_id(self, page_id: str) -> None:
        """Reject page ids that cannot be used as a single URL path segment.

        Raises:
            ValueError: If page_id is empty or contains separators or whitespace
        """
        if not page_id or not str(page_id).strip():
            raise ValueError("page_id cannot be empty")
        if re.search(r'[/\\\s]', page_id) or page_id in (".", ".."):
            raise ValueError(f"Invalid page_id format: '{page_id}'")

    def _sanitize_credentials(self, text: str) -> str:
        """Mask bearer tokens and password values in error text."""
        if not text:
            return text

        sanitized = re.sub(
            r'Bearer\s+[^\s\n\r]+',
            'Bearer ***REDACTED***',
            text,
            flags=re.IGNORECASE
        )
        sanitized = re.sub(
            r'(password|token)["\']?\s*[:=]\s*["\']?([^"\'\s&,}]+)',
            r'\1=***REDACTED***',
            sanitized,
            flags=re.IGNORECASE
        )
        return sanitized

    def _headers(self) -> Dict[str, str]:
        headers = {"User-Agent": self.USER_AGENT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json_body: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        page_id: Optional[str] = None,
    ) -> requests.Response:
        """Send a request and return the response if its status is 200.

        ``page_id`` is set for page endpoints; 404 and 409 answers only
        become page errors there.

        Raises:
            APIUnreachableError: On connection failures and timeouts
            WError: Translated error for any non-200 status
        """
        url = f"{self.base_url}{self.API_PREFIX}{path}"
        logger.debug(f"{method} {url}")
        try:
            response = self._session.request(
                method,
                url,
                headers=self._headers(),
                json=json_body,
                params=params,
                timeout=self.timeout,
            )
        except (Timeout, ConnectionError) as e:
            raise APIUnreachableError(endpoint=self.base_url) from e
        except RequestException as e:
            safe_error_msg = self._sanitize_credentials(str(e))
            logger.error(f"API operation failed: {operation} - {safe_error_msg}")
            raise APIAccessError(f"W API failure during {operation}: {safe_error_msg}") from e

        if response.status_code != 200:
            raise self._translate_status(response, operation, page_id)
        return response

    def _translate_status(
        self, response: requests.Response, operation: str, page_id: Optional[str] = None
    ) -> Exception:
        """Translate a non-200 response to a typed exception.

        W answers errors with a JSON body ``{"message": "..."}``; when present
        the message is included in the error text.
        """
        status_code = response.status_code
        message = None
        try:
            body = response.json()
            if isinstance(body, dict) and body.get("message"):
                message = str(body["message"])
        except ValueError:
            pass

        detail = f"status code: {status_code}"
        if message:
            detail += f" - {self._sanitize_credentials(message)}"

        if status_code in (401, 403):
            return InvalidCredentialsError(endpoint=self.base_url, message=detail)
        if page_id is not None and status_code == 404:
            return PageNotFoundError(page_id=page_id)
        if page_id is not None and status_code == 409:
            return PageConflictError(page_id=page_id, message=detail)

        logger.error(f"API operation failed: {operation} - {detail}")
        return APIAccessError(f"W API failure during {operation} ({detail})", status_code=status_code)

    def _decode(self, response: requests.Response, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise APIAccessError(f"Could not decode response of {operation}: {e}") from e

    def get_page(self, page_id: str) -> Page:
        """Fetch a page by its ID.

        Raises:
            InvalidCredentialsError: If the token is rejected
            PageNotFoundError: If the page doesn't exist
            APIUnreachableError: If the API is unreachable
            APIAccessError: For any other failure, including undecodable pages
        """
        self._validate_page_id(page_id)
        operation = f"get_page({page_id})"
        response = self._request("GET", f"/page/{quote(page_id, safe='')}", operation, page_id=page_id)
        data = self._decode(response, operation)
        try:
            return Page.from_dict(data)
        except ValueError as e:
            raise APIAccessError(f"Could not decode page {page_id}: {e}") from e

    def update_page(self, page: Page, force: bool = False) -> Page:
        """Send new page content to W.

        The page carries the last modification date known to the client;
        W uses it to detect that its copy changed in the meantime.

        Args:
            page: Page with id, version, primary text and known modification date
            force: Overwrite the remote copy even if it changed

        Returns:
            The updated page as returned by W

        Raises:
            PageConflictError: If W reports a conflict (HTTP 409)
            InvalidCredentialsError: If the token is rejected
            PageNotFoundError: If the page doesn't exist
            APIUnreachableError: If the API is unreachable
            APIAccessError: For any other failure
        """
        self._validate_page_id(page.page_id)
        operation = f"update_page({page.page_id})"
        params = {"force": "1"} if force else None
        response = self._request(
            "POST",
            f"/page/{quote(page.page_id, safe='')}/update",
            operation,
            json_body=page.to_dict(),
            params=params,
            page_id=page.page_id,
        )
        data = self._decode(response, operation)
        try:
            return Page.from_dict(data)
        except ValueError as e:
            raise APIAccessError(f"Could not decode updated page {page.page_id}: {e}") from e

    def list_pages(self) -> List[str]:
        """Return the ids of all pages visible to the authenticated user."""
        operation = "list_pages"
        response = self._request("GET", "/pages/list", operation)
        data = self._decode(response, operation)
        if not isinstance(data, dict) or not isinstance(data.get("pages", []), list):
            raise APIAccessError("Could not decode page list")
        return [str(page_id) for page_id in data.get("pages") or []]

    def query_pages(self, options: Optional[QueryOptions] = None) -> Dict[str, Page]:
        """Run a filtered and sorted page search.

        Args:
            options: Query options (defaults to ``QueryOptions()``)

        Returns:
            Dict mapping page id to Page
        """
        operation = "query_pages"
        options = options or QueryOptions()
        response = self._request("POST", "/pages/query", operation, json_body=options.to_dict())
        data = self._decode(response, operation)
        if not isinstance(data, dict) or not isinstance(data.get("pages", {}), dict):
            raise APIAccessError("Could not decode page query result")

        pages = {}
        for page_id, raw_page in (data.get("pages") or {}).items():
            if isinstance(raw_page, dict) and "id" not in raw_page:
                raw_page = dict(raw_page, id=page_id)
            try:
                pages[page_id] = Page.from_dict(raw_page)
            except ValueError as e:
                raise APIAccessError(f"Could not decode page {page_id}: {e}") from e
        return pages

    def auth(self, username: str, password: str) -> str:
        """Exchange credentials for a bearer token.

        Raises:
            InvalidCredentialsError: If the credentials are rejected
        """
        operation = "auth"
        response = self._request(
            "POST",
            "/auth",
            operation,
            json_body={"username": username, "password": password},
        )
        data = self._decode(response, operation)
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise APIAccessError("W did not return a token")
        return str(token)

    def health(self) -> Optional[str]:
        """Check that W is alive.

        Returns:
            The W version string if the server reports one, else None

        Raises:
            APIUnreachableError: If the API is unreachable
            APIAccessError: If W answers with an error status
        """
        response = self._request("GET", "/health", "health")
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict) and data.get("version"):
            return str(data["version"])
        return None
