"""Data models for W pages and page queries."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .errors import UnsupportedPageVersionError

# Page format version -> name of the field holding the primary text
PRIMARY_FIELDS = {
    1: "main",
    2: "content",
}

DEFAULT_PAGE_VERSION = 2


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp into an aware UTC datetime.

    Naive timestamps are assumed to be UTC.

    Args:
        value: ISO 8601 string (``Z`` suffix accepted) or None

    Returns:
        Aware datetime in UTC, or None if value is empty

    Raises:
        ValueError: If the string is not a valid ISO 8601 timestamp
    """
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as an ISO 8601 string (None passes through)."""
    if value is None:
        return None
    return value.isoformat()


@dataclass
class Page:
    """W page resource.

    W stores the primary text of a page under a field that depends on the
    page format version: ``main`` for version 1, ``content`` for version 2.
    Use ``primary`` and ``set_primary`` instead of touching those fields.

    Attributes:
        page_id: Unique page identifier
        version: Page format version
        content: Raw ``content`` field
        main: Raw ``main`` field
        date_modified: Remote last modification time (UTC)

    Example:
        >>> page = Page.from_dict({"id": "foo", "version": 2, "content": "# Foo"})
        >>> page.primary
        '# Foo'
    """
    page_id: str
    version: int = DEFAULT_PAGE_VERSION
    content: str = ""
    main: str = ""
    date_modified: Optional[datetime] = None

    def _primary_field(self) -> str:
        try:
            return PRIMARY_FIELDS[self.version]
        except (KeyError, TypeError):
            raise UnsupportedPageVersionError(self.page_id, self.version)

    @property
    def primary(self) -> str:
        """Primary text of the page.

        Raises:
            UnsupportedPageVersionError: If the version is unknown
        """
        return getattr(self, self._primary_field())

    def set_primary(self, text: str) -> None:
        """Set the primary text of the page.

        Raises:
            UnsupportedPageVersionError: If the version is unknown
        """
        setattr(self, self._primary_field(), text)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Page":
        """Build a Page from a decoded API response.

        Raises:
            ValueError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Page must be a JSON object, got {type(data).__name__}")
        page_id = data.get("id")
        if not page_id:
            raise ValueError("Page is missing its 'id' field")

        version = data.get("version")
        if version is None:
            version = DEFAULT_PAGE_VERSION

        return cls(
            page_id=str(page_id),
            version=version,
            content=data.get("content") or "",
            main=data.get("main") or "",
            date_modified=parse_timestamp(data.get("datemodif")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Encode the page as an API request body."""
        return {
            "id": self.page_id,
            "version": self.version,
            "content": self.content,
            "main": self.main,
            "datemodif": format_timestamp(self.date_modified),
        }


@dataclass
class QueryOptions:
    """Filter and sort options for the page query endpoint.

    Empty list fields and unset time bounds are left out of the request body.
    """
    fields: List[str] = field(default_factory=list)
    sort_by: str = "id"
    order: int = 1
    tag_filter: List[str] = field(default_factory=list)
    tag_compare: str = "AND"
    tag_not: bool = False
    author_filter: List[str] = field(default_factory=list)
    author_compare: str = "AND"
    secure: int = 4
    link_to: str = ""
    invert: bool = False
    limit: int = 0
    since: Optional[datetime] = None
    until: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "sortby": self.sort_by,
            "order": self.order,
            "tagcompare": self.tag_compare,
            "tagnot": self.tag_not,
            "authorcompare": self.author_compare,
            "secure": self.secure,
            "invert": self.invert,
            "limit": self.limit,
        }
        if self.fields:
            body["fields"] = list(self.fields)
        if self.tag_filter:
            body["tagfilter"] = list(self.tag_filter)
        if self.author_filter:
            body["authorfilter"] = list(self.author_filter)
        if self.link_to:
            body["linkto"] = self.link_to
        if self.since is not None:
            body["since"] = format_timestamp(self.since)
        if self.until is not None:
            body["until"] = format_timestamp(self.until)
        return body
