"""
Open Library API client for Smartbooks.

Documentation: https://openlibrary.org/dev/docs/api/books
Looks up a single edition by ISBN through the Books API (``jscmd=data``).
"""

from typing import Any, Dict, Optional

from smartbooks.api.base import APIError, BaseClient
from smartbooks.catalog.dates import resolve_year
from smartbooks.catalog.errors import RemoteUnavailable
from smartbooks.catalog.models import BookRecord
from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)

OPENLIBRARY_API_URL = "https://openlibrary.org/api"
USER_AGENT = "Smartbooks/0.1.0"


def _first_name(book_node: Dict[str, Any], field: str) -> Optional[str]:
    """Return the ``name`` of the first entry of a list field like ``authors``."""
    entries = book_node.get(field)
    if isinstance(entries, list) and entries:
        first = entries[0]
        if isinstance(first, dict) and first.get("name") is not None:
            return str(first["name"])
    return None


class OpenLibraryClient(BaseClient):
    """
    Client for the Open Library Books API.

    Lookups are best effort: every failure is logged and reported as
    "no data" so that enrichment never breaks the caller. Requests are not
    retried.
    """

    def __init__(self, base_url: str = OPENLIBRARY_API_URL, timeout: float = 10):
        super().__init__(base_url, timeout=timeout, max_retries=0, user_agent=USER_AGENT)

    def fetch_book_details(self, isbn: str) -> Optional[BookRecord]:
        """
        Fetch book data for an ISBN.

        Args:
            isbn: ISBN to look up

        Returns:
            BookRecord with the remote data, or None if Open Library has no
            entry or could not be queried
        """
        try:
            payload = self._fetch(isbn)
        except RemoteUnavailable as e:
            logger.error("Open Library lookup failed", isbn=isbn, error=str(e))
            return None

        if not payload:
            logger.warning("No response from Open Library", isbn=isbn)
            return None

        book_node = payload.get(f"ISBN:{isbn}")
        if not isinstance(book_node, dict) or not book_node:
            logger.warning("No book found on Open Library", isbn=isbn)
            return None

        try:
            return self._to_record(isbn, book_node)
        except Exception as e:
            logger.error(
                "Unexpected Open Library response",
                isbn=isbn,
                error=str(e),
            )
            return None

    def _fetch(self, isbn: str) -> Optional[Dict[str, Any]]:
        try:
            payload = self.get(
                "/books",
                params={"bibkeys": f"ISBN:{isbn}", "jscmd": "data", "format": "json"},
            )
        except APIError as e:
            raise RemoteUnavailable(str(e)) from e

        if payload is not None and not isinstance(payload, dict):
            raise RemoteUnavailable(f"expected a JSON object, got {type(payload).__name__}")

        logger.debug("Open Library response", isbn=isbn, payload=payload)
        return payload

    def _to_record(self, isbn: str, book_node: Dict[str, Any]) -> BookRecord:
        # Genre is not mapped from Open Library subjects
        page_count = book_node.get("number_of_pages")

        cover_url = None
        cover = book_node.get("cover")
        if isinstance(cover, dict) and cover.get("large"):
            cover_url = cover["large"]

        publication_year = None
        if book_node.get("publish_date") is not None:
            publication_year = resolve_year(str(book_node["publish_date"]))

        return BookRecord(
            isbn=isbn,
            title=book_node["title"],
            author=_first_name(book_node, "authors"),
            publisher=_first_name(book_node, "publishers"),
            page_count=int(page_count) if page_count is not None else None,
            cover_image_url=cover_url,
            publication_year=publication_year,
        )
