"""
Enrichment of stored books with Open Library data.
"""

from datetime import datetime
from typing import Any, Callable, List, Optional, Protocol, Tuple

from smartbooks.catalog.errors import NotFound
from smartbooks.catalog.models import BookRecord
from smartbooks.db.database import SessionFactory, get_db_session
from smartbooks.db.models import Book
from smartbooks.db.repository import BookRepository
from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)


class BookDetailsSource(Protocol):
    def fetch_book_details(self, isbn: str) -> Optional[BookRecord]:
        ...


def _present(value: Any) -> bool:
    return value is not None


def _positive(value: Any) -> bool:
    # Open Library reports 0 pages when the count is unknown
    return value is not None and value > 0


# (field, accept remote value?) - a stored field is overwritten only when
# the remote value is accepted and differs from the stored one.
MERGE_RULES: List[Tuple[str, Callable[[Any], bool]]] = [
    ("title", _present),
    ("author", _present),
    ("publication_year", _present),
    ("publisher", _present),
    ("page_count", _positive),
    ("cover_image_url", _present),
]


def merge_remote_fields(book: Book, remote: BookRecord) -> List[str]:
    """
    Copy accepted remote values onto ``book``.

    Returns:
        Names of the fields that were changed
    """
    changed = []
    for field, accept in MERGE_RULES:
        remote_value = getattr(remote, field)
        if accept(remote_value) and getattr(book, field) != remote_value:
            setattr(book, field, remote_value)
            changed.append(field)
    return changed


class BookReconciler:
    """
    Refreshes a stored book from Open Library without discarding local data.
    """

    def __init__(
        self,
        client: BookDetailsSource,
        session_factory: SessionFactory = get_db_session,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.session_factory = session_factory
        self.clock = clock

    def reconcile(self, isbn: str) -> Book:
        """
        Merge Open Library data into the stored book with this ISBN.

        The check timestamp is always updated; the update timestamp only
        when at least one field changed.

        Raises:
            NotFound: If no book with this ISBN is stored
        """
        with self.session_factory() as session:
            repository = BookRepository(session)
            book = repository.find_by_isbn(isbn)
            if book is None:
                raise NotFound(isbn)

            book.api_check_timestamp = self.clock()

            remote = self.client.fetch_book_details(isbn)
            if remote is None:
                logger.warning(
                    "Book not found on Open Library, only updating check timestamp",
                    isbn=isbn,
                )
                return repository.save(book)

            changed = merge_remote_fields(book, remote)
            if changed:
                book.api_data_update_timestamp = self.clock()
                logger.info(
                    "Book updated with data from Open Library",
                    title=book.title,
                    isbn=isbn,
                    fields=changed,
                )
            else:
                logger.info(
                    "Book data is already up-to-date, no changes made",
                    title=book.title,
                    isbn=isbn,
                )

            return repository.save(book)
