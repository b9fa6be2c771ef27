"""
Book catalog service: create, read, update and delete books by ISBN.
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from smartbooks.catalog.errors import DuplicateIdentifier, MissingIdentifier, NotFound, PersistenceConflict
from smartbooks.catalog.models import BookRecord
from smartbooks.db.database import SessionFactory, get_db_session
from smartbooks.db.models import Book, DataSource, ReadingStatus
from smartbooks.db.repository import BookRepository
from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)


class BookService:
    """
    Catalog operations used by the JSON API and the web page.
    """

    def __init__(self, session_factory: SessionFactory = get_db_session):
        self.session_factory = session_factory

    def save_book(self, record: BookRecord, source: DataSource = DataSource.UNKNOWN) -> Book:
        """
        Store a new book.

        Raises:
            MissingIdentifier: If the book has no ISBN
            DuplicateIdentifier: If a book with this ISBN already exists
            PersistenceConflict: If the database rejects the book
        """
        if not record.isbn:
            raise MissingIdentifier(record.title)

        try:
            with self.session_factory() as session:
                repository = BookRepository(session)
                if repository.exists_by_isbn(record.isbn):
                    raise DuplicateIdentifier(record.isbn)

                book = record.to_book()
                book.id = None
                book.source = source or DataSource.UNKNOWN
                if book.status is None:
                    book.status = ReadingStatus.UNKNOWN
                book = repository.save(book)
        except IntegrityError as e:
            raise PersistenceConflict(record.isbn, str(e.orig)) from e

        logger.info("Saved book", isbn=book.isbn, title=book.title, source=book.source.value)
        return book

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        with self.session_factory() as session:
            return BookRepository(session).find_by_isbn(isbn)

    def find_all(self) -> List[Book]:
        with self.session_factory() as session:
            return BookRepository(session).find_all()

    def find_by_status(self, status: ReadingStatus) -> List[Book]:
        with self.session_factory() as session:
            return BookRepository(session).find_by_status(status)

    def find_by_genre(self, genre: str) -> List[Book]:
        with self.session_factory() as session:
            return BookRepository(session).find_by_genre(genre)

    def find_by_author(self, author: str) -> List[Book]:
        with self.session_factory() as session:
            return BookRepository(session).find_by_author(author)

    def update_book(self, isbn: str, record: BookRecord) -> Book:
        """
        Replace the editable fields of a stored book. The ISBN never changes.

        Raises:
            NotFound: If no book with this ISBN is stored
        """
        try:
            with self.session_factory() as session:
                repository = BookRepository(session)
                book = repository.find_by_isbn(isbn)
                if book is None:
                    raise NotFound(isbn)

                book.title = record.title
                book.author = record.author
                book.genre = record.genre
                book.publication_year = record.publication_year
                book.publisher = record.publisher
                book.page_count = record.page_count
                book.cover_image_url = record.cover_image_url
                book.status = record.status or ReadingStatus.UNKNOWN
                book = repository.save(book)
        except IntegrityError as e:
            raise PersistenceConflict(isbn, str(e.orig)) from e

        logger.info("Updated book", isbn=isbn, title=book.title)
        return book

    def delete_book(self, isbn: str) -> None:
        """
        Raises:
            MissingIdentifier: If ``isbn`` is empty
            NotFound: If no book with this ISBN is stored
        """
        if not isbn or not isbn.strip():
            raise MissingIdentifier()

        with self.session_factory() as session:
            repository = BookRepository(session)
            if not repository.exists_by_isbn(isbn):
                raise NotFound(isbn)
            repository.delete_by_isbn(isbn)

        logger.info("Deleted book", isbn=isbn)
