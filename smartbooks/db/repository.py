"""
Book repository: ISBN-keyed access to the books table.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from smartbooks.db.models import Book, ReadingStatus


class BookRepository:
    """
    Data access for books, bound to one SQLAlchemy session.

    The unique constraint on ``books.isbn`` is the only guarantee against
    duplicate ISBNs; callers treat an IntegrityError from ``save`` as a
    conflict.
    """

    def __init__(self, session: Session):
        self.session = session

    def find_by_isbn(self, isbn: str) -> Optional[Book]:
        return self.session.query(Book).filter(Book.isbn == isbn).first()

    def exists_by_isbn(self, isbn: str) -> bool:
        return self.session.query(
            self.session.query(Book).filter(Book.isbn == isbn).exists()
        ).scalar()

    def save(self, book: Book) -> Book:
        """
        Insert the book if it has no id yet, otherwise update it.

        Flushes immediately so that store errors surface here rather than
        at commit time.
        """
        if book.id is None:
            self.session.add(book)
        else:
            book = self.session.merge(book)
        self.session.flush()
        return book

    def delete_by_isbn(self, isbn: str) -> None:
        self.session.query(Book).filter(Book.isbn == isbn).delete(synchronize_session=False)

    def find_all(self) -> List[Book]:
        return self.session.query(Book).order_by(Book.id.asc()).all()

    def find_by_genre(self, genre: str) -> List[Book]:
        return self.session.query(Book).filter(Book.genre == genre).all()

    def find_by_status(self, status: ReadingStatus) -> List[Book]:
        return self.session.query(Book).filter(Book.status == status).all()

    def find_by_author(self, author: str) -> List[Book]:
        return self.session.query(Book).filter(Book.author == author).all()
