"""Shared fixtures: in-memory database and a fake Open Library client."""

from datetime import datetime, timedelta

import pytest

from smartbooks.catalog.models import BookRecord
from smartbooks.db.database import close_db, get_db_session, init_db
from smartbooks.db.models import Book, DataSource, ReadingStatus
from smartbooks.db.repository import BookRepository


@pytest.fixture
def db():
    """Fresh in-memory SQLite database for each test."""
    init_db("sqlite://")
    yield
    close_db()


@pytest.fixture
def stored_book(db):
    """Store one book and return a factory for more."""

    def _store(isbn="9783161484100", **fields):
        values = {
            "title": "Der Prozess",
            "author": "Franz Kafka",
            "status": ReadingStatus.READ,
            "source": DataSource.CSV,
        }
        values.update(fields)
        with get_db_session() as session:
            return BookRepository(session).save(Book(isbn=isbn, **values))

    return _store


def load_book(isbn):
    with get_db_session() as session:
        return BookRepository(session).find_by_isbn(isbn)


def load_all():
    with get_db_session() as session:
        return BookRepository(session).find_all()


class FakeOpenLibrary:
    """Returns canned records instead of calling Open Library."""

    def __init__(self, records=None):
        self.records = dict(records or {})
        self.calls = []

    def fetch_book_details(self, isbn):
        self.calls.append(isbn)
        return self.records.get(isbn)

    def close(self):
        pass


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start=datetime(2024, 5, 1, 12, 0)):
        self.current = start

    def __call__(self):
        value = self.current
        self.current += timedelta(minutes=1)
        return value


@pytest.fixture
def fake_openlibrary():
    return FakeOpenLibrary()


@pytest.fixture
def clock():
    return StepClock()


def record(**fields):
    return BookRecord(**fields)
