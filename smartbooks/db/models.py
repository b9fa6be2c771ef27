"""
SQLAlchemy database models for Smartbooks.
"""

import enum

from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ReadingStatus(enum.Enum):
    """Reading state of a book in the catalog."""
    READING = "READING"
    READ = "READ"
    PLANNED = "PLANNED"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        return READING_STATUS_LABELS[self]


READING_STATUS_LABELS = {
    ReadingStatus.READING: "Reading",
    ReadingStatus.READ: "Read",
    ReadingStatus.PLANNED: "Planned",
    ReadingStatus.UNKNOWN: "Unknown",
}


class DataSource(enum.Enum):
    """Ingestion path that produced a stored book."""
    CSV = "CSV"
    JSON = "JSON"
    XML = "XML"
    API = "API"
    UNKNOWN = "UNKNOWN"

    @property
    def label(self) -> str:
        return DATA_SOURCE_LABELS[self]


DATA_SOURCE_LABELS = {
    DataSource.CSV: "CSV import",
    DataSource.JSON: "JSON import",
    DataSource.XML: "XML import",
    DataSource.API: "API",
    DataSource.UNKNOWN: "Unknown",
}


class Book(Base):
    """A book stored in the catalog, identified by its ISBN."""
    __tablename__ = 'books'

    id = Column(Integer, primary_key=True)
    isbn = Column(String(20), unique=True, index=True, nullable=False)
    title = Column(String(500), nullable=False)
    author = Column(String(500), nullable=True)
    genre = Column(String(200), nullable=True, index=True)
    publication_year = Column(Integer, nullable=True)
    publisher = Column(String(500), nullable=True)
    page_count = Column(Integer, nullable=True)
    cover_image_url = Column(String(1000), nullable=True)
    status = Column(Enum(ReadingStatus), nullable=False, default=ReadingStatus.UNKNOWN)
    source = Column(Enum(DataSource), nullable=False, default=DataSource.UNKNOWN)
    api_check_timestamp = Column(DateTime, nullable=True)  # last Open Library lookup
    api_data_update_timestamp = Column(DateTime, nullable=True)  # last lookup that changed a field

    def to_dict(self) -> dict:
        """Serialize for the JSON API."""
        return {
            'id': self.id,
            'isbn': self.isbn,
            'title': self.title,
            'author': self.author,
            'genre': self.genre,
            'publication_year': self.publication_year,
            'publisher': self.publisher,
            'page_count': self.page_count,
            'cover_image_url': self.cover_image_url,
            'status': self.status.value if self.status else None,
            'source': self.source.value if self.source else None,
            'api_check_timestamp': self.api_check_timestamp.isoformat() if self.api_check_timestamp else None,
            'api_data_update_timestamp': (
                self.api_data_update_timestamp.isoformat() if self.api_data_update_timestamp else None
            ),
        }

    def __repr__(self) -> str:
        return f"<Book isbn={self.isbn!r} title={self.title!r}>"
