"""
Data models for catalog import and enrichment.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from smartbooks.db.models import Book, ReadingStatus, READING_STATUS_LABELS


def _parse_status(value):
    if value is None or isinstance(value, ReadingStatus):
        return value
    text = str(value).strip()
    if not text:
        return None
    for status, label in READING_STATUS_LABELS.items():
        if text.upper() == status.name or text.lower() == label.lower():
            return status
    raise ValueError(f"Unknown reading status: {value!r}")


class BookRecord(BaseModel):
    """
    Canonical in-memory representation of one book.

    Produced by the file decoders and the Open Library client. It has no
    source and no database id; those are assigned when the record is stored.
    Field names are accepted in camelCase, snake_case and the German
    spellings used by existing data files (``titel``, ``autor``).
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    isbn: Optional[str] = None
    title: Optional[str] = Field(default=None, validation_alias=AliasChoices("title", "titel"))
    author: Optional[str] = Field(default=None, validation_alias=AliasChoices("author", "autor"))
    genre: Optional[str] = None
    publication_year: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("publicationYear", "publication_year")
    )
    publisher: Optional[str] = None
    page_count: Optional[int] = Field(
        default=None, validation_alias=AliasChoices("pageCount", "page_count")
    )
    cover_image_url: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("coverImageUrl", "cover_image_url")
    )
    status: Optional[ReadingStatus] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        return _parse_status(value)

    def to_book(self) -> Book:
        """Create an unsaved Book entity with the same field values."""
        return Book(
            isbn=self.isbn,
            title=self.title,
            author=self.author,
            genre=self.genre,
            publication_year=self.publication_year,
            publisher=self.publisher,
            page_count=self.page_count,
            cover_image_url=self.cover_image_url,
            status=self.status,
        )


@dataclass
class ImportResult:
    """Outcome counts of one import batch."""
    source: str
    imported: int = 0
    skipped_missing_isbn: int = 0
    skipped_duplicate: int = 0
    failed: int = 0

    @property
    def processed(self) -> int:
        return self.imported + self.skipped_missing_isbn + self.skipped_duplicate + self.failed

    def to_dict(self) -> dict:
        return {
            'source': self.source,
            'processed': self.processed,
            'imported': self.imported,
            'skipped_missing_isbn': self.skipped_missing_isbn,
            'skipped_duplicate': self.skipped_duplicate,
            'failed': self.failed,
        }
