"""
Exceptions raised by the catalog import and enrichment pipeline.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog errors."""


class DecodeError(CatalogError):
    """An uploaded document could not be decoded; the whole file is rejected."""

    def __init__(self, file_type: str, message: str):
        self.file_type = file_type
        self.message = message
        super().__init__(f"Could not decode {file_type} document: {message}")


class MissingIdentifier(CatalogError):
    """A book has no ISBN."""

    def __init__(self, title: Optional[str] = None):
        self.title = title
        super().__init__("ISBN of book cannot be null or empty.")


class DuplicateIdentifier(CatalogError):
    """A book with the same ISBN is already stored."""

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"Book with ISBN {isbn} already exists.")


class PersistenceConflict(CatalogError):
    """The store rejected a write, e.g. a unique constraint violation."""

    def __init__(self, isbn: str, message: str):
        self.isbn = isbn
        self.message = message
        super().__init__(f"Could not save book with ISBN {isbn}: {message}")


class NotFound(CatalogError):
    """No book with the requested ISBN is stored."""

    def __init__(self, isbn: str):
        self.isbn = isbn
        super().__init__(f"Book with ISBN {isbn} does not exist.")


class RemoteUnavailable(CatalogError):
    """Open Library could not be reached or returned an unusable response."""
