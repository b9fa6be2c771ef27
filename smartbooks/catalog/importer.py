"""
Import of decoded book lists into the catalog.

Imports are best effort. Books without an ISBN and books whose ISBN is
already stored are skipped, and a book that fails to save is logged and
skipped; none of these stop the rest of the batch.
"""

from typing import Optional, Sequence, Union

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from smartbooks.catalog.decoders import FileType, decode
from smartbooks.catalog.errors import DuplicateIdentifier, MissingIdentifier, PersistenceConflict
from smartbooks.catalog.models import BookRecord, ImportResult
from smartbooks.db.database import SessionFactory, get_db_session
from smartbooks.db.models import DataSource, ReadingStatus
from smartbooks.db.repository import BookRepository
from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)


class BookImporter:
    """
    Stores new books from a decoded batch, deduplicated by ISBN.
    """

    def __init__(
        self,
        session_factory: SessionFactory = get_db_session,
        json_collection_field: Optional[str] = None,
    ):
        self.session_factory = session_factory
        self.json_collection_field = json_collection_field

    def import_file(self, data: bytes, file_type: Union[FileType, str]) -> ImportResult:
        """
        Decode an uploaded document and import its books.

        Raises:
            DecodeError: If the document is malformed; nothing is imported
        """
        file_type = FileType.parse(file_type)
        logger.info("Importing file", file_type=file_type.name, size=len(data))
        records = decode(data, file_type, json_collection_field=self.json_collection_field)
        return self.import_batch(records, file_type.data_source)

    def import_batch(self, records: Sequence[BookRecord], source: DataSource) -> ImportResult:
        """
        Import books in order, skipping those that cannot be stored.

        Args:
            records: Decoded books
            source: Provenance tag stored on every imported book

        Returns:
            ImportResult with per-outcome counts
        """
        result = ImportResult(source=source.value)
        log = logger.bind(source=source.value)

        if not records:
            log.info("Batch contains no books to import")
            return result

        for record in records:
            try:
                self._import_one(record, source)
            except MissingIdentifier:
                result.skipped_missing_isbn += 1
                log.warning("Book has no ISBN, skipping import", title=record.title)
            except DuplicateIdentifier:
                result.skipped_duplicate += 1
                log.info(
                    "Book already exists in database, skipping import",
                    title=record.title,
                    isbn=record.isbn,
                )
            except PersistenceConflict as e:
                result.failed += 1
                log.error(
                    "Error while saving book",
                    title=record.title,
                    isbn=record.isbn,
                    error=e.message,
                )
            except SQLAlchemyError as e:
                result.failed += 1
                log.error(
                    "Unexpected error during import of book",
                    title=record.title,
                    isbn=record.isbn,
                    error=str(e),
                )
            else:
                result.imported += 1
                log.info("Imported book", title=record.title, isbn=record.isbn)

        log.info(
            "Import finished",
            processed=result.processed,
            imported=result.imported,
            skipped_missing_isbn=result.skipped_missing_isbn,
            skipped_duplicate=result.skipped_duplicate,
            failed=result.failed,
        )
        return result

    def _import_one(self, record: BookRecord, source: DataSource) -> None:
        if not record.isbn:
            raise MissingIdentifier(record.title)

        # Existence check and insert are not atomic; a concurrent import of
        # the same ISBN is caught by the unique constraint instead.
        try:
            with self.session_factory() as session:
                repository = BookRepository(session)
                if repository.exists_by_isbn(record.isbn):
                    raise DuplicateIdentifier(record.isbn)

                book = record.to_book()
                book.id = None
                book.source = source
                if book.status is None:
                    book.status = ReadingStatus.UNKNOWN
                repository.save(book)
        except IntegrityError as e:
            raise PersistenceConflict(record.isbn, str(e.orig)) from e
