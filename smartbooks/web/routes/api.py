"""
JSON API routes for the book catalog.
"""

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from smartbooks.catalog.errors import (
    DecodeError,
    DuplicateIdentifier,
    MissingIdentifier,
    NotFound,
    PersistenceConflict,
)
from smartbooks.catalog.models import BookRecord
from smartbooks.db.models import DataSource, ReadingStatus
from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api/books')


def _services():
    return current_app.extensions['smartbooks']


def _record_from_body():
    """Parse the request body; returns (record, error_response)."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return None, (jsonify({'error': 'Request body must be a JSON object'}), 400)
    try:
        return BookRecord.model_validate(body), None
    except ValidationError as e:
        details = e.errors(include_url=False, include_context=False)
        return None, (jsonify({'error': 'Invalid book data', 'details': details}), 400)


@api_bp.route('', methods=['POST'])
def add_book():
    """Create a book."""
    record, error = _record_from_body()
    if error:
        return error

    try:
        book = _services().books.save_book(record, DataSource.API)
        return jsonify(book.to_dict()), 201
    except (MissingIdentifier, DuplicateIdentifier, PersistenceConflict) as e:
        return jsonify({'error': str(e)}), 409
    except Exception as e:
        logger.exception("Failed to create book", error=str(e))
        return jsonify({'error': f'An unexpected error occurred. {e}'}), 500


@api_bp.route('', methods=['GET'])
def list_books():
    """List books, optionally filtered by status, genre or author."""
    books = _services().books
    status = request.args.get('status')
    genre = request.args.get('genre')
    author = request.args.get('author')

    if status:
        try:
            result = books.find_by_status(ReadingStatus[status.upper()])
        except KeyError:
            return jsonify({'error': f'Unknown status: {status}'}), 400
    elif genre:
        result = books.find_by_genre(genre)
    elif author:
        result = books.find_by_author(author)
    else:
        result = books.find_all()

    return jsonify([book.to_dict() for book in result])


@api_bp.route('/<isbn>', methods=['GET'])
def get_book(isbn):
    """Get a book by ISBN."""
    book = _services().books.find_by_isbn(isbn)
    if book is None:
        return jsonify({'error': f'Book with ISBN {isbn} does not exist.'}), 404
    return jsonify(book.to_dict())


@api_bp.route('/<isbn>', methods=['PUT'])
def update_book(isbn):
    """Replace the fields of a stored book."""
    record, error = _record_from_body()
    if error:
        return error

    if record.isbn is not None and record.isbn != isbn:
        return jsonify({'error': 'ISBN in path does not match ISBN in body.'}), 400

    try:
        book = _services().books.update_book(isbn, record)
        return jsonify(book.to_dict())
    except NotFound as e:
        return jsonify({'error': str(e)}), 404
    except Exception as e:
        logger.exception("Failed to update book", isbn=isbn, error=str(e))
        return jsonify({'error': 'An unexpected error occurred while updating the book.'}), 500


@api_bp.route('/<isbn>', methods=['DELETE'])
def delete_book(isbn):
    """Delete a book by ISBN."""
    try:
        _services().books.delete_book(isbn)
        return '', 204
    except (NotFound, MissingIdentifier) as e:
        return jsonify({'error': str(e)}), 404
    except Exception as e:
        logger.exception("Failed to delete book", isbn=isbn, error=str(e))
        return jsonify({'error': 'An unexpected error occurred while deleting the book.'}), 500


@api_bp.route('/<isbn>/fetch-api-data', methods=['POST'])
def fetch_api_data(isbn):
    """Refresh a stored book with Open Library data."""
    try:
        book = _services().reconciler.reconcile(isbn)
        return jsonify(book.to_dict())
    except NotFound as e:
        return jsonify({'error': str(e)}), 404
    except Exception as e:
        logger.exception("Failed to fetch Open Library data", isbn=isbn, error=str(e))
        return jsonify({
            'error': f'An unexpected error occurred while fetching and updating the book. {e}'
        }), 500


@api_bp.route('/import', methods=['POST'])
def import_books():
    """Import an uploaded CSV, JSON or XML file."""
    upload = request.files.get('file')
    file_type = request.args.get('fileType') or request.form.get('fileType', '')

    if upload is None or not upload.filename:
        return jsonify({'error': 'Please select a file to upload'}), 400

    try:
        result = _services().importer.import_file(upload.read(), file_type)
        return jsonify(result.to_dict())
    except (DecodeError, ValueError) as e:
        return jsonify({'error': str(e)}), 400
