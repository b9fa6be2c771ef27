"""
Web page routes: book table and file upload.
"""

from flask import Blueprint, current_app, flash, redirect, render_template, request, url_for

from smartbooks.catalog.decoders import FileType
from smartbooks.catalog.errors import DecodeError
from smartbooks.utils.logging import get_logger

logger = get_logger(__name__)

books_bp = Blueprint('books', __name__, url_prefix='/web/books')


@books_bp.route('/list')
def book_list():
    """Table of all books."""
    books = current_app.extensions['smartbooks'].books.find_all()
    return render_template('book-table.html', books=books)


@books_bp.route('/upload', methods=['POST'])
def upload():
    """Import an uploaded file and return to the table."""
    upload = request.files.get('file')
    file_type = request.form.get('fileType', '')

    if upload is None or not upload.filename:
        flash('Please select a file to upload', 'error')
        return redirect(url_for('books.book_list'))

    try:
        file_type = FileType.parse(file_type)
    except ValueError:
        flash('Invalid file type', 'error')
        return redirect(url_for('books.book_list'))

    logger.info("Importing uploaded file", filename=upload.filename, file_type=file_type.name)

    try:
        result = current_app.extensions['smartbooks'].importer.import_file(upload.read(), file_type)
        flash(
            f'{upload.filename} successfully uploaded! '
            f'{result.imported} imported, {result.skipped_duplicate} already present, '
            f'{result.skipped_missing_isbn} without ISBN, {result.failed} failed.',
            'success',
        )
    except DecodeError as e:
        logger.error("Error while reading uploaded file", filename=upload.filename, error=str(e))
        flash(f'Error while reading uploaded file: {e}', 'error')
    except Exception as e:
        logger.exception("Unexpected error during file upload", filename=upload.filename)
        flash(f'An unexpected error occurred during file upload: {e}', 'error')

    return redirect(url_for('books.book_list'))
