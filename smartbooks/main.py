"""
Main entry point for Smartbooks.

Builds the Flask application and serves it with waitress.
"""

import atexit
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from flask import Flask, redirect, url_for

from smartbooks.api.openlibrary import OpenLibraryClient
from smartbooks.catalog.importer import BookImporter
from smartbooks.catalog.reconciler import BookReconciler
from smartbooks.catalog.service import BookService
from smartbooks.config import AppConfig, get_config_from_env
from smartbooks.db.database import init_db, close_db
from smartbooks.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass
class Services:
    """Catalog components shared by the routes."""
    books: BookService
    importer: BookImporter
    reconciler: BookReconciler
    openlibrary: OpenLibraryClient


def create_services(config: AppConfig, openlibrary: Optional[OpenLibraryClient] = None) -> Services:
    """Wire the catalog components for the configured database."""
    openlibrary = openlibrary or OpenLibraryClient(
        base_url=config.openlibrary_url,
        timeout=config.openlibrary_timeout,
    )
    return Services(
        books=BookService(),
        importer=BookImporter(json_collection_field=config.json_collection_field),
        reconciler=BookReconciler(openlibrary),
        openlibrary=openlibrary,
    )


def create_app(config: Optional[AppConfig] = None, services: Optional[Services] = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Application configuration (read from the environment if omitted)
        services: Pre-built catalog components, mainly for tests

    Returns:
        Configured Flask app
    """
    config = config or get_config_from_env()

    app = Flask(__name__, template_folder='web/templates')
    app.secret_key = config.secret_key
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_mb * 1024 * 1024
    app.extensions['smartbooks'] = services or create_services(config)

    # Register blueprints
    from smartbooks.web.routes.api import api_bp
    from smartbooks.web.routes.books import books_bp

    app.register_blueprint(api_bp)
    app.register_blueprint(books_bp)

    # Root route
    @app.route('/')
    def index():
        return redirect(url_for('books.book_list'))

    # Health check
    @app.route('/health')
    def health():
        return {'status': 'ok', 'timestamp': datetime.now().isoformat()}

    return app


def main():
    """Main entry point."""
    config = get_config_from_env()

    setup_logging(config.log_level)

    init_db(config.database_url)
    atexit.register(close_db)

    logger.info(
        "Starting Smartbooks",
        version="0.1.0",
        port=config.port,
    )

    app = create_app(config)
    atexit.register(app.extensions['smartbooks'].openlibrary.close)

    # Run Flask app with waitress
    from waitress import serve
    serve(app, host="0.0.0.0", port=config.port)


if __name__ == "__main__":
    main()
