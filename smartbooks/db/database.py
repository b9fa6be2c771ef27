"""
Database connection and session management.
"""

import os
from contextlib import contextmanager
from typing import Callable, ContextManager, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker, scoped_session
from sqlalchemy.pool import StaticPool

from smartbooks.db.models import Base

DEFAULT_DATABASE_URL = "sqlite:///data/smartbooks.db"

SessionFactory = Callable[[], ContextManager[Session]]


def get_database_url() -> str:
    """Get database URL from environment or use default."""
    return os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)


def _is_in_memory(db_url: str) -> bool:
    return db_url == "sqlite://" or ":memory:" in db_url


def ensure_data_directory(db_url: str):
    """Ensure the data directory exists for SQLite database."""
    if db_url.startswith("sqlite:///") and not _is_in_memory(db_url):
        db_path = db_url.replace("sqlite:///", "")
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)


# Create engine
engine = None
SessionLocal = None


def init_db(db_url: Optional[str] = None):
    """Initialize the database engine and create tables."""
    global engine, SessionLocal

    db_url = db_url or get_database_url()
    ensure_data_directory(db_url)

    engine_options = {"echo": False}
    if db_url.startswith("sqlite"):
        engine_options["connect_args"] = {"check_same_thread": False}
        if _is_in_memory(db_url):
            # every session must see the same in-memory database
            engine_options["poolclass"] = StaticPool

    engine = create_engine(db_url, **engine_options)

    SessionLocal = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    return engine


def get_session():
    """Get a database session."""
    if SessionLocal is None:
        init_db()
    return SessionLocal()


@contextmanager
def get_db_session():
    """Context manager for database sessions."""
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def close_db():
    """Close the database connection."""
    global engine, SessionLocal
    if SessionLocal:
        SessionLocal.remove()
    if engine:
        engine.dispose()
    engine = None
    SessionLocal = None
