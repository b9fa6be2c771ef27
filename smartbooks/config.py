"""
Configuration management for Smartbooks.
Settings are read from environment variables (optionally from a .env file).
"""

import os
import secrets
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

from smartbooks.api.openlibrary import OPENLIBRARY_API_URL
from smartbooks.db.database import DEFAULT_DATABASE_URL

load_dotenv()


class AppConfig(BaseModel):
    """Configuration for the Smartbooks service."""

    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        description="Database connection URL"
    )

    # Open Library settings
    openlibrary_url: str = Field(default=OPENLIBRARY_API_URL, description="Open Library API base URL")
    openlibrary_timeout: float = Field(default=10, gt=0, description="Open Library request timeout in seconds")

    # Import settings
    json_collection_field: Optional[str] = Field(
        default=None,
        description="Member of uploaded JSON documents holding the book array"
    )
    max_upload_mb: int = Field(default=16, gt=0, description="Maximum upload size in megabytes")

    # Application settings
    secret_key: str = Field(
        default_factory=lambda: secrets.token_hex(32),
        description="Secret key for Flask sessions"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    port: int = Field(default=5000, description="HTTP port")


def get_config_from_env() -> AppConfig:
    """Load configuration from environment variables."""
    return AppConfig(
        database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
        openlibrary_url=os.getenv("OPENLIBRARY_URL", OPENLIBRARY_API_URL),
        openlibrary_timeout=float(os.getenv("OPENLIBRARY_TIMEOUT", "10")),
        json_collection_field=os.getenv("JSON_COLLECTION_FIELD") or None,
        max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "16")),
        secret_key=os.getenv("SECRET_KEY") or secrets.token_hex(32),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        port=int(os.getenv("PORT", "5000")),
    )
