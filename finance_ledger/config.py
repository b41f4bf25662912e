"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = os.getenv("APP_NAME", "Finance Ledger")
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/finance_ledger"
    )

    # Ledger
    # Attempts a single atomic operation gets before a concurrent
    # modification is reported to the caller as a conflict.
    LEDGER_MAX_RETRIES: int = int(os.getenv("LEDGER_MAX_RETRIES", "5"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused for all
    subsequent calls.
    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Set up root logging once, at application start."""
    settings = settings or get_settings()
    level = logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
