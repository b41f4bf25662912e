"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Sessions come from SessionLocal
and are handed out one per unit of work by the LedgerStore.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from finance_ledger.config import get_settings

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# --- Session Factory ---
# autoflush=False: SQL is only sent on explicit flush or commit,
# so a unit of work reads everything first and writes at the end.
# expire_on_commit=False: objects returned from a committed unit
# keep the values that were committed.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


def new_id() -> str:
    """Document id for a newly created record."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Stored naive, always UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)
