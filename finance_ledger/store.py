"""
Ledger store: the atomic read-modify-write primitive.

Every balance-affecting operation runs as one unit of work:
read the documents it needs, compute new values, write them
all, commit. Documents carry a version counter, so a write to
a document that another writer committed in the meantime fails
the whole unit at flush time. The unit is then discarded and
rerun from fresh reads, never patched up.
"""

import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from finance_ledger.config import get_settings
from finance_ledger.errors import ConflictRetryExhausted
from finance_ledger.models.base import SessionLocal

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL serialization_failure and deadlock_detected.
CONFLICT_PGCODES = ("40001", "40P01")


def is_conflict(error: Exception) -> bool:
    """
    True for errors caused by a concurrent writer.

    A versioned document that changed under us, a serialization
    failure or deadlock, or a busy SQLite database. Every other
    database error is permanent as far as a retry is concerned.
    """
    if isinstance(error, StaleDataError):
        return True
    if isinstance(error, OperationalError):
        if getattr(error.orig, "pgcode", None) in CONFLICT_PGCODES:
            return True
        return "database is locked" in str(error.orig).lower()
    return False


class LedgerStore:
    """
    Runs operations atomically with retry on conflict.

    The operation callable receives a fresh session for every
    attempt and must do all of its reads through it. It must not
    commit; the store commits once the callable returns.
    """

    def __init__(self, session_factory: sessionmaker, max_retries: int = 5):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        self.session_factory = session_factory
        self.max_retries = max_retries

    def run(self, operation: Callable[[Session], T], *, name: str) -> T:
        """
        Execute operation(session) and commit it as a single unit.

        Raises ConflictRetryExhausted if every attempt lost to a
        concurrent writer. Any other exception, including database
        errors that are not conflicts, rolls the attempt back and
        propagates unchanged.
        """
        for attempt in range(1, self.max_retries + 1):
            session = self.session_factory()
            try:
                logger.debug("%s: attempt %d", name, attempt)
                result = operation(session)
                session.commit()
                return result
            except Exception as e:
                session.rollback()
                if not is_conflict(e):
                    raise
                logger.warning(
                    "%s: conflict on attempt %d/%d (%s)",
                    name, attempt, self.max_retries, e.__class__.__name__,
                )
            finally:
                session.close()

        raise ConflictRetryExhausted(name, self.max_retries)


# --- Dependency for FastAPI ---
def get_store() -> LedgerStore:
    """Provide the application's ledger store."""
    return LedgerStore(SessionLocal, get_settings().LEDGER_MAX_RETRIES)
