"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so no test data persists.
"""

import os

# Must be set before finance_ledger is imported: the engine is
# created from this URL at import time.
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from finance_ledger.context import UserContext
from finance_ledger.main import app
from finance_ledger.models import Base
from finance_ledger.store import LedgerStore, get_store


# SQLite keeps the suite free of database infrastructure.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def store():
    """A ledger store over the test database."""
    return LedgerStore(TestSessionLocal, max_retries=3)


@pytest.fixture
def ctx():
    return UserContext(user_id="user-1")


@pytest.fixture
def other_ctx():
    return UserContext(user_id="user-2")


@pytest.fixture
def client(store):
    """
    Provide a test client with the test database.

    The get_store dependency is overridden so the app uses
    the test store instead of the real database.
    """
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
