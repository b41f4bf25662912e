"""
Tests for the health check endpoint.
"""

from sqlalchemy.exc import OperationalError

from finance_ledger.main import app
from finance_ledger.store import LedgerStore, get_store


class UnreachableStore(LedgerStore):
    """A store whose database never answers."""

    def run(self, operation, *, name):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_health_is_ok(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_names_the_service(client):
    response = client.get("/health")
    assert response.json()["service"] == "finance-ledger"


def test_health_reports_database(client):
    data = client.get("/health").json()
    assert data["database"] == "healthy"


def test_unreachable_database_is_degraded(client, store):
    app.dependency_overrides[get_store] = lambda: UnreachableStore(
        store.session_factory
    )

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["database"] == "unhealthy"
