"""API test fixtures - TestClient over a real CheckoutService with in-memory collaborators."""

import pytest
from starlette.testclient import TestClient

from api.app import create_app
from core.services.checkout_service import CheckoutService
from core.services.checkout_store import CheckoutStore


# =============================================================================
# SERVICES
# =============================================================================


@pytest.fixture
def checkout_service(valkey, catalog, ledger, payments, deferred_config, event_bus):
    return CheckoutService(
        CheckoutStore(valkey, deferred_config),
        catalog,
        ledger,
        payments,
        deferred_config,
        event_bus,
    )


@pytest.fixture
def services(checkout_service):
    return {"checkout": checkout_service}


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def app(services):
    """FastAPI app with bearer middleware, error handlers, and data/actions routes."""
    return create_app(services)


@pytest.fixture
def client(app):
    """Authenticated test client."""
    c = TestClient(app, raise_server_exceptions=False)
    c.headers["Authorization"] = "Bearer test-token-a"
    return c


@pytest.fixture
def other_client(app):
    """Client authenticated as a different shopper."""
    c = TestClient(app, raise_server_exceptions=False)
    c.headers["Authorization"] = "Bearer test-token-b"
    return c


@pytest.fixture
def unauthed_client(app):
    """Unauthenticated test client (no Authorization header)."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def act(client):
    """POST a checkout action and return the response."""
    def _act(action: str, **data):
        return client.post("/api/actions", json={"domain": "checkout", "action": action, "data": data})
    return _act


@pytest.fixture
def started(act):
    """A checkout started on the VIP tier, as returned by the API."""
    response = act("start", event_id="42", price_id="vip")
    assert response.status_code == 200
    return response.json()["data"]
