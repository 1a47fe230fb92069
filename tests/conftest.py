"""Shared test fixtures for the checkout test suite."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

# Reset vault client singleton to pick up env vars
import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from clients.backend_client import BackendError
from clients.catalog_client import EventCatalogClient
from clients.loyalty_client import LoyaltyLedgerClient
from clients.payment_client import PaymentSessionClient
from clients.valkey_client import ValkeyClient
from core.config import CheckoutConfig, RedemptionStrategy
from core.event_bus import EventBus
from core.models import (
    EventSummary,
    LoyaltyBalance,
    LoyaltyEntryType,
    LoyaltyHistoryEntry,
    PaymentSessionResult,
    PriceTier,
    RedemptionResult,
)
from utils.request_context import clear_current_token, token_context


# =============================================================================
# TEST TOKENS
# =============================================================================

TEST_TOKEN = "test-token-a"
TEST_TOKEN_B = "test-token-b"


@pytest.fixture(autouse=True)
def reset_request_context():
    """Ensure clean token context before and after each test."""
    clear_current_token()
    yield
    clear_current_token()


@pytest.fixture
def as_shopper():
    """Act as the primary shopper."""
    with token_context(TEST_TOKEN):
        yield TEST_TOKEN


@pytest.fixture
def as_shopper_b():
    """Act as a second, unrelated shopper."""
    with token_context(TEST_TOKEN_B):
        yield TEST_TOKEN_B


# =============================================================================
# DOMAIN FIXTURES
# =============================================================================


@pytest.fixture
def event() -> EventSummary:
    """Event with a normal tier, a cheap tier, a sold-out tier and an inactive tier."""
    return EventSummary(
        id="42",
        title="Sunset Concert",
        venue_name="Nelum Pokuna",
        venue_location="Colombo",
        event_date="2026-12-20",
        event_time="19:00",
        tiers=[
            PriceTier(id="vip", category="VIP", unit_price=4465, remaining_stock=10),
            PriceTier(id="gen", category="General", unit_price=2500, remaining_stock=5),
            PriceTier(id="gone", category="Balcony", unit_price=5000, remaining_stock=0),
            PriceTier(id="off", category="Box", unit_price=9000, remaining_stock=3, is_active=False),
        ],
    )


@pytest.fixture
def deferred_config() -> CheckoutConfig:
    return CheckoutConfig(redemption_strategy=RedemptionStrategy.DEFERRED)


@pytest.fixture
def immediate_config() -> CheckoutConfig:
    return CheckoutConfig(redemption_strategy=RedemptionStrategy.IMMEDIATE)


# =============================================================================
# COLLABORATOR DOUBLES
# =============================================================================


class LedgerDouble:
    """
    Stateful stand-in for LoyaltyLedgerClient.

    Holds a real balance so tests can assert what the ledger ends up with.
    Failure switches make redeem/restore refuse or raise.
    """

    def __init__(self, balance: int = 10_000):
        self.balance = balance
        self.calls: list[tuple[str, int]] = []
        self.balance_reads = 0
        self.balance_error: Exception | None = None
        self.redeem_error: Exception | None = None
        self.redeem_refusal: str | None = None
        self.redeem_shortfall = 0
        self.restore_error: Exception | None = None

    def get_balance(self) -> LoyaltyBalance:
        self.balance_reads += 1
        if self.balance_error is not None:
            raise self.balance_error
        return LoyaltyBalance(balance=self.balance, discount_value=self.balance, user_id="u-1")

    def get_history(self) -> list[LoyaltyHistoryEntry]:
        return [
            LoyaltyHistoryEntry(
                id="h-1", points=500, description="Earned from booking",
                earned_date="2026-01-05", type=LoyaltyEntryType.EARNED,
            ),
        ]

    def redeem(self, points: int, description: str) -> RedemptionResult:
        self.calls.append(("redeem", points))
        if self.redeem_error is not None:
            raise self.redeem_error
        if self.redeem_refusal is not None or points > self.balance:
            return RedemptionResult(
                success=False,
                message=self.redeem_refusal or "Insufficient loyalty points",
            )
        taken = points - self.redeem_shortfall
        self.balance -= taken
        return RedemptionResult(
            success=True,
            redeemed_points=taken,
            discount_value=taken,
            remaining_balance=self.balance,
        )

    def restore(self, points: int, description: str) -> RedemptionResult:
        self.calls.append(("restore", points))
        if self.restore_error is not None:
            raise self.restore_error
        self.balance += points
        return RedemptionResult(success=True, redeemed_points=points, remaining_balance=self.balance)


class InMemoryValkey:
    """Dict-backed stand-in for ValkeyClient (JSON helpers only)."""

    def __init__(self):
        self.data: dict[str, str] = {}
        self.lists: dict[str, list[str]] = {}
        self.ttls: dict[str, int | None] = {}

    def set_json(self, key, value, expire_seconds=None):
        self.data[key] = json.dumps(value)
        self.ttls[key] = expire_seconds

    def get_json(self, key):
        value = self.data.get(key)
        return None if value is None else json.loads(value)

    def push_json(self, key, value):
        self.lists.setdefault(key, []).append(json.dumps(value))
        return len(self.lists[key])

    def pushed(self, key):
        """Records appended to a list, oldest first."""
        return [json.loads(item) for item in self.lists.get(key, [])]


@pytest.fixture
def ledger() -> LedgerDouble:
    return LedgerDouble(balance=10_000)


@pytest.fixture
def payments():
    mock = Mock(spec=PaymentSessionClient)
    mock.create_session.return_value = PaymentSessionResult(
        session_id="cs_test_123",
        redirect_url="https://checkout.gateway.test/pay/cs_test_123",
    )
    return mock


@pytest.fixture
def failing_payments():
    mock = Mock(spec=PaymentSessionClient)
    mock.create_session.side_effect = BackendError("Stripe is unavailable", status_code=500)
    return mock


@pytest.fixture
def catalog(event):
    mock = Mock(spec=EventCatalogClient)
    mock.get_event.return_value = event
    return mock


@pytest.fixture
def valkey():
    return InMemoryValkey()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def valkey_spec():
    """Spec'd mock, for asserting ValkeyClient calls."""
    return Mock(spec=ValkeyClient)
