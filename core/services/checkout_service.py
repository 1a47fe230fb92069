"""
Checkout service: the per-request entry point.

Each call loads the caller's checkout snapshot, runs one orchestrator
operation on it and writes it back. A checkout is bound to the bearer token
that started it (stored only as a SHA-256 digest); any other caller gets
"not found".
"""

import hashlib
import hmac
import logging
from typing import Callable

from clients.catalog_client import EventCatalogClient
from clients.loyalty_client import LoyaltyLedgerClient
from clients.payment_client import PaymentSessionClient
from core.config import CheckoutConfig
from core.event_bus import EventBus
from core.exceptions import CheckoutNotFoundError
from core.models import Checkout, EventSummary, LoyaltyBalance, LoyaltyHistoryEntry
from core.services.checkout_orchestrator import CheckoutOrchestrator
from core.services.checkout_store import CheckoutStore
from utils.request_context import get_current_token

logger = logging.getLogger(__name__)


def owner_hash_for(token: str) -> str:
    """Digest that binds a checkout to a bearer token without storing it."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class CheckoutService:
    """Service for checkout operations on behalf of the current shopper."""

    def __init__(
        self,
        store: CheckoutStore,
        catalog: EventCatalogClient,
        ledger: LoyaltyLedgerClient,
        payments: PaymentSessionClient,
        config: CheckoutConfig,
        event_bus: EventBus | None = None,
    ):
        self.store = store
        self.catalog = catalog
        self.ledger = ledger
        self.payments = payments
        self.config = config
        self.event_bus = event_bus

    def start(self, event_id: str, price_id: str | None = None) -> Checkout:
        """
        Open a checkout for an event.

        Tiers are always read from the catalog, never taken from the caller.
        With price_id the tier is selected right away and the checkout is
        returned in sizing.

        Raises:
            BackendError: Event could not be loaded
            TierUnavailableError: price_id names an unavailable tier
        """
        event = self.catalog.get_event(event_id)
        orchestrator = CheckoutOrchestrator.begin(
            event,
            owner_hash_for(get_current_token()),
            self.ledger,
            self.payments,
            self.config,
            event_bus=self.event_bus,
            checkpoint=self.store.save,
        )
        if price_id is not None:
            orchestrator.select_tier(price_id)
        return orchestrator.checkout

    def get(self, checkout_id) -> Checkout:
        """
        Load the caller's checkout.

        Raises:
            CheckoutNotFoundError: Missing, expired or owned by someone else
        """
        return self._load(checkout_id)

    def select_tier(self, checkout_id, price_id: str) -> Checkout:
        return self._run(checkout_id, lambda o: o.select_tier(price_id))

    def set_quantity(self, checkout_id, quantity: int) -> Checkout:
        return self._run(checkout_id, lambda o: o.set_quantity(quantity))

    def set_redemption(self, checkout_id, points: int) -> Checkout:
        return self._run(checkout_id, lambda o: o.set_redemption(points))

    def submit(self, checkout_id) -> Checkout:
        """Submit the checkout. On success checkout.redirect_url is set."""
        def run(orchestrator: CheckoutOrchestrator) -> Checkout:
            orchestrator.submit()
            return orchestrator.checkout

        return self._run(checkout_id, run)

    def reconcile(self, checkout_id, params: dict) -> Checkout:
        return self._run(checkout_id, lambda o: o.reconcile(params))

    def resume(self, checkout_id) -> Checkout:
        return self._run(checkout_id, lambda o: o.resume())

    def get_balance(self) -> LoyaltyBalance:
        return self.ledger.get_balance()

    def get_history(self) -> list[LoyaltyHistoryEntry]:
        return self.ledger.get_history()

    def get_event(self, event_id: str) -> EventSummary:
        return self.catalog.get_event(event_id)

    def _load(self, checkout_id) -> Checkout:
        checkout = self.store.get(checkout_id)
        if checkout is None:
            raise CheckoutNotFoundError(str(checkout_id))

        if not hmac.compare_digest(checkout.owner_hash, owner_hash_for(get_current_token())):
            logger.warning(f"Checkout {checkout_id} requested by a different token")
            raise CheckoutNotFoundError(str(checkout_id))

        return checkout

    def _run(self, checkout_id, operation: Callable[[CheckoutOrchestrator], object]):
        orchestrator = CheckoutOrchestrator(
            self._load(checkout_id),
            self.ledger,
            self.payments,
            self.config,
            event_bus=self.event_bus,
            checkpoint=self.store.save,
        )
        try:
            return operation(orchestrator)
        finally:
            self.store.save(orchestrator.checkout)
