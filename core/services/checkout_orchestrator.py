"""
Checkout saga: tier selection through payment reconciliation.

    selecting -> sizing -> [redeeming] -> creating_session -> redirected
              -> reconciling -> succeeded | canceled | failed

The orchestrator drives one Checkout snapshot. Sizing edits are local
arithmetic; submit talks to the loyalty ledger (immediate strategy only) and
then the payment backend, strictly in that order. Every state change is
handed to the checkpoint callback so a concurrent request can see that a
submit is in flight.

Points are never decremented locally. The cached balance is dropped after
any redemption attempt and read again from the ledger when next needed.
"""

import logging
from typing import Callable
from uuid import uuid4

from clients.backend_client import BackendError
from clients.loyalty_client import LoyaltyLedgerClient
from clients.payment_client import PaymentSessionClient
from core.config import CheckoutConfig, RedemptionStrategy
from core.event_bus import EventBus
from core.events import (
    CheckoutCanceled,
    CheckoutFailed,
    CheckoutSucceeded,
    PaymentSessionCreated,
    PointsRedeemed,
    PointsRestored,
    PointsRestoreFailed,
)
from core.exceptions import (
    CheckoutBusyError,
    CompensationFailedError,
    InvalidCheckoutStateError,
    ReconciliationError,
    RedemptionFailedError,
    SessionCreationFailedError,
    TierUnavailableError,
)
from core.models import (
    RESUMABLE_STATES,
    Checkout,
    CheckoutState,
    EventSummary,
    OrderSelection,
    PaymentSessionResult,
)
from core.pricing import clamp_redemption, compute_totals, redemption_cap
from core.services.payment_session_builder import PaymentSessionBuilder
from utils.timezone import now_utc

logger = logging.getLogger(__name__)

CANCELED_MESSAGE = "Payment was canceled. Please try again."

_EDITABLE_STATES = frozenset({CheckoutState.SELECTING, CheckoutState.SIZING})


def new_idempotency_key() -> str:
    return uuid4().hex


class CheckoutOrchestrator:
    """Runs checkout operations against one Checkout snapshot."""

    def __init__(
        self,
        checkout: Checkout,
        ledger: LoyaltyLedgerClient,
        payments: PaymentSessionClient,
        config: CheckoutConfig,
        event_bus: EventBus | None = None,
        checkpoint: Callable[[Checkout], None] | None = None,
    ):
        self.checkout = checkout
        self.ledger = ledger
        self.payments = payments
        self.config = config
        self.event_bus = event_bus
        self.checkpoint = checkpoint
        self.builder = PaymentSessionBuilder(config)

    @classmethod
    def begin(
        cls,
        event: EventSummary,
        owner_hash: str,
        ledger: LoyaltyLedgerClient,
        payments: PaymentSessionClient,
        config: CheckoutConfig,
        event_bus: EventBus | None = None,
        checkpoint: Callable[[Checkout], None] | None = None,
    ) -> "CheckoutOrchestrator":
        """Open a fresh checkout for an event, in SELECTING."""
        now = now_utc()
        checkout = Checkout(
            id=uuid4(),
            owner_hash=owner_hash,
            state=CheckoutState.SELECTING,
            event=event,
            idempotency_key=new_idempotency_key(),
            created_at=now,
            updated_at=now,
        )
        orchestrator = cls(checkout, ledger, payments, config, event_bus, checkpoint)
        orchestrator._save()
        logger.info(f"Checkout {checkout.id} started for event {event.id}")
        return orchestrator

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------

    def select_tier(self, price_id: str) -> Checkout:
        """
        Choose a price tier. Quantity starts at 1 and redemption at 0.

        Raises:
            InvalidCheckoutStateError: Outside selecting/sizing
            TierUnavailableError: Unknown, inactive or sold-out tier
        """
        self._require(_EDITABLE_STATES, "select a ticket tier")

        tier = self.checkout.event.get_tier(price_id)
        if tier is None or not tier.is_available:
            raise TierUnavailableError(f"Ticket tier {price_id} is not available")

        self._ensure_balance()
        self._apply_selection(OrderSelection(tier=tier, quantity=1, requested_redemption=0))
        self._transition(CheckoutState.SIZING)
        return self.checkout

    def set_quantity(self, quantity: int) -> Checkout:
        """
        Change the ticket count. Clamped to [1, remaining stock].

        Any previously chosen redemption is reset to 0.
        """
        self._require({CheckoutState.SIZING}, "change quantity")

        tier = self.checkout.selection.tier
        quantity = min(max(1, quantity), tier.remaining_stock)
        self._apply_selection(
            OrderSelection(tier=tier, quantity=quantity, requested_redemption=0)
        )
        self._transition(CheckoutState.SIZING)
        return self.checkout

    def set_redemption(self, points: int) -> Checkout:
        """Choose how many points to redeem. Clamped to [0, cap]."""
        self._require({CheckoutState.SIZING}, "change loyalty points")

        self._ensure_balance()
        selection = self.checkout.selection
        cap = self._cap_for(selection.tier.unit_price * selection.quantity)
        self._apply_selection(
            OrderSelection(
                tier=selection.tier,
                quantity=selection.quantity,
                requested_redemption=clamp_redemption(points, cap),
            )
        )
        self._transition(CheckoutState.SIZING)
        return self.checkout

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def submit(self) -> PaymentSessionResult:
        """
        Create the payment session, redeeming first under the immediate strategy.

        Returns:
            PaymentSessionResult with the gateway redirect URL

        Raises:
            CheckoutBusyError: A submit is already in flight
            InvalidCheckoutStateError: Not in sizing
            RedemptionFailedError: Ledger refused or failed (nothing deducted)
            SessionCreationFailedError: Backend refused the session (points restored)
            CompensationFailedError: Points were deducted and could not be restored
        """
        if self.checkout.is_busy:
            raise CheckoutBusyError()
        self._require({CheckoutState.SIZING}, "submit")

        # Built from pre-redemption totals; a retry builds a new one.
        request = self.builder.build(self.checkout)
        points = self.checkout.selection.requested_redemption
        immediate = self.config.redemption_strategy == RedemptionStrategy.IMMEDIATE

        if immediate and points > 0:
            self._transition(CheckoutState.REDEEMING)
            self._redeem(points)

        self._transition(CheckoutState.CREATING_SESSION)
        try:
            session = self.payments.create_session(request)
        except BackendError as e:
            message = str(e)
            logger.error(f"Checkout {self.checkout.id}: payment session failed: {message}")
            if self.checkout.redeemed_points:
                self._compensate(self.checkout.redeemed_points, "payment session failed")
            self._fail(message)
            raise SessionCreationFailedError(message, points_restored=True)

        self.checkout.session = session
        if points > 0 and not immediate:
            # Backend redeems on confirmed payment; the cached balance is stale from here.
            self.checkout.balance = None
        self._transition(CheckoutState.REDIRECTED)
        self._publish(PaymentSessionCreated.create(self._snapshot()))
        logger.info(
            f"Checkout {self.checkout.id} redirected to session {session.session_id} "
            f"for {request.final_amount} {request.currency.upper()}"
        )
        return session

    def _redeem(self, points: int) -> None:
        selection = self.checkout.selection
        description = (
            f"Redeemed for {self.checkout.event.title} booking ({selection.quantity} tickets)"
        )

        try:
            result = self.ledger.redeem(points, description)
        except BackendError as e:
            self.checkout.balance = None
            self._fail(str(e))
            raise RedemptionFailedError(str(e), status_code=502)

        self.checkout.balance = None

        if not result.success:
            message = result.message or "Failed to redeem loyalty points"
            self._fail(message)
            raise RedemptionFailedError(message)

        if result.redeemed_points != points:
            taken = result.redeemed_points
            logger.error(
                f"Checkout {self.checkout.id}: ledger redeemed {taken} points, "
                f"requested {points}"
            )
            if taken > 0:
                self.checkout.redeemed_points = taken
                self._compensate(taken, "redeemed amount mismatch")
            message = f"Loyalty ledger redeemed {taken} points instead of {points}"
            self._fail(message)
            raise RedemptionFailedError(message, status_code=502)

        self.checkout.redeemed_points = points
        self._publish(PointsRedeemed.create(self._snapshot(), points))

    def _compensate(self, points: int, reason: str) -> None:
        """
        Give back points taken by this attempt.

        Raises:
            CompensationFailedError: Restore refused or failed; checkout is failed
        """
        description = f"Restored for {self.checkout.event.title} booking: {reason}"
        try:
            result = self.ledger.restore(points, description)
            failure = None if result.success else (result.message or "Restore refused")
        except BackendError as e:
            failure = str(e)

        if failure is None:
            self.checkout.redeemed_points = 0
            self.checkout.balance = None
            self._publish(PointsRestored.create(self._snapshot(), points))
            return

        logger.error(
            f"Checkout {self.checkout.id}: could not restore {points} points: {failure}"
        )
        message = (
            f"{points} loyalty points were deducted and could not be restored "
            f"automatically. Please contact support."
        )
        self._publish(PointsRestoreFailed.create(self._snapshot(), points, failure))
        self._fail(message)
        raise CompensationFailedError(points, message)

    # ------------------------------------------------------------------
    # Return from the gateway
    # ------------------------------------------------------------------

    def reconcile(self, params: dict) -> Checkout:
        """
        Apply the gateway's return parameters.

        Exactly one of success=true (with session_id) or canceled=true is
        expected. Replaying the same outcome is a no-op.

        Raises:
            ReconciliationError: Missing/conflicting flags or foreign session_id
            InvalidCheckoutStateError: Checkout is not awaiting a return
        """
        success = str(params.get("success", "")).lower() == "true"
        canceled = str(params.get("canceled", "")).lower() == "true"
        if success == canceled:
            raise ReconciliationError(
                "Return parameters must contain exactly one of success=true or canceled=true"
            )

        session_id = params.get("session_id")
        outcome = CheckoutState.SUCCEEDED if success else CheckoutState.CANCELED

        if self.checkout.state == outcome:
            if success and not self._owns_session(session_id):
                raise ReconciliationError(f"Session {session_id} does not belong to this checkout")
            return self.checkout

        self._require({CheckoutState.REDIRECTED}, "reconcile payment")

        if success and not self._owns_session(session_id):
            raise ReconciliationError(f"Session {session_id} does not belong to this checkout")

        self._transition(CheckoutState.RECONCILING)

        if success:
            self._transition(CheckoutState.SUCCEEDED)
            self._publish(CheckoutSucceeded.create(self._snapshot()))
            logger.info(
                f"Checkout {self.checkout.id} succeeded: paid {self.checkout.totals.final_total}, "
                f"earning {self.checkout.totals.points_to_earn} points"
            )
            return self.checkout

        if self.checkout.redeemed_points:
            self._compensate(self.checkout.redeemed_points, "payment canceled")
        self.checkout.last_error = CANCELED_MESSAGE
        self._transition(CheckoutState.CANCELED)
        self._publish(CheckoutCanceled.create(self._snapshot()))
        logger.warning(f"Checkout {self.checkout.id} canceled at the gateway")
        return self.checkout

    def resume(self) -> Checkout:
        """
        Go back to sizing after a cancel or failure.

        Same tier and quantity, redemption reset to 0, fresh idempotency key,
        balance read again from the ledger.
        """
        self._require(RESUMABLE_STATES, "resume")

        self.checkout.session = None
        self.checkout.last_error = None
        self.checkout.redeemed_points = 0
        self.checkout.balance = None

        selection = self.checkout.selection
        if selection is None:
            self.checkout.idempotency_key = new_idempotency_key()
            self._transition(CheckoutState.SELECTING)
            return self.checkout

        self._ensure_balance()
        self._apply_selection(
            OrderSelection(
                tier=selection.tier,
                quantity=selection.quantity,
                requested_redemption=0,
            ),
            force_new_key=True,
        )
        self._transition(CheckoutState.SIZING)
        return self.checkout

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require(self, states, operation: str) -> None:
        if self.checkout.state not in states:
            raise InvalidCheckoutStateError(operation, self.checkout.state.value)

    def _owns_session(self, session_id: str | None) -> bool:
        session = self.checkout.session
        return bool(session_id) and session is not None and session.session_id == session_id

    def _ensure_balance(self) -> None:
        """
        Fetch the balance if there is no cached copy. A failed read leaves the cap at 0.

        The ledger's user id is kept on the checkout; it outlives the cached balance.
        """
        if self.checkout.balance is not None:
            return
        try:
            self.checkout.balance = self.ledger.get_balance()
            if self.checkout.balance.user_id:
                self.checkout.holder_id = self.checkout.balance.user_id
        except BackendError as e:
            logger.warning(f"Checkout {self.checkout.id}: loyalty balance unavailable: {e}")

    def _cap_for(self, subtotal: int) -> int:
        balance = self.checkout.balance.balance if self.checkout.balance else 0
        return redemption_cap(
            subtotal,
            balance,
            self.config.max_redemption_bps,
            self.config.point_value,
        )

    def _apply_selection(self, selection: OrderSelection, force_new_key: bool = False) -> None:
        """Store a selection and recompute totals. A changed selection gets a new idempotency key."""
        if force_new_key or selection != self.checkout.selection:
            self.checkout.idempotency_key = new_idempotency_key()

        subtotal = selection.tier.unit_price * selection.quantity
        cap = self._cap_for(subtotal)
        if selection.requested_redemption > cap:
            selection = selection.model_copy(
                update={"requested_redemption": clamp_redemption(selection.requested_redemption, cap)}
            )

        self.checkout.selection = selection
        self.checkout.redemption_cap = cap
        self.checkout.totals = compute_totals(
            selection.tier.unit_price,
            selection.quantity,
            selection.requested_redemption,
            self.config.earn_rate_bps,
            self.config.point_value,
        )

    def _transition(self, state: CheckoutState) -> None:
        previous = self.checkout.state
        self.checkout.state = state
        self.checkout.updated_at = now_utc()
        if previous != state:
            logger.debug(f"Checkout {self.checkout.id}: {previous.value} -> {state.value}")
        self._save()

    def _fail(self, message: str) -> None:
        self.checkout.last_error = message
        self._transition(CheckoutState.FAILED)
        self._publish(CheckoutFailed.create(self._snapshot(), message))
        logger.warning(f"Checkout {self.checkout.id} failed: {message}")

    def _save(self) -> None:
        if self.checkpoint is not None:
            self.checkpoint(self.checkout)

    def _snapshot(self) -> Checkout:
        return self.checkout.model_copy(deep=True)

    def _publish(self, event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)
