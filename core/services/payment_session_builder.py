"""
Builds the outbound payment session request for a checkout.

The gateway sees a single line item worth final_total. Quantity, unit price
and the loyalty discount travel only as flat string metadata, which the
backend uses to recompute and audit the charge.
"""

from core.config import CheckoutConfig
from core.models import Checkout, PaymentSessionMetadata, PaymentSessionRequest

DEFAULT_EVENT_TITLE = "Event Ticket"


class PaymentSessionBuilder:
    """Turns a sized checkout into a PaymentSessionRequest."""

    def __init__(self, config: CheckoutConfig):
        self.config = config

    def build(self, checkout: Checkout) -> PaymentSessionRequest:
        """
        Build the request for one submit attempt.

        Uses the totals as they stand, before any ledger call.

        Raises:
            ValueError: If the checkout has no selection or totals yet
        """
        selection = checkout.selection
        totals = checkout.totals
        if selection is None or totals is None:
            raise ValueError(f"Checkout {checkout.id} has no sized selection")

        title = checkout.event.title or DEFAULT_EVENT_TITLE
        tier = selection.tier
        quantity = selection.quantity

        metadata = PaymentSessionMetadata(
            event_id=str(checkout.event.id),
            price_id=str(tier.id),
            quantity=str(quantity),
            unit_price=str(tier.unit_price),
            loyalty_points_used=str(selection.requested_redemption),
            subtotal=str(totals.subtotal),
            discount=str(totals.discount),
            calculation_formula=(
                f"({quantity} × {tier.unit_price}) - {totals.discount} = {totals.final_total}"
            ),
            redemption_mode=self.config.redemption_strategy.value,
        )

        return PaymentSessionRequest(
            event_title=title,
            description=f"{quantity} × {tier.category} tickets for {title}",
            final_amount=totals.final_total,
            currency=self.config.currency,
            metadata=metadata,
            idempotency_key=checkout.idempotency_key,
        )
