"""Checkout domain models.

A Checkout is the whole per-visit state of one booking attempt. It is
persisted between requests, so every field must survive a JSON round-trip.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from core.models.event import EventSummary, PriceTier
from core.models.loyalty import LoyaltyBalance
from core.models.payment import PaymentSessionResult


class CheckoutState(str, Enum):
    """Checkout saga state."""

    SELECTING = "selecting"
    SIZING = "sizing"
    REDEEMING = "redeeming"
    CREATING_SESSION = "creating_session"
    REDIRECTED = "redirected"
    RECONCILING = "reconciling"
    SUCCEEDED = "succeeded"
    CANCELED = "canceled"
    FAILED = "failed"


BUSY_STATES = frozenset({CheckoutState.REDEEMING, CheckoutState.CREATING_SESSION})
RESUMABLE_STATES = frozenset({CheckoutState.CANCELED, CheckoutState.FAILED})


class OrderSelection(BaseModel):
    """The in-progress choice of tier, quantity and points."""

    tier: PriceTier
    quantity: int = Field(1, ge=1)
    requested_redemption: int = Field(0, ge=0)

    @model_validator(mode="after")
    def quantity_within_stock(self) -> "OrderSelection":
        """Quantity may never exceed what the tier has left."""
        if self.quantity > self.tier.remaining_stock:
            raise ValueError(
                f"Quantity {self.quantity} exceeds remaining stock "
                f"{self.tier.remaining_stock} for tier {self.tier.id}"
            )
        return self


class CheckoutTotals(BaseModel):
    """Derived amounts, recomputed on every selection change."""

    subtotal: int = Field(..., ge=0)
    discount: int = Field(..., ge=0)
    final_total: int = Field(..., ge=0)
    points_to_earn: int = Field(..., ge=0)

    @model_validator(mode="after")
    def discount_within_subtotal(self) -> "CheckoutTotals":
        if self.discount > self.subtotal:
            raise ValueError("Discount cannot exceed subtotal")
        return self


class Checkout(BaseModel):
    """Full checkout snapshot as stored."""

    id: UUID
    owner_hash: str
    holder_id: str | None = None
    state: CheckoutState
    event: EventSummary
    selection: OrderSelection | None = None
    totals: CheckoutTotals | None = None
    redemption_cap: int = 0
    balance: LoyaltyBalance | None = None
    redeemed_points: int = 0
    session: PaymentSessionResult | None = None
    idempotency_key: str
    last_error: str | None = None
    created_at: datetime
    updated_at: datetime

    @property
    def is_busy(self) -> bool:
        """Whether a submit is in flight."""
        return self.state in BUSY_STATES

    @property
    def redirect_url(self) -> str | None:
        """Where to send the shopper once a session exists."""
        return self.session.redirect_url if self.session else None

    def to_public(self) -> dict:
        """JSON-safe view for API responses (owner binding stripped)."""
        return self.model_dump(mode="json", exclude={"owner_hash"})
