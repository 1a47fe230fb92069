"""
Domain events for the checkout saga.

Immutable event objects published by the CheckoutOrchestrator as a checkout
moves through its states. Handlers react (dead-lettering, notifications)
without the orchestrator knowing who is listening.

Event Categories:
- LoyaltyEvent: points leaving or returning to the ledger
- CheckoutEvent: session creation and the saga's terminal outcomes

Events carry the checkout snapshot as it was when the event fired.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4

from utils.timezone import now_utc


@dataclass(frozen=True, kw_only=True)
class CheckoutDomainEvent:
    """Base class for all checkout domain events."""
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=now_utc)


# =============================================================================
# LOYALTY EVENTS
# =============================================================================


@dataclass(frozen=True)
class LoyaltyEvent(CheckoutDomainEvent):
    """Events about points moving in the external ledger."""
    checkout: Any = None  # Checkout
    points: int = 0


@dataclass(frozen=True)
class PointsRedeemed(LoyaltyEvent):
    """The ledger confirmed a redemption for this checkout."""

    @classmethod
    def create(cls, checkout: Any, points: int) -> "PointsRedeemed":
        return cls(checkout=checkout, points=points)


@dataclass(frozen=True)
class PointsRestored(LoyaltyEvent):
    """Points taken for a failed or canceled attempt were given back."""

    @classmethod
    def create(cls, checkout: Any, points: int) -> "PointsRestored":
        return cls(checkout=checkout, points=points)


@dataclass(frozen=True)
class PointsRestoreFailed(LoyaltyEvent):
    """Points were taken and the compensating restore did not go through."""
    reason: str = ""

    @classmethod
    def create(cls, checkout: Any, points: int, reason: str) -> "PointsRestoreFailed":
        return cls(checkout=checkout, points=points, reason=reason)


# =============================================================================
# CHECKOUT EVENTS
# =============================================================================


@dataclass(frozen=True)
class CheckoutEvent(CheckoutDomainEvent):
    """Events about the checkout saga itself."""
    checkout: Any = None


@dataclass(frozen=True)
class PaymentSessionCreated(CheckoutEvent):
    """Gateway session exists; the shopper is being redirected."""

    @classmethod
    def create(cls, checkout: Any) -> "PaymentSessionCreated":
        return cls(checkout=checkout)


@dataclass(frozen=True)
class CheckoutSucceeded(CheckoutEvent):
    """Gateway reported a successful payment on return."""

    @classmethod
    def create(cls, checkout: Any) -> "CheckoutSucceeded":
        return cls(checkout=checkout)


@dataclass(frozen=True)
class CheckoutCanceled(CheckoutEvent):
    """Shopper canceled at the gateway."""

    @classmethod
    def create(cls, checkout: Any) -> "CheckoutCanceled":
        return cls(checkout=checkout)


@dataclass(frozen=True)
class CheckoutFailed(CheckoutEvent):
    """An attempt failed; reason is the shopper-facing message."""
    reason: str = ""

    @classmethod
    def create(cls, checkout: Any, reason: str) -> "CheckoutFailed":
        return cls(checkout=checkout, reason=reason)
