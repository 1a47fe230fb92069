"""Core domain models."""

from core.models.event import EventSummary, PriceTier
from core.models.loyalty import (
    LoyaltyBalance,
    LoyaltyEntryType,
    LoyaltyHistoryEntry,
    RedemptionResult,
)
from core.models.payment import (
    PaymentSessionMetadata,
    PaymentSessionRequest,
    PaymentSessionResult,
)
from core.models.checkout import (
    BUSY_STATES,
    RESUMABLE_STATES,
    Checkout,
    CheckoutState,
    CheckoutTotals,
    OrderSelection,
)

__all__ = [
    # Event catalog
    "EventSummary", "PriceTier",
    # Loyalty
    "LoyaltyBalance", "LoyaltyEntryType", "LoyaltyHistoryEntry", "RedemptionResult",
    # Payment
    "PaymentSessionMetadata", "PaymentSessionRequest", "PaymentSessionResult",
    # Checkout
    "BUSY_STATES", "RESUMABLE_STATES",
    "Checkout", "CheckoutState", "CheckoutTotals", "OrderSelection",
]
