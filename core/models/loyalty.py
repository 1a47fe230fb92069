"""Loyalty ledger models.

The ledger is owned by the backend. Everything here is a read of its state.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from utils.timezone import now_utc


class LoyaltyBalance(BaseModel):
    """Cached read of the holder's point balance."""

    balance: int = Field(..., ge=0)
    discount_value: int = Field(0, ge=0)
    user_id: str | None = None
    fetched_at: datetime = Field(default_factory=now_utc)


class RedemptionResult(BaseModel):
    """Ledger response to a redeem or restore call."""

    success: bool
    message: str | None = None
    redeemed_points: int = 0
    discount_value: int = 0
    remaining_balance: int | None = None


class LoyaltyEntryType(str, Enum):
    """Direction of a ledger entry."""

    EARNED = "Earned"
    REDEEMED = "Redeemed"


class LoyaltyHistoryEntry(BaseModel):
    """One line of the holder's loyalty history."""

    id: str
    points: int
    description: str | None = None
    earned_date: str | None = None
    type: LoyaltyEntryType
