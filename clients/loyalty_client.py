"""
Loyalty ledger client.

The ledger owns every balance. This client only asks it to move points and
reads back what it says; nothing is decremented locally.
"""

import logging

from clients.backend_client import BackendClient, BackendError
from core.models import (
    LoyaltyBalance,
    LoyaltyEntryType,
    LoyaltyHistoryEntry,
    RedemptionResult,
)

logger = logging.getLogger(__name__)


def _parse_result(data: dict) -> RedemptionResult:
    try:
        return RedemptionResult(
            success=bool(data.get("success")),
            message=data.get("message"),
            redeemed_points=int(data.get("redeemedPoints") or 0),
            discount_value=int(data.get("discountValue") or 0),
            remaining_balance=data.get("remainingBalance"),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise BackendError(f"Invalid loyalty ledger response: {e}")


class LoyaltyLedgerClient:
    """Redeem, restore and read loyalty points for the current shopper."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    def get_balance(self) -> LoyaltyBalance:
        """
        Fetch the current balance.

        Raises:
            BackendError: On any failure
        """
        data = self.backend.get("/loyalty/balance")
        try:
            return LoyaltyBalance(
                balance=int(data["balance"]),
                discount_value=int(data.get("discountValue") or 0),
                user_id=data.get("userId"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError(f"Invalid loyalty balance response: {e}")

    def get_history(self) -> list[LoyaltyHistoryEntry]:
        """Fetch the shopper's earn/redeem history, newest first as the ledger returns it."""
        data = self.backend.get("/loyalty/history")
        entries = data.get("history") if isinstance(data, dict) else data
        try:
            return [
                LoyaltyHistoryEntry(
                    id=str(entry["id"]),
                    points=int(entry["points"]),
                    description=entry.get("description"),
                    earned_date=entry.get("earnedDate"),
                    type=LoyaltyEntryType(entry["type"]),
                )
                for entry in entries or []
            ]
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise BackendError(f"Invalid loyalty history response: {e}")

    def redeem(self, points: int, description: str) -> RedemptionResult:
        """
        Ask the ledger to deduct points.

        A 2xx answer with success=false is returned as-is; the caller decides.

        Args:
            points: Points to deduct (> 0)
            description: Ledger entry text

        Raises:
            ValueError: If points is not positive
            BackendError: On transport or HTTP failure, or a malformed reply
        """
        if points <= 0:
            raise ValueError(f"points must be positive, got {points}")

        data = self.backend.post("/loyalty/redeem", {"points": points, "description": description})
        result = _parse_result(data)
        if result.success:
            logger.info(f"Redeemed {result.redeemed_points} loyalty points")
        else:
            logger.warning(f"Ledger refused redemption of {points} points: {result.message}")
        return result

    def restore(self, points: int, description: str) -> RedemptionResult:
        """
        Give back points taken by an attempt that did not complete.

        Args:
            points: Points to credit back (> 0)
            description: Ledger entry text

        Raises:
            ValueError: If points is not positive
            BackendError: On transport or HTTP failure, or a malformed reply
        """
        if points <= 0:
            raise ValueError(f"points must be positive, got {points}")

        data = self.backend.post("/loyalty/restore", {"points": points, "description": description})
        result = _parse_result(data)
        if result.success:
            logger.info(f"Restored {points} loyalty points")
        else:
            logger.error(f"Ledger refused restore of {points} points: {result.message}")
        return result
