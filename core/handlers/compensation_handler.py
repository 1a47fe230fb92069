"""
Handler for PointsRestoreFailed events.

Points were deducted for an attempt that never produced a purchase and the
automatic restore did not go through. The failure is appended to a Valkey
dead-letter list for support to settle by hand.
"""

import logging
from typing import Callable

from clients.valkey_client import ValkeyClient
from core.events import PointsRestoreFailed

logger = logging.getLogger(__name__)

DEAD_LETTER_KEY = "checkout:compensation:dead_letter"


def handle_points_restore_failed(valkey: ValkeyClient) -> Callable:
    """
    Factory that returns a PointsRestoreFailed handler.

    Args:
        valkey: ValkeyClient holding the dead-letter list

    Returns:
        Handler callable that dead-letters the failed restore
    """

    def handler(event: PointsRestoreFailed):
        checkout = event.checkout
        record = {
            "event_id": event.event_id,
            "occurred_at": event.occurred_at.isoformat(),
            "checkout_id": str(checkout.id),
            "owner_hash": checkout.owner_hash,
            "holder_id": checkout.holder_id,
            "event": checkout.event.id,
            "points": event.points,
            "reason": event.reason,
            "idempotency_key": checkout.idempotency_key,
        }
        valkey.push_json(DEAD_LETTER_KEY, record)
        logger.error(
            f"Dead-lettered unrestored redemption: checkout {checkout.id}, "
            f"holder {checkout.holder_id}, "
            f"{event.points} points ({event.reason})"
        )

    return handler
