"""
Checkout snapshot persistence in Valkey.

One JSON snapshot per checkout, rewritten on every state change and expired
after the configured TTL so abandoned visits clean themselves up.
"""

import logging

from clients.valkey_client import ValkeyClient
from core.config import CheckoutConfig
from core.models import Checkout

logger = logging.getLogger(__name__)


class CheckoutStore:
    """Save and load checkout snapshots."""

    KEY_PREFIX = "checkout:"

    def __init__(self, valkey: ValkeyClient, config: CheckoutConfig):
        self.valkey = valkey
        self.ttl_seconds = config.checkout_ttl_minutes * 60

    def _key(self, checkout_id) -> str:
        return f"{self.KEY_PREFIX}{checkout_id}"

    def save(self, checkout: Checkout) -> None:
        """Write the snapshot and reset its TTL."""
        self.valkey.set_json(
            self._key(checkout.id),
            checkout.model_dump(mode="json"),
            expire_seconds=self.ttl_seconds,
        )

    def get(self, checkout_id) -> Checkout | None:
        """
        Load a snapshot.

        Returns:
            Checkout, or None if it never existed or has expired.
        """
        data = self.valkey.get_json(self._key(checkout_id))
        if data is None:
            logger.debug(f"Checkout {checkout_id} missing or expired")
            return None
        return Checkout.model_validate(data)
