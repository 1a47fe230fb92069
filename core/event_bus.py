"""
Event bus for checkout domain events.

Synchronous in-process pub/sub. Handlers run immediately, in the publisher's
thread, in subscription order. A failing handler is logged and skipped: the
ledger or gateway call that produced the event has already happened and must
not be reported as failed because a listener broke.
"""

import logging
from typing import Callable

from core.events import CheckoutDomainEvent

logger = logging.getLogger(__name__)


class EventBus:
    """
    In-process event bus.

    Subscriptions are keyed by the exact event class; subclasses are not
    delivered to a parent's subscribers.
    """

    def __init__(self):
        self._subscribers: dict[type, list[Callable]] = {}

    def subscribe(self, event_type: type[CheckoutDomainEvent], callback: Callable) -> None:
        """
        Subscribe to one event class.

        Args:
            event_type: Event class to listen for (e.g. PointsRestoreFailed)
            callback: Called with the event instance
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def publish(self, event: CheckoutDomainEvent) -> None:
        """
        Deliver an event to every subscriber of its class.

        Args:
            event: Event instance to publish
        """
        for callback in self._subscribers.get(type(event), []):
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(callback, "__name__", repr(callback)),
                    type(event).__name__,
                    event.event_id,
                )
