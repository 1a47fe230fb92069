"""Event catalog client. Source of truth for tier prices and stock at checkout time."""

from clients.backend_client import BackendClient, BackendError
from core.models import EventSummary, PriceTier


class EventCatalogClient:
    """Read events and their price tiers."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    def get_event(self, event_id: str) -> EventSummary:
        """
        Fetch an event with its price tiers.

        Raises:
            ValueError: If event_id is empty
            BackendError: On failure (status_code 404 when the event does not exist)
        """
        if not event_id:
            raise ValueError("event_id is required")

        data = self.backend.get(f"/events/{event_id}")
        try:
            venue = data.get("venue") or {}
            return EventSummary(
                id=str(data["id"]),
                title=data.get("title") or "Event Ticket",
                venue_name=venue.get("name"),
                venue_location=venue.get("location"),
                event_date=data.get("eventDate"),
                event_time=data.get("eventTime"),
                tiers=[
                    PriceTier(
                        id=str(price["id"]),
                        category=price["category"],
                        unit_price=int(price["price"]),
                        remaining_stock=max(0, int(price.get("stock") or 0)),
                        is_active=bool(price.get("isActive", True)),
                    )
                    for price in data.get("prices") or []
                ],
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise BackendError(f"Invalid event response: {e}")
