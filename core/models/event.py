"""Event and price tier models, as read from the event catalog.

All prices are whole currency units (LKR has no minor unit in use here).
"""

from pydantic import BaseModel, Field


class PriceTier(BaseModel):
    """A purchasable ticket category for an event."""

    id: str
    category: str
    unit_price: int = Field(..., ge=0)
    remaining_stock: int = Field(..., ge=0)
    is_active: bool = True

    @property
    def is_available(self) -> bool:
        """Whether at least one ticket of this tier can be sold."""
        return self.is_active and self.remaining_stock > 0


class EventSummary(BaseModel):
    """The event being booked, with its price tiers."""

    id: str
    title: str
    venue_name: str | None = None
    venue_location: str | None = None
    event_date: str | None = None
    event_time: str | None = None
    tiers: list[PriceTier] = Field(default_factory=list)

    def get_tier(self, price_id: str) -> PriceTier | None:
        """Find a tier by id, or None."""
        for tier in self.tiers:
            if tier.id == price_id:
                return tier
        return None
