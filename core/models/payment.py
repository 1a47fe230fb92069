"""Payment session models.

The gateway is told to charge exactly one amount: final_amount. Everything
else travels in flat string metadata for backend audit and reconciliation.
"""

from pydantic import BaseModel, Field


class PaymentSessionMetadata(BaseModel):
    """Flat key/value audit data attached to a payment session."""

    event_id: str
    price_id: str
    quantity: str
    unit_price: str
    loyalty_points_used: str
    subtotal: str
    discount: str
    calculation_formula: str
    redemption_mode: str

    def to_wire(self) -> dict[str, str]:
        """Backend field names for the metadata object."""
        return {
            "eventId": self.event_id,
            "priceId": self.price_id,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "loyaltyPointsUsed": self.loyalty_points_used,
            "subtotal": self.subtotal,
            "discount": self.discount,
            "calculationFormula": self.calculation_formula,
            "redemptionMode": self.redemption_mode,
        }


class PaymentSessionRequest(BaseModel):
    """Outbound request for a single-line-item payment session."""

    event_title: str
    description: str
    final_amount: int = Field(..., ge=0)
    currency: str
    metadata: PaymentSessionMetadata
    idempotency_key: str

    def to_wire(self) -> dict:
        """JSON body for POST /payment/create-session."""
        return {
            "eventTitle": self.event_title,
            "description": self.description,
            "finalAmount": self.final_amount,
            "currency": self.currency,
            "metadata": self.metadata.to_wire(),
        }


class PaymentSessionResult(BaseModel):
    """Gateway session handle. Opaque beyond the redirect."""

    session_id: str
    redirect_url: str
