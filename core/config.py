"""Checkout configuration."""

from enum import Enum

from pydantic import BaseModel, Field


class RedemptionStrategy(str, Enum):
    """When loyalty points are taken from the ledger."""

    DEFERRED = "deferred"  # backend redeems on webhook-confirmed payment
    IMMEDIATE = "immediate"  # redeem before session creation, restore on failure


class CheckoutConfig(BaseModel):
    """
    Checkout configuration.

    Rates are integer basis points (10000 = 100%) so every derived amount is
    exact integer arithmetic. Currency amounts are whole currency units.
    """

    # Loyalty economics
    earn_rate_bps: int = Field(
        default=1000,
        description="Share of the final total credited back as points",
        ge=0,
        le=10000,
    )
    max_redemption_bps: int = Field(
        default=5000,
        description="Share of the subtotal that points may cover",
        ge=0,
        le=10000,
    )
    point_value: int = Field(
        default=1,
        description="Currency units one point is worth",
        ge=1,
    )

    # Payment
    currency: str = Field(
        default="lkr",
        description="ISO currency code sent to the payment gateway (lowercase)",
        min_length=3,
        max_length=3,
    )
    redemption_strategy: RedemptionStrategy = Field(
        default=RedemptionStrategy.DEFERRED,
        description="Whether points are redeemed at submit or on confirmed payment",
    )

    # Checkout lifetime
    checkout_ttl_minutes: int = Field(
        default=60,
        description="How long an abandoned checkout is kept",
        ge=5,
        le=1440,
    )

    # Backend
    backend_base_url: str = Field(
        default="http://localhost:5000/api",
        description="Root of the ticketing REST API (paths like /loyalty/balance are appended)",
    )
    request_timeout_seconds: int = Field(
        default=30,
        description="Timeout for each backend round-trip",
        ge=1,
        le=120,
    )
