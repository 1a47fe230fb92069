"""Tests for checkout domain event models."""

from dataclasses import FrozenInstanceError
from datetime import timezone
from uuid import uuid4

import pytest

from core.events import (
    CheckoutDomainEvent,
    CheckoutEvent,
    CheckoutFailed,
    LoyaltyEvent,
    PaymentSessionCreated,
    PointsRedeemed,
    PointsRestored,
    PointsRestoreFailed,
)
from core.models import Checkout, CheckoutState
from utils.timezone import now_utc


@pytest.fixture
def _checkout(event):
    now = now_utc()
    return Checkout(
        id=uuid4(), owner_hash="owner", state=CheckoutState.REDIRECTED,
        event=event, idempotency_key="k1", created_at=now, updated_at=now,
    )


class TestEventBase:

    def test_event_id_and_timestamp_populated(self, _checkout):
        event = PaymentSessionCreated.create(_checkout)

        assert event.event_id
        assert event.occurred_at.tzinfo == timezone.utc

    def test_event_ids_unique(self, _checkout):
        assert PaymentSessionCreated.create(_checkout).event_id != \
            PaymentSessionCreated.create(_checkout).event_id

    def test_events_are_frozen(self, _checkout):
        event = PointsRedeemed.create(_checkout, 100)
        with pytest.raises(FrozenInstanceError):
            event.points = 5

    def test_hierarchy(self, _checkout):
        assert isinstance(PointsRestored.create(_checkout, 1), LoyaltyEvent)
        assert isinstance(CheckoutFailed.create(_checkout, "x"), CheckoutEvent)
        assert isinstance(CheckoutFailed.create(_checkout, "x"), CheckoutDomainEvent)


class TestPayloads:

    def test_loyalty_event_carries_points(self, _checkout):
        event = PointsRedeemed.create(_checkout, 2232)
        assert event.points == 2232
        assert event.checkout.id == _checkout.id

    def test_restore_failed_carries_reason(self, _checkout):
        event = PointsRestoreFailed.create(_checkout, 2232, "ledger down")
        assert event.reason == "ledger down"
        assert event.points == 2232

    def test_failed_carries_reason(self, _checkout):
        assert CheckoutFailed.create(_checkout, "Stripe is unavailable").reason == \
            "Stripe is unavailable"
