"""Tests for CheckoutStore - Valkey snapshot persistence."""

from uuid import uuid4

import pytest

from core.config import CheckoutConfig
from core.models import Checkout, CheckoutState
from core.services.checkout_store import CheckoutStore
from utils.timezone import now_utc


@pytest.fixture
def store(valkey):
    return CheckoutStore(valkey, CheckoutConfig(checkout_ttl_minutes=30))


@pytest.fixture
def checkout(event):
    now = now_utc()
    return Checkout(
        id=uuid4(),
        owner_hash="owner",
        state=CheckoutState.SELECTING,
        event=event,
        idempotency_key="k1",
        created_at=now,
        updated_at=now,
    )


class TestCheckoutStore:

    def test_save_then_get(self, store, checkout):
        store.save(checkout)

        loaded = store.get(checkout.id)

        assert loaded.id == checkout.id
        assert loaded.event.title == "Sunset Concert"
        assert loaded.state == CheckoutState.SELECTING

    def test_get_accepts_string_id(self, store, checkout):
        store.save(checkout)
        assert store.get(str(checkout.id)).id == checkout.id

    def test_saved_with_ttl(self, store, valkey, checkout):
        store.save(checkout)
        assert valkey.ttls[f"checkout:{checkout.id}"] == 30 * 60

    def test_missing_returns_none(self, store):
        assert store.get(uuid4()) is None

    def test_save_overwrites(self, store, checkout):
        store.save(checkout)
        checkout.state = CheckoutState.SIZING
        store.save(checkout)

        assert store.get(checkout.id).state == CheckoutState.SIZING
