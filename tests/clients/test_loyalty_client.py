"""Tests for LoyaltyLedgerClient."""

import pytest
import responses
from responses import matchers

from clients.backend_client import BackendClient, BackendError
from clients.loyalty_client import LoyaltyLedgerClient
from core.models import LoyaltyEntryType

BASE_URL = "https://api.tickets.test/api"


@pytest.fixture
def ledger_client():
    return LoyaltyLedgerClient(BackendClient(BASE_URL, token_provider=lambda: "tok"))


class TestGetBalance:

    @responses.activate
    def test_parses_balance(self, ledger_client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/loyalty/balance",
            json={"userId": "u-1", "balance": 10000, "discountValue": 10000},
        )

        balance = ledger_client.get_balance()

        assert balance.balance == 10000
        assert balance.discount_value == 10000
        assert balance.user_id == "u-1"

    @responses.activate
    def test_malformed_balance_raises(self, ledger_client):
        responses.add(responses.GET, f"{BASE_URL}/loyalty/balance", json={"userId": "u-1"})

        with pytest.raises(BackendError, match="Invalid loyalty balance"):
            ledger_client.get_balance()


class TestGetHistory:

    @responses.activate
    def test_parses_entries(self, ledger_client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/loyalty/history",
            json={
                "userId": "u-1",
                "history": [
                    {"id": 1, "points": 446, "description": "Booking", "earnedDate": "2026-01-01", "type": "Earned"},
                    {"id": 2, "points": -200, "description": "Redeemed", "earnedDate": "2026-01-02", "type": "Redeemed"},
                ],
            },
        )

        history = ledger_client.get_history()

        assert [h.id for h in history] == ["1", "2"]
        assert history[1].points == -200
        assert history[1].type == LoyaltyEntryType.REDEEMED

    @responses.activate
    def test_empty_history(self, ledger_client):
        responses.add(responses.GET, f"{BASE_URL}/loyalty/history", json={"userId": "u-1", "history": None})
        assert ledger_client.get_history() == []

    @responses.activate
    def test_malformed_entry_raises(self, ledger_client):
        responses.add(
            responses.GET,
            f"{BASE_URL}/loyalty/history",
            json={"history": [{"id": 1, "points": 10, "type": "Gifted"}]},
        )

        with pytest.raises(BackendError, match="Invalid loyalty history"):
            ledger_client.get_history()


class TestRedeem:

    @responses.activate
    def test_success(self, ledger_client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/loyalty/redeem",
            json={"success": True, "message": "ok", "redeemedPoints": 2232,
                  "discountValue": 2232, "remainingBalance": 7768},
            match=[matchers.json_params_matcher({"points": 2232, "description": "Redeemed for X"})],
        )

        result = ledger_client.redeem(2232, "Redeemed for X")

        assert result.success is True
        assert result.redeemed_points == 2232
        assert result.remaining_balance == 7768

    @responses.activate
    def test_refusal_returned_not_raised(self, ledger_client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/loyalty/redeem",
            json={"success": False, "message": "Insufficient loyalty points"},
        )

        result = ledger_client.redeem(50, "x")

        assert result.success is False
        assert result.message == "Insufficient loyalty points"
        assert result.redeemed_points == 0

    @responses.activate
    def test_http_error_raises(self, ledger_client):
        responses.add(
            responses.POST, f"{BASE_URL}/loyalty/redeem",
            json={"message": "Ledger offline"}, status=503,
        )

        with pytest.raises(BackendError, match="Ledger offline"):
            ledger_client.redeem(50, "x")

    @pytest.mark.parametrize("points", [0, -5])
    def test_non_positive_points_rejected(self, ledger_client, points):
        with pytest.raises(ValueError, match="positive"):
            ledger_client.redeem(points, "x")

    @pytest.mark.parametrize("body", ["ok", {"success": True, "redeemedPoints": "lots"}])
    @responses.activate
    def test_malformed_reply_raises(self, ledger_client, body):
        responses.add(responses.POST, f"{BASE_URL}/loyalty/redeem", json=body)

        with pytest.raises(BackendError, match="Invalid loyalty ledger response"):
            ledger_client.redeem(50, "x")


class TestRestore:

    @responses.activate
    def test_posts_to_restore(self, ledger_client):
        responses.add(
            responses.POST,
            f"{BASE_URL}/loyalty/restore",
            json={"success": True, "redeemedPoints": 100, "remainingBalance": 10000},
            match=[matchers.json_params_matcher({"points": 100, "description": "Restored"})],
        )

        assert ledger_client.restore(100, "Restored").success is True

    def test_non_positive_points_rejected(self, ledger_client):
        with pytest.raises(ValueError):
            ledger_client.restore(0, "x")

    @responses.activate
    def test_non_object_reply_raises(self, ledger_client):
        responses.add(responses.POST, f"{BASE_URL}/loyalty/restore", json="ok")

        with pytest.raises(BackendError, match="Invalid loyalty ledger response"):
            ledger_client.restore(100, "Restored")
