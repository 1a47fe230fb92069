"""GET /api/data - unified read endpoint."""

from fastapi import APIRouter, Query, Request

from api.base import success_response
from core.pricing import suggest_redemption

VALID_TYPES = {"checkout", "loyalty_balance", "loyalty_history", "event"}

# Quick-pick buttons offered next to the points input.
REDEMPTION_SUGGESTIONS_BPS = {"quarter": 2_500, "half": 5_000, "max": 10_000}


def create_data_router(services: dict) -> APIRouter:
    router = APIRouter()

    checkout_svc = services["checkout"]

    @router.get("/data")
    async def get_data(
        request: Request,
        type: str | None = Query(None),
        id: str | None = Query(None),
    ):
        if type is None:
            raise ValueError("'type' query parameter is required")

        if type not in VALID_TYPES:
            raise ValueError(f"Unknown type '{type}'. Valid types: {', '.join(sorted(VALID_TYPES))}")

        if type == "checkout":
            data = _checkout_data(checkout_svc, id)
        elif type == "loyalty_balance":
            data = checkout_svc.get_balance().model_dump(mode="json")
        elif type == "loyalty_history":
            data = [e.model_dump(mode="json") for e in checkout_svc.get_history()]
        else:
            data = _event_data(checkout_svc, id)

        return success_response(
            data, getattr(request.state, "request_id", None)
        ).model_dump(mode="json")

    return router


def _checkout_data(checkout_svc, id):
    if not id:
        raise ValueError("'id' query parameter is required for type 'checkout'")

    checkout = checkout_svc.get(id)
    data = checkout.to_public()
    data["redemption_suggestions"] = {
        name: suggest_redemption(checkout.redemption_cap, bps)
        for name, bps in REDEMPTION_SUGGESTIONS_BPS.items()
    }
    return data


def _event_data(checkout_svc, id):
    if not id:
        raise ValueError("'id' query parameter is required for type 'event'")
    return checkout_svc.get_event(id).model_dump(mode="json")
