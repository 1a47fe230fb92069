"""POST /api/actions - unified mutation endpoint."""

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from api.base import success_response


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


# =============================================================================
# PAYLOADS
# =============================================================================


class StartPayload(BaseModel):
    event_id: str = Field(..., min_length=1)
    price_id: str | None = None


class SelectTierPayload(BaseModel):
    id: str
    price_id: str = Field(..., min_length=1)


class SetQuantityPayload(BaseModel):
    id: str
    quantity: int


class SetRedemptionPayload(BaseModel):
    id: str
    points: int


class ReconcilePayload(BaseModel):
    id: str
    params: dict[str, str]


class CheckoutRefPayload(BaseModel):
    id: str


def create_actions_router(services: dict) -> APIRouter:
    router = APIRouter()

    handlers = {
        "checkout": CheckoutHandler(services["checkout"]),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result = method(body.data)
        return success_response(
            result, getattr(request.state, "request_id", None)
        ).model_dump(mode="json")

    return router


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class CheckoutHandler:
    ALLOWED_ACTIONS = {
        "start", "select_tier", "set_quantity", "set_redemption",
        "submit", "reconcile", "resume",
    }

    def __init__(self, service):
        self.service = service

    def _handle_start(self, data: dict):
        payload = StartPayload(**data)
        checkout = self.service.start(payload.event_id, payload.price_id)
        return checkout.to_public()

    def _handle_select_tier(self, data: dict):
        payload = SelectTierPayload(**data)
        return self.service.select_tier(payload.id, payload.price_id).to_public()

    def _handle_set_quantity(self, data: dict):
        payload = SetQuantityPayload(**data)
        return self.service.set_quantity(payload.id, payload.quantity).to_public()

    def _handle_set_redemption(self, data: dict):
        payload = SetRedemptionPayload(**data)
        return self.service.set_redemption(payload.id, payload.points).to_public()

    def _handle_submit(self, data: dict):
        payload = CheckoutRefPayload(**data)
        checkout = self.service.submit(payload.id)
        return {
            "checkout": checkout.to_public(),
            "redirect_url": checkout.redirect_url,
        }

    def _handle_reconcile(self, data: dict):
        payload = ReconcilePayload(**data)
        return self.service.reconcile(payload.id, payload.params).to_public()

    def _handle_resume(self, data: dict):
        payload = CheckoutRefPayload(**data)
        return self.service.resume(payload.id).to_public()
