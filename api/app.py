"""FastAPI application assembly."""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI

from api.actions import create_actions_router
from api.data import create_data_router
from api.errors import register_error_handlers
from api.middleware import BearerTokenMiddleware, RequestIDMiddleware
from api.base import success_response
from clients.backend_client import BackendClient
from clients.catalog_client import EventCatalogClient
from clients.loyalty_client import LoyaltyLedgerClient
from clients.payment_client import PaymentSessionClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_backend_config, get_valkey_url
from core.config import CheckoutConfig
from core.event_bus import EventBus
from core.events import PointsRestoreFailed
from core.handlers.compensation_handler import handle_points_restore_failed
from core.services.checkout_service import CheckoutService
from core.services.checkout_store import CheckoutStore

logger = logging.getLogger(__name__)


def create_app(services: dict) -> FastAPI:
    """
    Build the app around already-wired services.

    Args:
        services: Dict with key "checkout" -> CheckoutService
    """
    app = FastAPI(title="Checkout")
    # Added last runs first: request IDs exist before the auth check answers.
    app.add_middleware(BearerTokenMiddleware)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        return success_response({"status": "ok"}).model_dump(mode="json")

    app.include_router(create_data_router(services), prefix="/api")
    app.include_router(create_actions_router(services), prefix="/api")

    return app


def build_services(config: CheckoutConfig, valkey: ValkeyClient, event_bus: EventBus) -> dict:
    """Wire clients and the checkout service for a given backend and Valkey."""
    backend = BackendClient(config.backend_base_url, config.request_timeout_seconds)

    event_bus.subscribe(PointsRestoreFailed, handle_points_restore_failed(valkey))

    return {
        "checkout": CheckoutService(
            store=CheckoutStore(valkey, config),
            catalog=EventCatalogClient(backend),
            ledger=LoyaltyLedgerClient(backend),
            payments=PaymentSessionClient(backend),
            config=config,
            event_bus=event_bus,
        ),
    }


def create_app_from_env() -> FastAPI:
    """Production entry point: Vault and Valkey from the environment (.env honoured)."""
    load_dotenv()

    backend = get_backend_config()
    config = CheckoutConfig(
        backend_base_url=backend["base_url"],
        redemption_strategy=os.getenv("CHECKOUT_REDEMPTION_STRATEGY", "deferred"),
    )
    valkey = ValkeyClient(get_valkey_url())

    logger.info(
        f"Checkout service starting (strategy={config.redemption_strategy.value}, "
        f"backend={config.backend_base_url})"
    )
    return create_app(build_services(config, valkey, EventBus()))
