"""Payment session client: asks the backend to open a hosted gateway checkout."""

import logging

from clients.backend_client import BackendClient, BackendError
from core.models import PaymentSessionRequest, PaymentSessionResult

logger = logging.getLogger(__name__)


class PaymentSessionClient:
    """Create payment gateway sessions through the backend."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    def create_session(self, request: PaymentSessionRequest) -> PaymentSessionResult:
        """
        Create one gateway session for the request's final amount.

        The idempotency key goes in a header so a gateway that supports it can
        collapse duplicate submits of the same selection.

        Raises:
            BackendError: On failure, with the backend's message verbatim
        """
        data = self.backend.post(
            "/payment/create-session",
            request.to_wire(),
            headers={"Idempotency-Key": request.idempotency_key},
        )

        session_id = data.get("sessionId") if isinstance(data, dict) else None
        url = data.get("url") if isinstance(data, dict) else None
        if not session_id or not url:
            logger.error(f"Payment session response missing sessionId/url: {data}")
            raise BackendError("Invalid response from payment service")

        logger.info(
            f"Payment session {session_id} created for {request.final_amount} "
            f"{request.currency.upper()}"
        )
        return PaymentSessionResult(session_id=session_id, redirect_url=url)
