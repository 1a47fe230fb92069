"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from clients.backend_client import BackendError
from core.exceptions import (
    CheckoutBusyError,
    CheckoutError,
    CheckoutNotFoundError,
    CompensationFailedError,
    InvalidCheckoutStateError,
    ReconciliationError,
    RedemptionFailedError,
    SessionCreationFailedError,
    TierUnavailableError,
)

logger = logging.getLogger(__name__)

# Most specific first; CheckoutError itself is the fallback.
_CHECKOUT_ERRORS: list[tuple[type[CheckoutError], int, str]] = [
    (CheckoutNotFoundError, 404, ErrorCodes.NOT_FOUND),
    (CheckoutBusyError, 409, ErrorCodes.CHECKOUT_BUSY),
    (InvalidCheckoutStateError, 409, ErrorCodes.INVALID_STATUS_TRANSITION),
    (TierUnavailableError, 409, ErrorCodes.TIER_UNAVAILABLE),
    (RedemptionFailedError, 400, ErrorCodes.REDEMPTION_FAILED),
    (SessionCreationFailedError, 502, ErrorCodes.PAYMENT_SESSION_FAILED),
    (CompensationFailedError, 502, ErrorCodes.COMPENSATION_FAILED),
    (ReconciliationError, 400, ErrorCodes.RECONCILIATION_MISMATCH),
]


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _json_error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, _request_id(request)).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        status_code, code = 400, ErrorCodes.INVALID_REQUEST
        for exc_type, mapped_status, mapped_code in _CHECKOUT_ERRORS:
            if isinstance(exc, exc_type):
                status_code, code = mapped_status, mapped_code
                break

        if isinstance(exc, RedemptionFailedError):
            status_code = exc.status_code

        if status_code >= 500:
            logger.error(f"{type(exc).__name__}: {exc}")
        else:
            logger.warning(f"{type(exc).__name__}: {exc}")
        return _json_error(request, status_code, code, str(exc))

    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        if exc.status_code == 404:
            return _json_error(request, 404, ErrorCodes.NOT_FOUND, str(exc))
        return _json_error(request, 502, ErrorCodes.BACKEND_ERROR, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return _json_error(request, 404, ErrorCodes.NOT_FOUND, message)
        return _json_error(request, 400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        return _json_error(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _json_error(
            request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors(include_url=False))
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json_error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
