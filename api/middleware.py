"""Request-scoped middleware for API requests."""

from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from utils.request_context import set_current_token, clear_current_token


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class BearerTokenMiddleware(BaseHTTPMiddleware):
    """Requires a bearer token and exposes it to the backend clients.

    The token is not validated here; the ticketing backend does that on the
    first forwarded call. It is placed in the request context for the
    duration of the request and always cleared afterwards.

    Public paths bypass the check entirely.
    """

    PUBLIC_PATHS = [
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def _is_public_path(self, path: str) -> bool:
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path + "/"):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        if self._is_public_path(request.url.path):
            return await call_next(request)

        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        token = token.strip()

        if scheme.lower() != "bearer" or not token:
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                    getattr(request.state, "request_id", None),
                ).model_dump(mode="json"),
            )

        set_current_token(token)
        try:
            return await call_next(request)
        finally:
            clear_current_token()
