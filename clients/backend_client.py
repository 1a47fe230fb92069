"""
REST client for the ticketing backend.

Every call forwards the shopper's bearer token (from the request context)
and sends/receives JSON. Any transport failure, non-2xx status or unreadable
body becomes a BackendError carrying the backend's own message verbatim, so
callers can show it to the shopper unchanged.
"""

import logging
from typing import Any, Callable

import requests

from utils.request_context import get_current_token

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when a backend request fails."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


def _error_message(body: Any) -> str | None:
    """Pull the human-readable message out of an error body."""
    if isinstance(body, dict):
        for key in ("message", "error", "title"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


class BackendClient:
    """JSON-over-HTTP client with bearer auth."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: int = 30,
        token_provider: Callable[[], str] = get_current_token,
    ):
        """
        Initialize with the backend location.

        Args:
            base_url: Backend API root (e.g. https://api.example.com/api)
            timeout_seconds: Per-request timeout
            token_provider: Returns the bearer token to forward

        Raises:
            ValueError: If base_url is empty
        """
        if not base_url:
            raise ValueError("base_url is required")

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._token_provider = token_provider

    def get(self, path: str) -> Any:
        """GET path and return the decoded JSON body."""
        return self._request("GET", path)

    def post(self, path: str, payload: dict, headers: dict[str, str] | None = None) -> Any:
        """POST a JSON payload and return the decoded JSON body."""
        return self._request("POST", path, payload=payload, extra_headers=headers)

    def _request(
        self,
        method: str,
        path: str,
        payload: dict | None = None,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Send one request.

        Raises:
            BackendError: On connection failure, non-2xx status or invalid JSON
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._token_provider()}",
        }
        if extra_headers:
            headers.update(extra_headers)

        try:
            response = requests.request(
                method,
                url,
                json=payload,
                headers=headers,
                timeout=self.timeout_seconds,
            )
        except (requests.exceptions.RequestException, ConnectionError) as e:
            logger.error(f"Backend {method} {path} connection failed: {e}")
            raise BackendError(f"Connection failed: {e}")

        try:
            body = response.json()
        except requests.exceptions.JSONDecodeError:
            body = None

        if not response.ok:
            message = _error_message(body) or f"Backend returned HTTP {response.status_code}"
            logger.error(f"Backend {method} {path} failed ({response.status_code}): {message}")
            raise BackendError(message, status_code=response.status_code)

        if body is None:
            logger.error(f"Backend {method} {path} returned invalid JSON: {response.text[:200]}")
            raise BackendError("Invalid response from backend", status_code=response.status_code)

        return body
