"""Tests for RequestIDMiddleware and BearerTokenMiddleware."""

import pytest
from uuid import UUID
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.testclient import TestClient

from api.middleware import BearerTokenMiddleware, RequestIDMiddleware
from utils.request_context import get_current_token


@pytest.fixture
def app():
    """Minimal FastAPI app with both middlewares."""
    app = FastAPI()
    app.add_middleware(BearerTokenMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/test")
    async def test_endpoint(request: Request):
        return JSONResponse({
            "request_id": request.state.request_id,
            "token": get_current_token(),
        })

    @app.get("/health")
    async def health():
        return JSONResponse({"ok": True})

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


AUTH = {"Authorization": "Bearer abc123"}


class TestRequestIDMiddleware:

    def test_response_has_request_id_header(self, client):
        response = client.get("/test", headers=AUTH)

        assert "X-Request-ID" in response.headers
        UUID(response.headers["X-Request-ID"])

    def test_request_state_has_request_id(self, client):
        response = client.get("/test", headers=AUTH)
        assert response.headers["X-Request-ID"] == response.json()["request_id"]

    def test_each_request_gets_unique_id(self, client):
        r1 = client.get("/test", headers=AUTH)
        r2 = client.get("/test", headers=AUTH)

        assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


class TestBearerTokenMiddleware:

    def test_token_available_to_handler(self, client):
        assert client.get("/test", headers=AUTH).json()["token"] == "abc123"

    def test_missing_header_returns_401(self, client):
        response = client.get("/test")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"
        assert response.json()["meta"]["request_id"] == response.headers["X-Request-ID"]

    @pytest.mark.parametrize("header", ["Basic abc123", "Bearer", "Bearer   ", "abc123"])
    def test_malformed_header_returns_401(self, client, header):
        response = client.get("/test", headers={"Authorization": header})
        assert response.status_code == 401

    def test_scheme_is_case_insensitive(self, client):
        response = client.get("/test", headers={"Authorization": "bearer abc123"})
        assert response.status_code == 200

    def test_public_path_skips_auth(self, client):
        assert client.get("/health").status_code == 200

    def test_public_prefix_does_not_leak(self, client):
        """/healthcheck is not /health."""
        assert client.get("/healthcheck").status_code == 401

    def test_token_cleared_after_request(self, client):
        client.get("/test", headers=AUTH)
        with pytest.raises(RuntimeError):
            get_current_token()
