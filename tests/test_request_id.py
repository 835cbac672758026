"""Tests for request ID and security header middleware."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from backoffice.app.middleware.request_id import RequestIdMiddleware, get_request_id
from backoffice.app.middleware.security_headers import (
    HSTS_VALUE,
    SECURITY_HEADERS,
    SecurityHeadersMiddleware,
)


@pytest.fixture
def echo_app():
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)

    @app.get("/echo")
    async def echo(request: Request):
        return {"request_id": get_request_id(request)}

    return app


class TestRequestIdMiddleware:
    def test_incoming_id_is_kept(self, echo_app):
        resp = TestClient(echo_app).get("/echo", headers={"X-Request-ID": "req-abc"})

        assert resp.json() == {"request_id": "req-abc"}
        assert resp.headers["X-Request-ID"] == "req-abc"

    def test_id_is_generated_when_missing(self, echo_app):
        resp = TestClient(echo_app).get("/echo")

        request_id = resp.json()["request_id"]
        assert len(request_id) == 36
        assert resp.headers["X-Request-ID"] == request_id

    def test_oversized_incoming_id_is_replaced(self, echo_app):
        resp = TestClient(echo_app).get("/echo", headers={"X-Request-ID": "x" * 500})
        assert resp.json()["request_id"] != "x" * 500


def test_get_request_id_without_middleware():
    app = FastAPI()

    @app.get("/echo")
    async def echo(request: Request):
        return {"request_id": get_request_id(request)}

    assert TestClient(app).get("/echo").json() == {"request_id": "unknown"}


class TestSecurityHeadersMiddleware:
    def _client(self, enable_hsts):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware, enable_hsts=enable_hsts)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        return TestClient(app)

    def test_headers_are_added(self):
        resp = self._client(enable_hsts=True).get("/ping")

        for name, value in SECURITY_HEADERS.items():
            assert resp.headers[name] == value
        assert resp.headers["Strict-Transport-Security"] == HSTS_VALUE

    def test_hsts_can_be_disabled(self):
        resp = self._client(enable_hsts=False).get("/ping")
        assert "Strict-Transport-Security" not in resp.headers
