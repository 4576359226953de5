"""
Unit tests for request context middleware.

WHY: Request ids tie a client's error report to server logs; client IPs
key the rate limiter.
"""

import logging

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from starlette.requests import Request

from muza_accounts.middleware.request_context import (
    RequestContextMiddleware,
    get_client_ip,
    RequestIdLogFilter,
    get_request_context,
)


class TestGetClientIp:
    """Tests for the get_client_ip function."""

    def _make_request(self, headers: dict = None, client_host: str = None) -> Request:
        scope = {
            "type": "http",
            "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
            "client": (client_host, 12345) if client_host else None,
        }
        return Request(scope)

    def test_prefers_x_real_ip(self):
        request = self._make_request(
            headers={"X-Real-IP": "192.168.1.100", "X-Forwarded-For": "203.0.113.50"},
            client_host="10.0.0.1",
        )

        assert get_client_ip(request) == "192.168.1.100"

    def test_first_forwarded_address(self):
        request = self._make_request(
            headers={"X-Forwarded-For": "203.0.113.50, 70.41.3.18"},
            client_host="10.0.0.1",
        )

        assert get_client_ip(request) == "203.0.113.50"

    def test_direct_connection(self):
        assert get_client_ip(self._make_request(client_host="10.0.0.1")) == "10.0.0.1"

    def test_unknown(self):
        assert get_client_ip(self._make_request()) == "unknown"


class TestRequestContextMiddleware:
    @pytest.fixture
    def app(self):
        app = FastAPI()
        app.add_middleware(RequestContextMiddleware)

        @app.get("/context")
        async def context_endpoint():
            context = get_request_context()
            return {"request_id": context.request_id, "path": context.path}

        return app

    @pytest.mark.asyncio
    async def test_generates_request_id(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/context")

        request_id = response.headers["X-Request-ID"]
        assert request_id
        assert response.json() == {"request_id": request_id, "path": "/context"}

    @pytest.mark.asyncio
    async def test_reuses_incoming_request_id(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/context", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
        assert response.json()["request_id"] == "req-123"

    def test_no_context_outside_request(self):
        assert get_request_context() is None


class TestRequestIdLogFilter:
    def _record(self):
        return logging.LogRecord("muza", logging.INFO, __file__, 1, "hello", None, None)

    def test_dash_outside_request(self):
        record = self._record()

        assert RequestIdLogFilter().filter(record) is True
        assert record.request_id == "-"

    @pytest.mark.asyncio
    async def test_stamps_current_request_id(self):
        app = FastAPI()
        app.add_middleware(RequestContextMiddleware)

        @app.get("/log")
        async def log_endpoint():
            record = self._record()
            RequestIdLogFilter().filter(record)
            return {"request_id": record.request_id}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/log", headers={"X-Request-ID": "abc"})

        assert response.json() == {"request_id": "abc"}
