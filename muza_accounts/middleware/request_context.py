"""
Per-request context and log correlation.

WHAT: Captures a request id, the client address and the user agent for
every request and exposes them to code that has no Request object.

WHY: Support tickets quote the X-Request-ID response header; the same id is
stamped on every log line written while that request was in flight.

HOW: The context lives in request.state and in a ContextVar. A caller
supplied X-Request-ID is kept so ids survive a proxy hop.
"""

import logging
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Optional, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass
class RequestContext:
    request_id: str
    ip_address: str
    user_agent: Optional[str]
    path: str
    method: str


_current: ContextVar[Optional[RequestContext]] = ContextVar("request_context", default=None)


def get_request_context() -> Optional[RequestContext]:
    """Context of the request being served, or None outside a request."""
    return _current.get()


def get_client_ip(request: Request) -> str:
    """
    Best guess at the caller's address.

    Order: X-Real-IP, then the first X-Forwarded-For hop, then the socket
    peer. Proxy headers are only trustworthy behind a proxy that sets them.
    """
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RequestIdLogFilter(logging.Filter):
    """Adds ``request_id`` to log records ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            context = _current.get()
            record.request_id = context.request_id if context else "-"
        return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        context = RequestContext(
            request_id=request_id,
            ip_address=get_client_ip(request),
            user_agent=request.headers.get("User-Agent"),
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _current.set(context)
        try:
            response = await call_next(request)
        finally:
            _current.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
