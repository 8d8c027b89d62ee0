"""Request context utilities."""

from __future__ import annotations

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

REQUEST_ID_HEADER = "X-Request-ID"


def set_request_id(value: str | None) -> None:
    """Bind request id into the log context."""
    if value is not None:
        structlog.contextvars.bind_contextvars(request_id=value)


def set_webhook_id(value: str | None) -> None:
    """Bind the id of the delivery being handled into the log context."""
    if value is not None:
        structlog.contextvars.bind_contextvars(webhook_id=value)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an id for log correlation.

    A caller-supplied id is reused; otherwise a random one is minted. The id
    is echoed on the response and the log context is cleared after each request.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self._header_name) or uuid.uuid4().hex
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        set_request_id(request_id)

        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.clear_contextvars()

        response.headers.setdefault(self._header_name, request_id)
        return response
