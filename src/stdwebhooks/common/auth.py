"""Webhook verification middleware."""

from __future__ import annotations

import time
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from stdwebhooks.common.errors import ErrorCode, error_response, verification_error_response
from stdwebhooks.common.http import set_webhook_id
from stdwebhooks.common.logging import get_logger
from stdwebhooks.common.metrics import record_verification
from stdwebhooks.common.settings import Settings
from stdwebhooks.verifier import (
    HEADER_ID,
    ErrorKind,
    WebhookVerificationError,
    WebhookVerifier,
)

logger = get_logger(__name__)


def build_verifier(settings: Settings) -> WebhookVerifier:
    """Create a verifier from settings."""
    secret = settings.webhook_secret
    if not secret:
        raise WebhookVerificationError(ErrorKind.ARGUMENT, "webhook secret not configured")

    if settings.webhook_secret_raw:
        return WebhookVerifier.from_raw(secret, tolerance=settings.webhook_tolerance_seconds)
    return WebhookVerifier(secret, tolerance=settings.webhook_tolerance_seconds)


class WebhookVerificationMiddleware(BaseHTTPMiddleware):
    """Reject webhook requests that fail signature verification."""

    def __init__(
        self,
        app: ASGIApp,
        verifier: WebhookVerifier | None,
        paths: Iterable[str] = ("/webhooks",),
    ) -> None:
        super().__init__(app)
        self._verifier = verifier
        self._paths = set(paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path not in self._paths:
            return await call_next(request)

        if self._verifier is None:
            return error_response(
                ErrorCode.NOT_CONFIGURED,
                "webhook secret not configured",
                status_code=500,
            )

        webhook_id = request.headers.get(HEADER_ID)
        set_webhook_id(webhook_id)

        body = await request.body()
        start = time.perf_counter()
        try:
            payload = self._verifier.verify(body, request.headers)
        except WebhookVerificationError as exc:
            record_verification(exc.kind.value, time.perf_counter() - start)
            logger.warning(
                "Rejected webhook",
                kind=exc.kind.value,
                reason=exc.message,
                path=request.url.path,
            )
            return verification_error_response(exc)

        record_verification("verified", time.perf_counter() - start)
        request.state.webhook = payload
        request.state.webhook_id = webhook_id
        return await call_next(request)
