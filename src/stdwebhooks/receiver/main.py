"""Receiver service - accepts signed webhook deliveries."""

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
import uvicorn

from stdwebhooks.common.auth import WebhookVerificationMiddleware, build_verifier
from stdwebhooks.common.http import RequestIdMiddleware
from stdwebhooks.common.logging import get_logger, setup_logging
from stdwebhooks.common.metrics import MetricsMiddleware, metrics_endpoint
from stdwebhooks.common.settings import Settings, get_settings
from stdwebhooks.verifier import WebhookVerifier

logger = get_logger(__name__)


async def handle_webhook(request: Request) -> JSONResponse:
    """Acknowledge a delivery that passed verification."""
    payload = getattr(request.state, "webhook", None)
    webhook_id = getattr(request.state, "webhook_id", None)

    event_type = payload.get("type") if isinstance(payload, dict) else None
    logger.info("Webhook accepted", event_type=event_type)

    return JSONResponse({"status": "accepted", "id": webhook_id})


async def handle_health(request: Request) -> JSONResponse:
    """Health check."""
    return JSONResponse({"status": "healthy"})


def create_app(
    settings: Settings | None = None,
    verifier: WebhookVerifier | None = None,
) -> Starlette:
    """Create the Starlette application."""
    settings = settings or get_settings()
    if verifier is None and settings.webhook_secret:
        verifier = build_verifier(settings)
    if verifier is None:
        logger.warning("No webhook secret configured; deliveries will be refused")

    routes = [Route(path, handle_webhook, methods=["POST"]) for path in settings.webhook_paths]
    routes += [
        Route("/health", handle_health, methods=["GET"]),
        Route("/metrics", metrics_endpoint, methods=["GET"]),
    ]

    app = Starlette(routes=routes)

    app.add_middleware(
        WebhookVerificationMiddleware,
        verifier=verifier,
        paths=settings.webhook_paths,
    )
    app.add_middleware(
        MetricsMiddleware,
        exclude_paths=["/health", "/metrics"],
    )
    app.add_middleware(RequestIdMiddleware)

    return app


def main() -> None:
    """Entry point for the receiver service."""
    settings = get_settings()
    setup_logging(settings.log_level, json_output=settings.log_json)
    app = create_app(settings)

    uvicorn.run(
        app,
        host=settings.receiver_host,
        port=settings.receiver_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
