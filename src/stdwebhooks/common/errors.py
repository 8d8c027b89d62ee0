"""Shared error helpers and codes."""

from __future__ import annotations

from typing import Any

from starlette.responses import JSONResponse

from stdwebhooks.verifier import MISSING_HEADERS_MESSAGE, ErrorKind, WebhookVerificationError


class ErrorCode:
    MISSING_HEADERS = "missing_headers"
    INVALID_JSON = "invalid_json"
    INVALID_TIMESTAMP = "invalid_timestamp"
    INVALID_SIGNATURE = "invalid_signature"
    NOT_CONFIGURED = "not_configured"


_STATUS_BY_KIND = {
    ErrorKind.ARGUMENT: 400,
    ErrorKind.TIMESTAMP: 401,
    ErrorKind.SIGNATURE: 401,
}


def error_response(
    code: str,
    message: str,
    status_code: int,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Render an ``{"error": {...}}`` body with the given status."""
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse({"error": error}, status_code=status_code)


def status_for(kind: ErrorKind) -> int:
    """HTTP status for a verification error kind."""
    return _STATUS_BY_KIND[kind]


def code_for(exc: WebhookVerificationError) -> str:
    """Error code for a verification error."""
    if exc.kind is ErrorKind.TIMESTAMP:
        return ErrorCode.INVALID_TIMESTAMP
    if exc.kind is ErrorKind.SIGNATURE:
        return ErrorCode.INVALID_SIGNATURE
    if exc.message == MISSING_HEADERS_MESSAGE:
        return ErrorCode.MISSING_HEADERS
    return ErrorCode.INVALID_JSON


def verification_error_response(exc: WebhookVerificationError) -> JSONResponse:
    return error_response(
        code_for(exc),
        exc.message,
        status_for(exc.kind),
        details={"kind": exc.kind.value},
    )
