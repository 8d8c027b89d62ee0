"""Standard Webhooks signature verification."""

from __future__ import annotations

import json
import time
from collections.abc import Mapping
from enum import Enum
from typing import Any

from stdwebhooks.common.logging import get_logger
from stdwebhooks.signing import (
    SIGNATURE_VERSION,
    build_message,
    compute_digest,
    decode_secret,
    digests_match,
    format_signature,
    parse_signature_header,
)

logger = get_logger(__name__)

HEADER_ID = "webhook-id"
HEADER_TIMESTAMP = "webhook-timestamp"
HEADER_SIGNATURE = "webhook-signature"
REQUIRED_HEADERS = (HEADER_ID, HEADER_TIMESTAMP, HEADER_SIGNATURE)

DEFAULT_TOLERANCE = 300
MISSING_HEADERS_MESSAGE = "missing required webhook headers"


class ErrorKind(str, Enum):
    """Kind of verification failure."""

    ARGUMENT = "argument"
    TIMESTAMP = "timestamp"
    SIGNATURE = "signature"


class WebhookVerificationError(Exception):
    """Webhook verification error tagged with its kind."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


def normalize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Lowercase header names of a plain mapping."""
    return {key.lower(): value for key, value in headers.items()}


class WebhookVerifier:
    """
    Signs and verifies webhook deliveries.

    The secret is decoded once here; ``sign`` and ``verify`` only read it,
    so one instance can be shared across threads and tasks.
    """

    def __init__(self, secret: str | bytes, tolerance: int = DEFAULT_TOLERANCE) -> None:
        """
        Args:
            secret: ``whsec_``-prefixed (or bare) base64 secret. Bytes are
                taken as raw key material.
            tolerance: Allowed clock skew in seconds, in either direction.

        Raises:
            WebhookVerificationError: ARGUMENT if the secret cannot be decoded
                or is empty, or if tolerance is negative.
        """
        if isinstance(secret, bytes):
            key = secret
        else:
            try:
                key = decode_secret(secret)
            except ValueError as e:
                raise WebhookVerificationError(
                    ErrorKind.ARGUMENT, "invalid webhook secret"
                ) from e

        if not key:
            raise WebhookVerificationError(ErrorKind.ARGUMENT, "invalid webhook secret")

        if tolerance < 0:
            raise WebhookVerificationError(ErrorKind.ARGUMENT, "tolerance must not be negative")

        self._key = key
        self._tolerance = tolerance

    @classmethod
    def from_raw(cls, secret: str | bytes, tolerance: int = DEFAULT_TOLERANCE) -> WebhookVerifier:
        """Create a verifier from raw (already decoded) key material."""
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        return cls(secret, tolerance=tolerance)

    @property
    def tolerance(self) -> int:
        return self._tolerance

    def sign(self, msg_id: str, timestamp: int, payload: str | bytes) -> str:
        """
        Sign a message.

        Returns:
            Signature in the form ``v1,<base64 digest>``

        Raises:
            WebhookVerificationError: SIGNATURE if timestamp is not a
                positive integer
        """
        if isinstance(timestamp, bool) or not isinstance(timestamp, int) or timestamp <= 0:
            raise WebhookVerificationError(ErrorKind.SIGNATURE, "invalid timestamp")

        if isinstance(payload, str):
            payload = payload.encode("utf-8")

        message = build_message(msg_id, timestamp, payload)
        return format_signature(compute_digest(self._key, message))

    def sign_headers(self, msg_id: str, timestamp: int, payload: str | bytes) -> dict[str, str]:
        """Build the headers for an outgoing delivery."""
        return {
            HEADER_ID: msg_id,
            HEADER_TIMESTAMP: str(timestamp),
            HEADER_SIGNATURE: self.sign(msg_id, timestamp, payload),
        }

    def verify_timestamp(self, timestamp_header: str | int) -> int:
        """
        Check a ``webhook-timestamp`` value against the tolerance window.

        The window is closed: ``now - tolerance <= timestamp <= now + tolerance``.

        Raises:
            WebhookVerificationError: TIMESTAMP if the value is malformed or
                outside the window
        """
        value = str(timestamp_header)
        if not (value.isascii() and value.isdigit()):
            raise WebhookVerificationError(ErrorKind.TIMESTAMP, "invalid timestamp format")
        try:
            timestamp = int(value, 10)
        except ValueError as e:
            # Digit strings past the interpreter's int conversion limit
            raise WebhookVerificationError(ErrorKind.TIMESTAMP, "invalid timestamp format") from e

        now = int(time.time())
        if timestamp < now - self._tolerance:
            raise WebhookVerificationError(ErrorKind.TIMESTAMP, "message timestamp too old")
        if timestamp > now + self._tolerance:
            raise WebhookVerificationError(ErrorKind.TIMESTAMP, "message timestamp too new")

        return timestamp

    def verify(self, payload: str | bytes, headers: Mapping[str, str]) -> Any:
        """
        Verify a delivery and return its decoded JSON payload.

        Args:
            payload: Raw request body, exactly as received
            headers: Mapping holding the three ``webhook-*`` headers

        Returns:
            The payload decoded from JSON

        Raises:
            WebhookVerificationError: ARGUMENT for missing headers or a
                non-JSON payload, TIMESTAMP for a stale or malformed
                timestamp, SIGNATURE when no ``v1`` signature matches
        """
        if any(headers.get(name) is None for name in REQUIRED_HEADERS):
            raise WebhookVerificationError(
                ErrorKind.ARGUMENT, MISSING_HEADERS_MESSAGE
            )

        msg_id = headers[HEADER_ID]
        try:
            timestamp = self.verify_timestamp(headers[HEADER_TIMESTAMP])
        except WebhookVerificationError as e:
            logger.warning("Webhook timestamp rejected", webhook_id=msg_id, reason=e.message)
            raise

        expected = self.sign(msg_id, timestamp, payload).split(",", 1)[1]

        for version, digest in parse_signature_header(headers[HEADER_SIGNATURE]):
            if version != SIGNATURE_VERSION:
                continue
            if digests_match(expected, digest):
                logger.debug("Webhook verified", webhook_id=msg_id)
                return self._decode(payload)

        logger.warning("Webhook signature mismatch", webhook_id=msg_id)
        raise WebhookVerificationError(ErrorKind.SIGNATURE, "no matching signature found")

    @staticmethod
    def _decode(payload: str | bytes) -> Any:
        try:
            return json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise WebhookVerificationError(
                ErrorKind.ARGUMENT, "payload is not valid JSON"
            ) from e
