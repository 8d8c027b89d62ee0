"""HMAC signing utilities for Standard Webhooks."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import secrets

SECRET_PREFIX = "whsec_"
SIGNATURE_VERSION = "v1"


def decode_secret(secret: str) -> bytes:
    """Strip the ``whsec_`` prefix and base64-decode the remainder.

    Raises:
        ValueError: If the remainder is not valid base64.
    """
    if secret.startswith(SECRET_PREFIX):
        secret = secret[len(SECRET_PREFIX):]
    try:
        return base64.b64decode(secret, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Secret is not valid base64: {e}") from e


def generate_secret(num_bytes: int = 24) -> str:
    """Generate a new ``whsec_``-prefixed signing secret."""
    key = secrets.token_bytes(num_bytes)
    return SECRET_PREFIX + base64.b64encode(key).decode("ascii")


def build_message(msg_id: str, timestamp: int, payload: bytes) -> bytes:
    """Build the canonical ``{id}.{timestamp}.{payload}`` string."""
    return b".".join(
        [
            msg_id.encode("utf-8"),
            str(timestamp).encode("utf-8"),
            payload,
        ]
    )


def compute_digest(key: bytes, message: bytes) -> str:
    """Create a base64-encoded HMAC-SHA256 digest."""
    mac = hmac.new(key, message, hashlib.sha256).digest()
    return base64.b64encode(mac).decode("ascii")


def format_signature(digest: str, version: str = SIGNATURE_VERSION) -> str:
    return f"{version},{digest}"


def parse_signature_header(value: str) -> list[tuple[str, str]]:
    """
    Split a ``webhook-signature`` header into (version, digest) pairs.

    Entries without a comma are dropped. Versions are not filtered here.
    """
    entries: list[tuple[str, str]] = []
    for entry in value.split(" "):
        version, sep, digest = entry.partition(",")
        if not sep:
            continue
        entries.append((version, digest))
    return entries


def digests_match(expected: str, candidate: str) -> bool:
    """Compare two digests in constant time."""
    return hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))
