"""
stdwebhooks: Standard Webhooks signing and verification.

HMAC-SHA256 signatures over ``{id}.{timestamp}.{payload}``, a replay window
on the delivery timestamp, and multi-signature headers for key rotation.
"""

from stdwebhooks.signing import generate_secret
from stdwebhooks.verifier import (
    HEADER_ID,
    HEADER_SIGNATURE,
    HEADER_TIMESTAMP,
    ErrorKind,
    WebhookVerificationError,
    WebhookVerifier,
    normalize_headers,
)

__version__ = "1.0.0"

__all__ = [
    "HEADER_ID",
    "HEADER_SIGNATURE",
    "HEADER_TIMESTAMP",
    "ErrorKind",
    "WebhookVerificationError",
    "WebhookVerifier",
    "generate_secret",
    "normalize_headers",
]
