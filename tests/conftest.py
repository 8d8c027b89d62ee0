"""Pytest configuration and fixtures."""

import json

import pytest

from stdwebhooks.common.settings import Settings
from stdwebhooks.verifier import WebhookVerifier

TEST_SECRET = "whsec_MfKQ9r4OrbVlYAKE4QxSvsCUQvxgwauQ"
TEST_RAW_SECRET = "test_secret"


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    """Keep ambient environment out of Settings."""
    for name in (
        "STDWEBHOOKS_WEBHOOK_SECRET",
        "STDWEBHOOKS_WEBHOOK_SECRET_RAW",
        "STDWEBHOOKS_WEBHOOK_TOLERANCE_SECONDS",
        "STDWEBHOOKS_WEBHOOK_PATHS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        webhook_secret=TEST_SECRET,
        webhook_tolerance_seconds=300,
        webhook_paths=("/webhooks",),
    )


@pytest.fixture
def verifier() -> WebhookVerifier:
    """Verifier built from a whsec_ secret."""
    return WebhookVerifier(TEST_SECRET)


@pytest.fixture
def raw_verifier() -> WebhookVerifier:
    """Verifier built from raw key material."""
    return WebhookVerifier.from_raw(TEST_RAW_SECRET)


@pytest.fixture
def payload() -> str:
    """Sample webhook body."""
    return json.dumps({"event": "test_event"})
