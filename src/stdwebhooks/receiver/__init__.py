"""Webhook receiver service."""

from stdwebhooks.receiver.main import create_app

__all__ = ["create_app"]
