"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

import httpx

from rally_notifier.core.config import Settings, get_settings
from rally_notifier.security.keychain import KeychainStore

_STORE: KeychainStore | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_credential_store() -> KeychainStore:
    global _STORE
    if _STORE is None:
        _STORE = KeychainStore()
    return _STORE


def get_relay_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outbound relay calls; ``None`` selects the httpx default."""
    return None


__all__ = [
    "get_app_settings",
    "get_credential_store",
    "get_relay_transport",
]
