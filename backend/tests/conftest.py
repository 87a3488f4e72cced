"""Test fixtures for the Rally Notifier bridge."""

from __future__ import annotations

import sys
from pathlib import Path

import keyring
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import PasswordDeleteError

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))


class MemoryKeyring(KeyringBackend):
    """Process-local keyring backend so tests never touch the real keychain."""

    priority = 1

    def __init__(self) -> None:
        super().__init__()
        self.entries: dict[tuple[str, str], str] = {}

    def get_password(self, service: str, username: str) -> str | None:
        return self.entries.get((service, username))

    def set_password(self, service: str, username: str, password: str) -> None:
        self.entries[(service, username)] = password

    def delete_password(self, service: str, username: str) -> None:
        try:
            del self.entries[(service, username)]
        except KeyError:
            raise PasswordDeleteError("Password not found") from None


@pytest.fixture(autouse=True)
def memory_keyring() -> MemoryKeyring:
    """Install an in-memory keyring backend for the duration of a test."""
    previous = keyring.get_keyring()
    backend = MemoryKeyring()
    keyring.set_keyring(backend)
    yield backend
    keyring.set_keyring(previous)


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.setenv("RNTF_CONFIG", str(tmp_path / "missing.yaml"))

    from rally_notifier.api import dependencies as deps
    from rally_notifier.core.config import get_settings

    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._STORE = None
    yield
    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._STORE = None
