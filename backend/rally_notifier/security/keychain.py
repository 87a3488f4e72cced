"""OS keychain access for the Rally API key.

A single secret lives under a fixed (service, account) pair. Reads always go
to the keyring backend so external edits to the keychain are never masked by
a stale in-process copy.
"""

from __future__ import annotations

import keyring
from keyring.errors import InitError, KeyringLocked, NoKeyringError, PasswordDeleteError

from rally_notifier.core.errors import StoreReadFailed, StoreUnavailable, StoreWriteFailed
from rally_notifier.core.logging import get_logger
from rally_notifier.core.metrics import STORE_OPS

SERVICE_NAME = "rally-notifier"
ACCOUNT_NAME = "rally-api-key"

_UNAVAILABLE = (NoKeyringError, InitError, KeyringLocked)

logger = get_logger(__name__)


class KeychainStore:
    """Single-entry credential cell backed by the active keyring backend."""

    def __init__(self, service_name: str = SERVICE_NAME, account_name: str = ACCOUNT_NAME) -> None:
        self.service_name = service_name
        self.account_name = account_name

    def set(self, value: str) -> None:
        """Store or overwrite the secret."""
        try:
            keyring.set_password(self.service_name, self.account_name, value)
        except _UNAVAILABLE as exc:
            self._record("set", "unavailable")
            raise StoreUnavailable(f"Credential store unavailable: {exc}") from exc
        except Exception as exc:  # noqa: BLE001 - backends raise their own types
            self._record("set", "error")
            raise StoreWriteFailed(f"Failed to store API key: {exc}") from exc
        self._record("set", "ok")
        logger.info("Stored API key in %s", _backend_name())

    def get(self) -> str | None:
        """Return the stored secret, or ``None`` when nothing is stored."""
        value = self._read("get")
        self._record("get", "ok" if value is not None else "absent")
        return value

    def delete(self) -> None:
        """Remove the secret; removing an absent secret succeeds."""
        try:
            keyring.delete_password(self.service_name, self.account_name)
        except _UNAVAILABLE as exc:
            self._record("delete", "unavailable")
            raise StoreUnavailable(f"Credential store unavailable: {exc}") from exc
        except PasswordDeleteError as exc:
            # Backends report a missing entry through PasswordDeleteError too.
            try:
                still_present = keyring.get_password(self.service_name, self.account_name) is not None
            except Exception as read_exc:  # noqa: BLE001
                self._record("delete", "error")
                raise StoreWriteFailed(f"Failed to delete API key: {exc}") from read_exc
            if still_present:
                self._record("delete", "error")
                raise StoreWriteFailed(f"Failed to delete API key: {exc}") from exc
            self._record("delete", "absent")
            logger.debug("No API key stored; delete is a no-op")
            return
        except Exception as exc:  # noqa: BLE001
            self._record("delete", "error")
            raise StoreWriteFailed(f"Failed to delete API key: {exc}") from exc
        self._record("delete", "ok")
        logger.info("Deleted API key from %s", _backend_name())

    def has(self) -> bool:
        return self._read("has") is not None

    def _read(self, operation: str) -> str | None:
        try:
            return keyring.get_password(self.service_name, self.account_name)
        except _UNAVAILABLE as exc:
            self._record(operation, "unavailable")
            raise StoreUnavailable(f"Credential store unavailable: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            self._record(operation, "error")
            raise StoreReadFailed(f"Failed to read API key: {exc}") from exc

    @staticmethod
    def _record(operation: str, outcome: str) -> None:
        STORE_OPS.labels(operation=operation, outcome=outcome).inc()


def _backend_name() -> str:
    return type(keyring.get_keyring()).__name__


_DEFAULT_STORE = KeychainStore()


def set_api_key(value: str) -> None:
    _DEFAULT_STORE.set(value)


def get_api_key() -> str | None:
    return _DEFAULT_STORE.get()


def delete_api_key() -> None:
    _DEFAULT_STORE.delete()


def has_api_key() -> bool:
    return _DEFAULT_STORE.has()


__all__ = [
    "ACCOUNT_NAME",
    "SERVICE_NAME",
    "KeychainStore",
    "set_api_key",
    "get_api_key",
    "delete_api_key",
    "has_api_key",
]
