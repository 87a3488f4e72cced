"""Error taxonomy shared by the credential store and the relay."""

from __future__ import annotations


class BridgeError(Exception):
    """Base failure surfaced to callers; branch on ``kind``, not on the message."""

    kind = "BridgeError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "message": self.message}


class StoreUnavailable(BridgeError):
    """The OS credential facility could not be opened."""

    kind = "StoreUnavailable"


class StoreReadFailed(BridgeError):
    kind = "StoreReadFailed"


class StoreWriteFailed(BridgeError):
    kind = "StoreWriteFailed"


class InvalidMethod(BridgeError):
    """The relay request carried a malformed HTTP method token."""

    kind = "InvalidMethod"


class TransportError(BridgeError):
    """DNS, connection, TLS or transport timeout failure while relaying."""

    kind = "TransportError"


class BodyReadError(BridgeError):
    """The response payload could not be read after the status line arrived."""

    kind = "BodyReadError"


class TargetNotAllowed(BridgeError):
    """Relay target rejected by the service allowlist."""

    kind = "TargetNotAllowed"


__all__ = [
    "BridgeError",
    "StoreUnavailable",
    "StoreReadFailed",
    "StoreWriteFailed",
    "InvalidMethod",
    "TransportError",
    "BodyReadError",
    "TargetNotAllowed",
]
