"""Pass-through HTTP relay components."""

from .client import AUTH_HEADER, build_headers, parse_method, relay, relay_webhook
from .targets import check_target
from .types import RelayRequest, RelayResponse

__all__ = [
    "AUTH_HEADER",
    "RelayRequest",
    "RelayResponse",
    "build_headers",
    "check_target",
    "parse_method",
    "relay",
    "relay_webhook",
]
