"""Single-shot HTTP relay with caller-supplied Rally credentials."""

from __future__ import annotations

import re
import time
from urllib.parse import urlsplit

import httpx

from rally_notifier.core.errors import BodyReadError, InvalidMethod, TransportError
from rally_notifier.core.logging import get_logger
from rally_notifier.core.metrics import RELAY_COUNT, RELAY_LATENCY
from rally_notifier.relay.types import RelayRequest, RelayResponse

AUTH_HEADER = "ZSESSIONID"
CONTENT_TYPE = "application/json"
WEBHOOK_DEFAULT_BODY = "{}"

STANDARD_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"}
)
TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

logger = get_logger(__name__)


def parse_method(method: str) -> str:
    """Validate an HTTP method token.

    Standard verbs are accepted in any casing and upper-cased; extension
    tokens are case-sensitive and returned unchanged.
    """
    if not method or not TOKEN_RE.fullmatch(method):
        raise InvalidMethod(f"Invalid HTTP method: {method!r}")
    upper = method.upper()
    if upper in STANDARD_METHODS:
        return upper
    return method


def build_headers(api_key: str) -> dict[str, str]:
    return {"Content-Type": CONTENT_TYPE, AUTH_HEADER: api_key}


async def relay(
    request: RelayRequest,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RelayResponse:
    """Perform exactly one outbound call and return its raw status and body.

    Any received status, 4xx and 5xx included, is a successful relay. Only
    transport failures and body read failures raise.
    """
    method = parse_method(request.method)
    headers = build_headers(request.api_key)
    return await _dispatch("rally", method, request.url, headers, request.body, transport)


async def relay_webhook(
    url: str,
    body: str | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> RelayResponse:
    """POST a JSON payload to an incoming webhook without any auth header."""
    headers = {"Content-Type": CONTENT_TYPE}
    payload = body if body is not None else WEBHOOK_DEFAULT_BODY
    return await _dispatch("webhook", "POST", url, headers, payload, transport)


async def _dispatch(
    target: str,
    method: str,
    url: str,
    headers: dict[str, str],
    body: str | None,
    transport: httpx.AsyncBaseTransport | None,
) -> RelayResponse:
    host = _host_of(url)
    started = time.perf_counter()
    try:
        async with httpx.AsyncClient(transport=transport) as client:
            try:
                outbound = client.build_request(method, url, headers=headers, content=body)
                response = await client.send(outbound, stream=True)
            except (httpx.RequestError, httpx.InvalidURL, ValueError) as exc:
                # ValueError: unparseable URL or non-ASCII header value.
                RELAY_COUNT.labels(target=target, outcome="transport_error").inc()
                logger.warning("Relay %s %s failed: %s", method, host, exc)
                raise TransportError(str(exc) or type(exc).__name__) from exc
            try:
                await response.aread()
            except httpx.HTTPError as exc:
                RELAY_COUNT.labels(target=target, outcome="body_error").inc()
                logger.warning("Relay %s %s body read failed: %s", method, host, exc)
                raise BodyReadError(str(exc) or type(exc).__name__) from exc
            finally:
                await response.aclose()
    finally:
        RELAY_LATENCY.labels(target=target).observe(time.perf_counter() - started)
    RELAY_COUNT.labels(target=target, outcome="ok").inc()
    logger.info(
        "Relay %s %s -> %s",
        method,
        host,
        response.status_code,
        extra={"ctx_status": response.status_code, "ctx_target": target},
    )
    return RelayResponse(status=response.status_code, body=response.text)


def _host_of(url: str) -> str:
    try:
        return urlsplit(url).hostname or "<none>"
    except ValueError:
        return "<invalid>"


__all__ = [
    "AUTH_HEADER",
    "build_headers",
    "parse_method",
    "relay",
    "relay_webhook",
]
