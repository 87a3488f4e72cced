"""Tests for the pass-through HTTP relay."""

from __future__ import annotations

import httpx
import pytest

from rally_notifier.core.errors import BodyReadError, InvalidMethod, TargetNotAllowed, TransportError
from rally_notifier.core.metrics import REGISTRY
from rally_notifier.relay import (
    AUTH_HEADER,
    RelayRequest,
    RelayResponse,
    check_target,
    parse_method,
    relay,
    relay_webhook,
)
from rally_notifier.security.keychain import KeychainStore

RALLY_URL = "https://rally1.rallydev.com/slm/webservice/v2.0/user?pagesize=1"


class Recorder:
    """MockTransport handler that records requests and replies with a canned response."""

    def __init__(self, status: int = 200, text: str = "{}") -> None:
        self.status = status
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, text=self.text)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class FailingStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b'{"partial": '
        raise httpx.ReadError("connection reset while reading body")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("GET", "GET"), ("get", "GET"), ("Post", "POST"), ("delete", "DELETE"), ("PROPFIND", "PROPFIND"), ("x-Custom", "x-Custom")],
)
def test_parse_method_accepts_tokens(raw: str, expected: str) -> None:
    assert parse_method(raw) == expected


@pytest.mark.parametrize("raw", ["", " ", "GET ", "G ET", "GET\n", "PO(ST", "GÉT"])
def test_parse_method_rejects_malformed(raw: str) -> None:
    with pytest.raises(InvalidMethod):
        parse_method(raw)


@pytest.mark.asyncio
async def test_get_without_body_sends_no_body() -> None:
    recorder = Recorder(text='{"QueryResult": {"Results": []}}')
    result = await relay(RelayRequest(url=RALLY_URL, method="GET", api_key="k"), transport=recorder.transport)

    assert result == RelayResponse(status=200, body='{"QueryResult": {"Results": []}}')
    sent = recorder.requests[0]
    assert sent.method == "GET"
    assert sent.content == b""
    assert "content-length" not in sent.headers


@pytest.mark.asyncio
async def test_post_without_body_is_not_given_one() -> None:
    recorder = Recorder()
    await relay(RelayRequest(url=RALLY_URL, method="post", api_key="k"), transport=recorder.transport)
    assert recorder.requests[0].method == "POST"
    assert recorder.requests[0].content == b""


@pytest.mark.asyncio
async def test_body_and_headers_are_forwarded() -> None:
    recorder = Recorder()
    payload = '{"find": {"_TypeHierarchy": "HierarchicalRequirement"}}'
    await relay(
        RelayRequest(url=RALLY_URL, method="POST", body=payload, api_key="_abc-123"),
        transport=recorder.transport,
    )
    sent = recorder.requests[0]
    assert sent.content == payload.encode("utf-8")
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.headers[AUTH_HEADER] == "_abc-123"
    assert str(sent.url) == RALLY_URL


@pytest.mark.asyncio
async def test_auth_header_ignores_stored_key() -> None:
    KeychainStore().set("stored-key")
    recorder = Recorder()
    await relay(RelayRequest(url=RALLY_URL, method="GET", api_key="caller-key"), transport=recorder.transport)
    assert recorder.requests[0].headers[AUTH_HEADER] == "caller-key"


@pytest.mark.asyncio
@pytest.mark.parametrize(("status", "text"), [(404, "not found"), (401, ""), (503, "<html>down</html>")])
async def test_non_2xx_is_returned_not_raised(status: int, text: str) -> None:
    recorder = Recorder(status=status, text=text)
    result = await relay(RelayRequest(url=RALLY_URL, method="GET", api_key="k"), transport=recorder.transport)
    assert result == RelayResponse(status=status, body=text)


@pytest.mark.asyncio
async def test_invalid_method_makes_no_call() -> None:
    recorder = Recorder()
    with pytest.raises(InvalidMethod):
        await relay(RelayRequest(url=RALLY_URL, method="", api_key="k"), transport=recorder.transport)
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_unreachable_host_is_transport_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    with pytest.raises(TransportError, match="Connection refused") as excinfo:
        await relay(
            RelayRequest(url="https://nowhere.invalid/", method="GET", api_key="k"),
            transport=httpx.MockTransport(refuse),
        )
    assert excinfo.value.kind == "TransportError"


@pytest.mark.asyncio
async def test_relative_url_is_transport_error() -> None:
    with pytest.raises(TransportError):
        await relay(RelayRequest(url="/slm/webservice/v2.0/user", method="GET", api_key="k"))


@pytest.mark.asyncio
async def test_body_read_failure_is_body_read_error() -> None:
    def broken_body(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=FailingStream())

    with pytest.raises(BodyReadError, match="connection reset"):
        await relay(
            RelayRequest(url=RALLY_URL, method="GET", api_key="k"),
            transport=httpx.MockTransport(broken_body),
        )


@pytest.mark.asyncio
async def test_webhook_posts_default_body_without_auth() -> None:
    recorder = Recorder(status=202, text="1")
    url = "https://example.webhook.office.com/webhookb2/abc"
    result = await relay_webhook(url, transport=recorder.transport)

    assert result == RelayResponse(status=202, body="1")
    sent = recorder.requests[0]
    assert sent.method == "POST"
    assert sent.content == b"{}"
    assert AUTH_HEADER not in sent.headers


def test_check_target_allows_suffix_hosts() -> None:
    check_target(RALLY_URL, ["rallydev.com"])
    check_target("https://rallydev.com/", ["rallydev.com"])


@pytest.mark.parametrize(
    "url",
    [
        "http://rally1.rallydev.com/slm",
        "https://evilrallydev.com/slm",
        "https://rallydev.com.attacker.net/",
        "not a url",
        "https://[::1/x",
    ],
)
def test_check_target_rejects(url: str) -> None:
    with pytest.raises(TargetNotAllowed):
        check_target(url, ["rallydev.com"])


def test_check_target_http_allowed_when_not_required() -> None:
    check_target("http://rally1.rallydev.com/slm", ["rallydev.com"], require_https=False)


def _latency_count(target: str) -> float:
    return REGISTRY.get_sample_value("rntf_relay_latency_seconds_count", {"target": target}) or 0.0


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["https://[::1/x", "https://[not-an-ip]/slm"])
async def test_malformed_url_is_transport_error(url: str) -> None:
    recorder = Recorder()
    with pytest.raises(TransportError):
        await relay(RelayRequest(url=url, method="GET", api_key="k"), transport=recorder.transport)
    assert recorder.requests == []


@pytest.mark.asyncio
async def test_latency_is_recorded_for_transport_failures() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    before = _latency_count("rally")
    with pytest.raises(TransportError):
        await relay(
            RelayRequest(url=RALLY_URL, method="GET", api_key="k"),
            transport=httpx.MockTransport(refuse),
        )
    assert _latency_count("rally") == before + 1
