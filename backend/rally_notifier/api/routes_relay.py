"""Relay routes: pass-through calls to Rally and to Teams webhooks."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends

from rally_notifier.api.dependencies import get_app_settings, get_relay_transport
from rally_notifier.core.config import Settings
from rally_notifier.models.dto import ErrorResponse, RallyRequestBody, RelayResponseBody, WebhookRequestBody
from rally_notifier.relay import RelayRequest, check_target, parse_method, relay, relay_webhook

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.post("/rally/request", response_model=RelayResponseBody, responses=_ERRORS, summary="Relay a Rally API call")
async def rally_request(
    request: RallyRequestBody,
    settings: Settings = Depends(get_app_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_relay_transport),
) -> RelayResponseBody:
    parse_method(request.method)
    check_target(request.url, settings.rally_hosts, settings.require_https)
    result = await relay(
        RelayRequest(url=request.url, method=request.method, body=request.body, api_key=request.api_key),
        transport=transport,
    )
    return RelayResponseBody(status=result.status, body=result.body)


@router.post("/teams/request", response_model=RelayResponseBody, responses=_ERRORS, summary="Relay a Teams webhook post")
async def teams_request(
    request: WebhookRequestBody,
    settings: Settings = Depends(get_app_settings),
    transport: httpx.AsyncBaseTransport | None = Depends(get_relay_transport),
) -> RelayResponseBody:
    check_target(request.url, settings.teams_hosts, settings.require_https)
    result = await relay_webhook(request.url, request.body, transport=transport)
    return RelayResponseBody(status=result.status, body=result.body)


__all__ = ["router"]
