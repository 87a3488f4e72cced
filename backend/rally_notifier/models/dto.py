"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ApiKeyPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str = Field(alias="apiKey", repr=False)


class ApiKeyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_key: str | None = Field(default=None, alias="apiKey", repr=False)


class ApiKeyStatus(BaseModel):
    present: bool


class RallyRequestBody(BaseModel):
    """Wire shape of a relay call; ``apiKey`` is supplied by the caller every time."""

    model_config = ConfigDict(populate_by_name=True)

    url: str
    method: str = "GET"
    body: str | None = None
    api_key: str = Field(alias="apiKey", repr=False)


class WebhookRequestBody(BaseModel):
    url: str
    body: str | None = None


class RelayResponseBody(BaseModel):
    status: int
    body: str


class ErrorDetail(BaseModel):
    kind: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


__all__ = [
    "ApiKeyPayload",
    "ApiKeyResponse",
    "ApiKeyStatus",
    "RallyRequestBody",
    "WebhookRequestBody",
    "RelayResponseBody",
    "ErrorDetail",
    "ErrorResponse",
]
