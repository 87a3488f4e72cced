"""Credential routes backed by the OS keychain."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from rally_notifier.api.dependencies import get_credential_store
from rally_notifier.models.dto import ApiKeyPayload, ApiKeyResponse, ApiKeyStatus, ErrorResponse
from rally_notifier.security.keychain import KeychainStore

router = APIRouter()

_ERRORS = {500: {"model": ErrorResponse}, 503: {"model": ErrorResponse}}


# Handlers are sync so keychain calls run in the threadpool.
@router.get("", response_model=ApiKeyResponse, responses=_ERRORS, summary="Read the stored API key")
def get_api_key(store: KeychainStore = Depends(get_credential_store)) -> ApiKeyResponse:
    return ApiKeyResponse(api_key=store.get())


@router.put("", status_code=204, responses=_ERRORS, summary="Store or replace the API key")
def set_api_key(
    request: ApiKeyPayload,
    store: KeychainStore = Depends(get_credential_store),
) -> Response:
    store.set(request.api_key)
    return Response(status_code=204)


@router.delete("", status_code=204, responses=_ERRORS, summary="Remove the API key")
def delete_api_key(store: KeychainStore = Depends(get_credential_store)) -> Response:
    store.delete()
    return Response(status_code=204)


@router.get("/status", response_model=ApiKeyStatus, responses=_ERRORS, summary="Whether an API key is stored")
def api_key_status(store: KeychainStore = Depends(get_credential_store)) -> ApiKeyStatus:
    return ApiKeyStatus(present=store.has())


__all__ = ["router"]
