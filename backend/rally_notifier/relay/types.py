"""Relay request and response structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class RelayRequest:
    """One outbound call, built fresh by the caller and never persisted."""

    url: str
    method: str
    api_key: str = field(repr=False)
    body: str | None = None


@dataclass(slots=True)
class RelayResponse:
    """Raw upstream status and payload text; non-2xx statuses included."""

    status: int
    body: str
