"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

REQUEST_COUNT = Counter(
    "rntf_requests_total",
    "Total HTTP requests served by the bridge",
    labelnames=("endpoint", "method", "status"),
    registry=REGISTRY,
)

RELAY_COUNT = Counter(
    "rntf_relay_total",
    "Relayed upstream calls by outcome",
    labelnames=("target", "outcome"),
    registry=REGISTRY,
)

RELAY_LATENCY = Histogram(
    "rntf_relay_latency_seconds",
    "Latency of relayed upstream calls",
    labelnames=("target",),
    registry=REGISTRY,
)

STORE_OPS = Counter(
    "rntf_credential_store_ops_total",
    "Credential store operations by outcome",
    labelnames=("operation", "outcome"),
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "REQUEST_COUNT",
    "RELAY_COUNT",
    "RELAY_LATENCY",
    "STORE_OPS",
    "metrics_response",
]
