"""Logging utilities for the Rally Notifier bridge.

Every handler installed here carries ``SecretRedactionFilter`` so Rally API
keys never reach the log stream, whether they appear in the rendered message
(``ZSESSIONID: ...``, ``"apiKey": "..."``) or in ``ctx_*`` record extras.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from typing import Any

import orjson

_DEFAULT_LEVEL = os.environ.get("RNTF_LOG_LEVEL", "INFO").upper()

REDACTED = "***"
SECRET_FIELDS = ("apikey", "api_key", "zsessionid", "password", "secret")
_SECRET_RE = re.compile(
    r"""(?ix)
    (["']?(?:apiKey|api_key|ZSESSIONID)["']?\s*[:=]\s*["']?)
    ([^"'\s,}]+)
    """
)


def redact(text: str) -> str:
    """Mask values that follow a credential field name."""
    return _SECRET_RE.sub(lambda match: f"{match.group(1)}{REDACTED}", text)


def _is_secret_field(name: str) -> bool:
    lowered = name.lower()
    return any(field in lowered for field in SECRET_FIELDS)


class SecretRedactionFilter(logging.Filter):
    """Rewrite records in place so credentials are masked before formatting."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = None
        for key in list(record.__dict__):
            if key.startswith("ctx_") and _is_secret_field(key):
                setattr(record, key, REDACTED)
        return True


class JsonFormatter(logging.Formatter):
    """orjson formatter; ``ctx_*`` extras become top-level fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = redact(self.formatException(record.exc_info))
        payload.update({key: value for key, value in record.__dict__.items() if key.startswith("ctx_")})
        return orjson.dumps(payload, default=str).decode("utf-8")


def configure_logging(level: str | int = _DEFAULT_LEVEL, use_json: bool = True) -> None:
    """Install a single redacting stdout handler on the root logger."""
    logging.captureWarnings(True)
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(SecretRedactionFilter())
    if use_json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root.handlers = [handler]


def get_logger(name: str = "rally_notifier") -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


__all__ = [
    "REDACTED",
    "JsonFormatter",
    "SecretRedactionFilter",
    "configure_logging",
    "get_logger",
    "redact",
]
