"""Allowlist checks applied at the service boundary before relaying."""

from __future__ import annotations

from typing import Iterable
from urllib.parse import urlsplit

from rally_notifier.core.errors import TargetNotAllowed


def host_matches(hostname: str, suffixes: Iterable[str]) -> bool:
    hostname = hostname.lower().rstrip(".")
    for suffix in suffixes:
        suffix = suffix.lower().strip(".")
        if hostname == suffix or hostname.endswith(f".{suffix}"):
            return True
    return False


def check_target(url: str, allowed_suffixes: Iterable[str], require_https: bool = True) -> None:
    """Raise ``TargetNotAllowed`` unless ``url`` points at an allowed host."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as exc:
        raise TargetNotAllowed(f"Malformed URL {url!r}: {exc}") from exc
    if require_https and parts.scheme != "https":
        raise TargetNotAllowed(f"Only https URLs are allowed: {url}")
    if not hostname or not host_matches(hostname, allowed_suffixes):
        raise TargetNotAllowed(f"Host not allowed: {hostname or url}")


__all__ = ["check_target", "host_matches"]
