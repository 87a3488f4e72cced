"""CLI entrypoint for the Rally Notifier bridge."""

from __future__ import annotations

import json
import os
from typing import Optional

import requests
import typer

app = typer.Typer(name="rntf", help="Rally Notifier bridge command-line interface")
key_app = typer.Typer(name="key", help="Manage the stored Rally API key")
app.add_typer(key_app, name="key")

DEFAULT_HOST = "http://127.0.0.1:5174"
# RNTF_HOST belongs to Settings.host (the bind address).
BRIDGE_URL_ENV = "RNTF_BRIDGE_URL"


def _resolve_host(override: Optional[str]) -> str:
    if override:
        return override.rstrip('/')
    env_host = os.environ.get(BRIDGE_URL_ENV)
    if env_host:
        return env_host.rstrip('/')
    return DEFAULT_HOST


def _request(method: str, path: str, host: Optional[str] = None, **kwargs) -> requests.Response:
    base = _resolve_host(host)
    url = f"{base}{path}"
    try:
        resp = requests.request(method, url, timeout=60, **kwargs)
    except requests.ConnectionError as exc:
        typer.echo(f"Bridge not reachable at {base}: {exc}", err=True)
        raise typer.Exit(code=1)
    if not resp.ok:
        try:
            detail = resp.json()
        except ValueError:
            detail = resp.text
        typer.echo(f"Request failed ({resp.status_code}): {detail}", err=True)
        raise typer.Exit(code=1)
    return resp


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from config)"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port (default from config)"),
) -> None:
    """Run the bridge service."""
    import uvicorn

    from rally_notifier.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "rally_notifier.app:app",
        host=host or settings.host,
        port=port or settings.port,
        log_config=None,
    )


@key_app.command("set")
def set_key(
    api_key: str = typer.Option(..., "--api-key", prompt=True, hide_input=True, help="Rally API key"),
    host: Optional[str] = typer.Option(None, "--host", help="Override bridge host"),
) -> None:
    """Store or replace the API key."""
    _request("PUT", "/api-key", host=host, json={"apiKey": api_key})
    typer.echo(json.dumps({"status": "ok"}))


@key_app.command("get")
def get_key(
    reveal: bool = typer.Option(False, "--reveal", help="Print the key instead of a masked form"),
    host: Optional[str] = typer.Option(None, "--host", help="Override bridge host"),
) -> None:
    """Show the stored API key."""
    value = _request("GET", "/api-key", host=host).json().get("apiKey")
    if value is not None and not reveal:
        value = _mask(value)
    typer.echo(json.dumps({"apiKey": value}))


@key_app.command("delete")
def delete_key(
    host: Optional[str] = typer.Option(None, "--host", help="Override bridge host"),
) -> None:
    """Remove the stored API key."""
    _request("DELETE", "/api-key", host=host)
    typer.echo(json.dumps({"status": "ok"}))


@key_app.command("status")
def key_status(
    host: Optional[str] = typer.Option(None, "--host", help="Override bridge host"),
) -> None:
    """Report whether an API key is stored."""
    resp = _request("GET", "/api-key/status", host=host)
    typer.echo(json.dumps(resp.json()))


@app.command()
def request(
    url: str = typer.Argument(..., help="Absolute Rally URL"),
    method: str = typer.Option("GET", "--method", "-X", help="HTTP method"),
    body: Optional[str] = typer.Option(None, "--body", help="Raw request body"),
    api_key: Optional[str] = typer.Option(None, "--api-key", help="Use this key instead of the stored one"),
    host: Optional[str] = typer.Option(None, "--host", help="Override bridge host"),
) -> None:
    """Relay one request through the bridge and print the raw result."""
    if api_key is None:
        api_key = _request("GET", "/api-key", host=host).json().get("apiKey")
        if api_key is None:
            typer.echo("No API key stored; run 'rntf key set' first", err=True)
            raise typer.Exit(code=1)
    payload = {"url": url, "method": method, "body": body, "apiKey": api_key}
    resp = _request("POST", "/rally/request", host=host, json=payload)
    typer.echo(json.dumps(resp.json(), indent=2))


def _mask(value: str) -> str:
    if len(value) <= 8:
        return "*" * len(value)
    return f"{value[:4]}{'*' * (len(value) - 8)}{value[-4:]}"


if __name__ == "__main__":
    app()
