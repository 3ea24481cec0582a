from __future__ import annotations

import json
from pathlib import Path

import typer
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential_jitter

from sunvoy_client.application.ports.session_store_port import SessionStorePort
from sunvoy_client.application.use_cases.ensure_session import SessionManager
from sunvoy_client.application.use_cases.fetch_account_data import FetchAccountDataUseCase
from sunvoy_client.config import Settings, settings
from sunvoy_client.domain.errors import NetworkError, SunvoyError
from sunvoy_client.domain.model import AccountSnapshot
from sunvoy_client.domain.signing import RequestSigner
from sunvoy_client.infrastructure.adapters.http.httpx_client import HttpxClient
from sunvoy_client.infrastructure.adapters.session.json_store import JsonFileSessionStore
from sunvoy_client.infrastructure.adapters.session.memory_store import InMemorySessionStore
from sunvoy_client.infrastructure.adapters.session.sqlite_store import SQLiteSessionStore
from sunvoy_client.infrastructure.adapters.sunvoy.account_api import SunvoyAccountApi
from sunvoy_client.infrastructure.adapters.sunvoy.login_consumer import SunvoyLoginConsumer
from sunvoy_client.infrastructure.adapters.sunvoy.token_extractor import HiddenInputTokenExtractor
from sunvoy_client.logging_setup import configure_logging

app = typer.Typer(help="Sunvoy session + signed account data CLI")


def build_store(cfg: Settings) -> SessionStorePort:
    backend = cfg.session_backend.lower()
    if backend == "json":
        return JsonFileSessionStore(cfg.session_file)
    if backend == "sqlite":
        return SQLiteSessionStore(cfg.session_file)
    if backend == "memory":
        return InMemorySessionStore()
    raise typer.BadParameter(f"unknown SESSION_BACKEND {cfg.session_backend!r}")


def build_session_manager(cfg: Settings, http: HttpxClient) -> SessionManager:
    # Single HttpxClient shared by login, probe and data calls so the cookie jar stays unified
    consumer = SunvoyLoginConsumer(http=http, base_url=cfg.base_url, api_url=cfg.api_url)
    return SessionManager(http=http, store=build_store(cfg), consumer=consumer, credentials=cfg.credentials())


def _fetch_once(cfg: Settings) -> AccountSnapshot:
    with HttpxClient(timeout=cfg.http_timeout) as http:
        manager = build_session_manager(cfg, http)
        use_case = FetchAccountDataUseCase(
            manager=manager,
            api_factory=lambda h: SunvoyAccountApi(h, base_url=cfg.base_url, api_url=cfg.api_url),
            extractor=HiddenInputTokenExtractor(),
            signer=RequestSigner(cfg.signing_secret),
        )
        return use_case.execute()


@app.callback()
def main() -> None:
    configure_logging(settings.log_level)


@app.command()
def login() -> None:
    """Force a fresh login and persist the session."""
    with HttpxClient(timeout=settings.http_timeout) as http:
        result = build_session_manager(settings, http).login()
    if not result.ok:
        typer.echo(f"Login failed: {result.message}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"{result.status}: {result.message}")


@app.command()
def status() -> None:
    """Report whether a stored session exists and is still accepted."""
    with HttpxClient(timeout=settings.http_timeout) as http:
        manager = build_session_manager(settings, http)
        if not manager.restore():
            typer.echo("No stored session")
            raise typer.Exit(code=1)
        valid = manager.is_session_valid()
    typer.echo(f"Stored session: {len(manager.session)} cookies, {'valid' if valid else 'expired'}")
    if not valid:
        raise typer.Exit(code=1)


@app.command()
def fetch(
    output: Path = typer.Option(Path("users.json"), "--output", "-o"),
    retries: int = typer.Option(0, "--retries", "-r", min=0, help="Re-run the whole flow on network errors"),
) -> None:
    """Ensure a session, fetch users plus the signed current user, write them as JSON."""
    try:
        for attempt in Retrying(
            reraise=True,
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential_jitter(initial=1, max=8),
            retry=retry_if_exception_type(NetworkError),
        ):
            with attempt:
                snapshot = _fetch_once(settings)
    except SunvoyError as e:
        typer.echo(f"{type(e).__name__}: {e}", err=True)
        raise typer.Exit(code=1)

    records = snapshot.to_records()
    output.write_text(json.dumps(records, indent=2), encoding="utf-8")
    typer.echo(f"Wrote {len(records)} users to {output}")


@app.command()
def clear() -> None:
    """Remove the persisted session snapshot."""
    try:
        build_store(settings).clear()
    except SunvoyError as e:
        typer.echo(f"{type(e).__name__}: {e}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Session cleared")


if __name__ == "__main__":
    app()
