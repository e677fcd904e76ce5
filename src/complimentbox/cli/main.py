"""complimentbox CLI — make a code, send compliments, read your inbox.

Usage:
    complimentbox new-code                       # Fresh code + share link
    complimentbox send K3XQ9A "you are great"    # Send an anonymous compliment
    complimentbox history K3XQ9A                 # Everything K3XQ9A received
    complimentbox serve --port 8000              # Run the API server
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from datetime import datetime

import click
import httpx

from complimentbox import __version__
from complimentbox.codes import generate_code

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_FRONTEND_URL = "http://localhost:5173"


def _api_url() -> str:
    return os.environ.get("COMPLIMENTS_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the complimentbox backend."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Offloads to a thread when an event loop is already running (e.g. when
    invoked via CliRunner inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _format_time(value: str | None) -> str:
    if not value:
        return "just now"
    try:
        return datetime.fromisoformat(value).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return value


def _fail(response: httpx.Response) -> None:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = response.text
    click.secho(f"Error ({response.status_code}): {detail}", fg="red", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="complimentbox")
def main():
    """complimentbox — anonymous compliments, delivered live."""


# ---------------------------------------------------------------------------
# complimentbox new-code
# ---------------------------------------------------------------------------


@main.command("new-code")
@click.option(
    "--frontend-url",
    envvar="COMPLIMENTS_FRONTEND_URL",
    default=DEFAULT_FRONTEND_URL,
    show_default=True,
    help="Where the web client is served (used for the share link)",
)
def new_code(frontend_url: str):
    """Generate a recipient code and the link to share with senders.

    Codes are not reserved anywhere: if someone else picks the same code,
    you share an inbox.
    """
    code = generate_code()
    click.echo("Your code: ", nl=False)
    click.secho(code, bold=True)
    click.echo(f"Share this link: {frontend_url.rstrip('/')}?code={code}")


# ---------------------------------------------------------------------------
# complimentbox send
# ---------------------------------------------------------------------------


@main.command()
@click.argument("code")
@click.argument("message")
def send(code: str, message: str):
    """Send an anonymous compliment to CODE."""
    _run(_send_impl(code, message))


async def _send_impl(code: str, message: str):
    async with _client() as c:
        r = await c.post(
            "/api/compliments",
            json={"recipientCode": code, "message": message},
        )
    if r.status_code != 201:
        _fail(r)
    compliment = r.json()
    click.secho(
        f"Compliment #{compliment['id']} sent to {compliment['recipient_code']}",
        fg="green",
    )


# ---------------------------------------------------------------------------
# complimentbox history
# ---------------------------------------------------------------------------


@main.command()
@click.argument("code")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
def history(code: str, as_json: bool):
    """Show every compliment CODE has received, newest first."""
    _run(_history_impl(code, as_json))


async def _history_impl(code: str, as_json: bool):
    async with _client() as c:
        r = await c.get(f"/api/compliments/{code}")
    if r.status_code != 200:
        _fail(r)
    compliments = r.json()["compliments"]

    if as_json:
        click.echo(_pretty_json(compliments))
        return

    if not compliments:
        click.secho(f"No compliments for {code.upper()} yet.", fg="yellow")
        return

    click.secho(f"{len(compliments)} compliment(s) for {code.upper()}:", bold=True)
    for c in compliments:
        click.echo(f"  {_format_time(c.get('created_at'))}  {c['message']}")


# ---------------------------------------------------------------------------
# complimentbox serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: COMPLIMENTS_HOST)")
@click.option("--port", default=None, type=int, help="Port (default: COMPLIMENTS_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API + WebSocket server with uvicorn."""
    import uvicorn

    from complimentbox.config import settings

    uvicorn.run(
        "complimentbox.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
