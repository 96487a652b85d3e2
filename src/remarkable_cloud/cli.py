from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
import typer

from .client import RemarkableClient
from .exceptions import RemarkableError
from .logging import setup_logging
from .settings import RemarkableSettings, get_settings

app = typer.Typer(no_args_is_help=True, add_completion=False)

T = TypeVar("T")


def _build_client(settings: RemarkableSettings, device_token: Optional[str] = None) -> RemarkableClient:
    return RemarkableClient(device_token=device_token, settings=settings)


def _read_device_token(settings: RemarkableSettings) -> Optional[str]:
    if settings.device_token is not None:
        return settings.device_token.get_secret_value()
    path = settings.device_token_file
    if path.exists():
        return path.read_text(encoding="utf-8").strip() or None
    return None


def _write_device_token(path: Path, token: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(token, encoding="utf-8")
    path.chmod(0o600)


def _run(fn: Callable[[RemarkableClient], Awaitable[T]], *, authenticate: bool = True) -> T:
    settings = get_settings()
    setup_logging(settings)
    device_token = _read_device_token(settings) if authenticate else None
    if authenticate and not device_token:
        typer.echo("No device token found; run `register CODE` first.", err=True)
        raise typer.Exit(code=1)

    async def _main() -> T:
        async with _build_client(settings, device_token) as client:
            if authenticate:
                await client.refresh_token()
            return await fn(client)

    try:
        return asyncio.run(_main())
    except (RemarkableError, httpx.HTTPError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command("register")
def register(
        code: str = typer.Argument(..., help="One-time code from https://my.remarkable.com/device/desktop/connect"),
        device_desc: Optional[str] = typer.Option(None, help="Device description sent to the service"),
        device_id: Optional[str] = typer.Option(None, help="Override the host-derived device id"),
):
    """Pair this machine and store the device token."""
    path = get_settings().device_token_file

    async def _register(c: RemarkableClient) -> str:
        try:
            return await c.register(code, device_desc=device_desc, device_id=device_id)
        finally:
            # the pairing code is spent once a device token is issued
            if c.device_token:
                _write_device_token(path, c.device_token)

    _run(_register, authenticate=False)
    typer.echo(f"Registered. Device token saved to {path}")


@app.command("ls")
def list_items(
        doc: Optional[str] = typer.Option(None, help="Only show the item with this id"),
):
    """List remote items."""
    items = _run(lambda c: c.list_items(doc=doc, with_blob=False))
    for item in items:
        typer.echo(f"{item.id}\t{item.version}\t{item.type or '-'}\t{item.visible_name}")


@app.command("get")
def download(
        doc_id: str = typer.Argument(..., help="Item id"),
        output: Path = typer.Argument(..., help="Where to write the document zip"),
):
    """Download the stored container of an item."""
    data = _run(lambda c: c.download_blob(doc_id))
    output.write_bytes(data)
    typer.echo(f"Wrote {output} ({len(data)} bytes)")


@app.command("put")
def upload(
        file: Path = typer.Argument(..., exists=True, dir_okay=False, help="PDF to upload"),
        name: Optional[str] = typer.Option(None, help="Visible name (defaults to the file stem)"),
):
    """Upload a PDF document."""
    pdf = file.read_bytes()
    doc_id = _run(lambda c: c.upload_document(name or file.stem, pdf))
    typer.echo(doc_id)


@app.command("rm")
def delete(
        doc_id: str = typer.Argument(..., help="Item id"),
        version: int = typer.Argument(..., help="Current item version"),
):
    """Delete an item at the given version."""
    if not _run(lambda c: c.delete_item(doc_id, version)):
        typer.echo(f"Delete of {doc_id} rejected (stale version?)", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Deleted {doc_id}")


if __name__ == "__main__":
    app()
