"""CLI command modules."""

from __future__ import annotations

from typing import Any

import typer
from rich.console import Console

from flickr_reflect.auth.credentials import resolve_api_key

_console = Console()

KEY_OPTION = typer.Option(None, "--key", envvar="FLICKR_API_KEY", help="Flickr API key")
SECRET_OPTION = typer.Option(None, "--secret", envvar="FLICKR_API_SECRET", help="Shared secret for signed calls")


def get_client(key: str | None = None, secret: str | None = None) -> Any:
    """Get a FlickrClient, or exit with an error message when no API key is configured."""
    from flickr_reflect.client import FlickrClient

    api_key = resolve_api_key(key)
    if not api_key:
        _console.print("[red]No API key. Pass --key or set FLICKR_API_KEY.[/red]")
        raise typer.Exit(1)

    return FlickrClient(api_key=api_key, secret=secret)
