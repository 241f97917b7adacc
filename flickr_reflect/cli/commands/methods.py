"""Discovery command for the flickr-reflect CLI."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from flickr_reflect.cli.commands import KEY_OPTION, SECRET_OPTION, get_client
from flickr_reflect.exceptions import FlickrSDKError

console = Console()


def methods(
    api: list[str] = typer.Option(..., "--api", "-a", help="Namespace to discover (repeatable), e.g. photos"),
    strict: bool = typer.Option(False, "--strict", help="Fail if any method cannot be described"),
    key: str = KEY_OPTION,
    secret: str = SECRET_OPTION,
) -> None:
    """List the methods the server exposes for the given namespaces."""
    client = get_client(key, secret)

    try:
        surface = client.discover(api, strict=strict)
    except FlickrSDKError as e:
        console.print(f"[red]Discovery failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        client.close()

    table = Table(title="Flickr Methods")
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Signed")
    table.add_column("Login")

    for name, binding in sorted(surface.walk()):
        table.add_row(
            name,
            "yes" if binding.needs_signing else "",
            "yes" if binding.needs_login else "",
        )

    console.print(table)

    for name, error in sorted(surface.failures.items()):
        console.print(f"[yellow]Skipped {name}: {error}[/yellow]")
