"""Authentication commands for the flickr-reflect CLI."""

from __future__ import annotations

import typer
from rich.console import Console

from flickr_reflect.auth.credentials import CredentialStore
from flickr_reflect.auth.flow import get_auth_status
from flickr_reflect.cli.commands import KEY_OPTION, SECRET_OPTION, get_client
from flickr_reflect.exceptions import FlickrSDKError, ManualAuthorizationRequired

app = typer.Typer(help="Manage the cached Flickr session")
console = Console()


@app.command()
def login(
    key: str = KEY_OPTION,
    secret: str = SECRET_OPTION,
) -> None:
    """Obtain a session token, caching the frob and token on disk.

    The first run prints an authorization URL; open it, grant access, and
    run the command again to finish the exchange.
    """
    client = get_client(key, secret)

    try:
        client.auth.authenticate(True)
    except ManualAuthorizationRequired as e:
        console.print("[yellow]Flickr needs you to grant access first.[/yellow]")
        console.print("Open this URL in your browser, then run [bold]flickr-reflect auth login[/bold] again:")
        typer.echo(e.auth_url)
        raise typer.Exit(1)
    except FlickrSDKError as e:
        console.print(f"[red]Authentication failed: {e}[/red]")
        raise typer.Exit(1)
    finally:
        client.close()

    console.print("[green]Successfully authenticated![/green]")


@app.command()
def logout() -> None:
    """Remove the cached frob and token."""
    if CredentialStore().clear():
        console.print("[green]Cached credentials removed.[/green]")
    else:
        console.print("[yellow]No cached credentials found.[/yellow]")


@app.command()
def status() -> None:
    """Show the cached session."""
    auth_status = get_auth_status(CredentialStore())

    if not auth_status.authenticated:
        console.print("[yellow]Not authenticated.[/yellow]")
        if auth_status.has_frob:
            console.print("A frob is cached; run [bold]flickr-reflect auth login[/bold] to finish.")
        else:
            console.print("Run [bold]flickr-reflect auth login[/bold] to authenticate.")
        raise typer.Exit(1)

    console.print("[green]Authenticated[/green]")
    console.print(f"  Token: {auth_status.masked_token}")
    console.print(f"  Cache: {auth_status.cache_dir}")
