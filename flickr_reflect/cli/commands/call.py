"""Raw method call command for the flickr-reflect CLI."""

from __future__ import annotations

import json

import typer
from rich.console import Console

from flickr_reflect.cli.commands import KEY_OPTION, SECRET_OPTION, get_client
from flickr_reflect.exceptions import FlickrSDKError, ManualAuthorizationRequired

console = Console()


def parse_params(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` arguments into a parameter dictionary."""
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}")
        params[key] = value
    return params


def call(
    method: str = typer.Argument(help="Fully qualified method name, e.g. flickr.test.echo"),
    params: list[str] = typer.Argument(None, help="Method parameters as key=value"),
    sign: bool = typer.Option(False, "--sign", help="Sign the request"),
    login: bool = typer.Option(False, "--login", help="Send the cached session token"),
    key: str = KEY_OPTION,
    secret: str = SECRET_OPTION,
) -> None:
    """Call a single method without running discovery and print the JSON response."""
    options = parse_params(params or [])
    client = get_client(key, secret)

    try:
        result = client.method(method, sign_required=sign, auth_required=login)(options)
    except ManualAuthorizationRequired as e:
        console.print("[yellow]Grant access first, then retry:[/yellow]")
        typer.echo(e.auth_url)
        raise typer.Exit(1)
    except FlickrSDKError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    finally:
        client.close()

    typer.echo(json.dumps(result, indent=2))
