"""Command line front end: list the reflected methods of a Flickr API and call them."""

from __future__ import annotations

try:
    import typer
except ImportError:
    import sys

    print("The command line tool needs its extras: pip install flickr-reflect[cli]")
    sys.exit(1)

from .commands import auth, call, methods

app = typer.Typer(
    name="flickr-reflect",
    help=(
        "Build a Flickr client from the reflection API, then list or call its methods. "
        "Signed calls go through the frob/token flow managed by 'auth'."
    ),
    no_args_is_help=True,
)

app.add_typer(auth.app, name="auth")
app.command("methods")(methods.methods)
app.command("call")(call.call)


def _print_version() -> None:
    from flickr_reflect import __version__

    typer.echo(f"flickr-reflect {__version__}")


def _on_version_flag(value: bool) -> None:
    if value:
        _print_version()
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Print the installed flickr-reflect version, then exit.",
        callback=_on_version_flag,
        is_eager=True,
    ),
) -> None:
    """Credentials come from --key/--secret or FLICKR_API_KEY and FLICKR_API_SECRET."""
    _ = version


@app.command()
def version() -> None:
    """Print the installed flickr-reflect version."""
    _print_version()


if __name__ == "__main__":
    app()
