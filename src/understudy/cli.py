"""CLI entry point using Typer."""

import logging
from typing import Annotated

import typer

import understudy
from understudy.config import Settings

app = typer.Typer(
    name="understudy",
    help="Inspect understudy settings",
    no_args_is_help=True,
)


def main() -> None:
    """Entry point for the CLI."""
    app()


@app.callback()
def configure_logging(
    verbose: Annotated[bool, typer.Option("-v", "--verbose", help="Enable debug logging")] = False,
) -> None:
    """Spies, stubs and mocks for Python test suites."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@app.command()
def config() -> None:
    """Show the settings resolved from config files and UNDERSTUDY_* variables."""
    settings = Settings.load()
    for key, value in settings.to_dict().items():
        typer.echo(f"{key} = {str(value).lower()}")


@app.command()
def version() -> None:
    """Show the installed version."""
    typer.echo(understudy.__version__)
