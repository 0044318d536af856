"""Main CLI entry point for OpenBandi."""

import typer
from rich.console import Console

from openbandi import __version__
from openbandi.exceptions import ConfigurationError
from openbandi.utils.config import get_settings
from openbandi.utils.logging import configure_logging

from ..banking.cli import app as banking_app

app = typer.Typer(
    name="openbandi",
    help="🏛️ Grant project expense tracking and bank reconciliation",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]OpenBandi[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """
    OpenBandi - expense tracking for funded projects.

    Import bank statements and reconcile them with the expenses of your
    grant projects.
    """
    try:
        settings = get_settings()
    except ConfigurationError as e:
        console.print(f"[red]✗ {e.message}[/]")
        raise typer.Exit(1)

    configure_logging(
        log_level="DEBUG" if verbose else settings.log_level,
        json_logs=settings.json_logs,
        dev_mode=settings.dev_mode,
    )


app.add_typer(banking_app, name="banking", help="🏦 Bank reconciliation")


if __name__ == "__main__":
    app()
