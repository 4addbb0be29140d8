# src/memwatch/cli/main.py
"""
Entry point for the `memwatch` command.

`report` runs a single memory check, `start` keeps checking on an interval.
"""

import logging
import platform
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from typing import Optional

import typer

from .. import __version__
from ..core.config import config
from . import report, start

# stdout is reserved for csv/json output.
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

app = typer.Typer(
    name="memwatch",
    help="Compare Kubernetes pod memory usage with declared requests and limits.",
    add_completion=False,
    no_args_is_help=True,
)
app.add_typer(report.app, name="report")
app.add_typer(start.app, name="start")


def _client_version() -> str:
    try:
        return package_version("kubernetes_asyncio")
    except PackageNotFoundError:
        return "unknown"


def _print_version(verbose: bool = False) -> None:
    typer.echo(f"memwatch version: {__version__}")
    if verbose:
        typer.echo(f"python: {platform.python_version()}")
        typer.echo(f"kubernetes_asyncio: {_client_version()}")


def _version_flag(value: Optional[bool]) -> None:
    if value:
        _print_version()
        raise typer.Exit()


@app.command()
def version(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Also show the Python and client library versions."),
):
    """Show the memwatch version."""
    _print_version(verbose)


@app.callback()
def main(
    show_version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_flag,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """Kubernetes pod memory watcher."""


if __name__ == "__main__":
    app()
