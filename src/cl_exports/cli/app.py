"""Main CLI application for Commerce Layer exports."""

from pathlib import Path
from typing import Annotated

import typer

from cl_exports import __version__
from cl_exports.cli import exports as exports_cmd
from cl_exports.cli.common import console
from cl_exports.config import get_settings
from cl_exports.logging import setup_logging

app = typer.Typer(
    name="clexports",
    help="Create, monitor and list Commerce Layer export jobs.",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"clexports version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """Commerce Layer exports - run export jobs and browse their history."""
    settings = get_settings()
    log_config = settings.logging

    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        log_file=Path(log_config.log_file) if log_config.log_file else None,
        rotation=log_config.rotation,
        retention=log_config.retention,
        serialize=log_config.serialize,
    )


app.add_typer(exports_cmd.app, name="exports")


if __name__ == "__main__":
    app()
