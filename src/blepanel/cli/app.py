from __future__ import annotations

from typing import Annotated

import typer

from blepanel.utils.logging import setup_logging

from .commands import config as config_cmd
from .commands.connect import register as register_connect
from .commands.init import register as register_init
from .commands.scan import register as register_scan

app = typer.Typer(
    help="blepanel - discover and connect nearby Bluetooth LE devices",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")

register_init(app)
register_scan(app)
register_connect(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            count=True,
            help="Debug logging; repeat to include BLE backend output",
        ),
    ] = 0,
) -> None:
    """blepanel CLI."""
    setup_logging(verbose=verbose)

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"blepanel version {get_version('blepanel')}")
        raise typer.Exit()
