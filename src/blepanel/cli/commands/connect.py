from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from blepanel.cli.common import (
    build_stack,
    load_settings_or_exit,
    print_notices,
    with_scan_duration,
)
from blepanel.services import connect_device


def connect(
    address: str = typer.Argument(..., help="Device address (MAC or UUID)"),
    duration: float | None = typer.Option(
        None,
        "--duration",
        "-d",
        help="Maximum time to scan for the device, in seconds.",
    ),
    mock: bool = typer.Option(
        False, "--mock", help="Use scripted peripherals instead of the adapter"
    ),
) -> None:
    """Connect to a device, list its services, then disconnect."""
    console = Console()

    settings = with_scan_duration(load_settings_or_exit(), duration)
    console.print(f"Looking for {address}...")
    outcome = asyncio.run(connect_device(build_stack(mock), settings, address))
    print_notices(console, outcome.notices)

    if not outcome.found:
        console.print(f"[yellow]![/yellow] Device '{address}' not found")
        raise typer.Exit(1)
    if not outcome.connected or outcome.device is None:
        raise typer.Exit(1)

    device = outcome.device
    if not device.services:
        console.print(f"{device.name} exposes no services.")
        return

    table = Table(title=f"{device.name} ({device.id})")
    table.add_column("Service UUID", style="cyan")
    for service in device.services:
        table.add_row(service)
    console.print(table)


def register(app: typer.Typer) -> None:
    app.command()(connect)
