from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.table import Table

from blepanel.cli.common import (
    build_stack,
    load_settings_or_exit,
    print_notices,
    with_scan_duration,
)
from blepanel.services import collect_devices
from blepanel.utils.redaction import Redactor

logger = logging.getLogger(__name__)


def scan(
    duration: float | None = typer.Option(
        None,
        "--duration",
        "-d",
        help="Scan duration in seconds. Uses config default if omitted.",
    ),
    mock: bool = typer.Option(
        False, "--mock", help="Use scripted peripherals instead of the adapter"
    ),
    redact: bool = typer.Option(
        False,
        "--redact",
        help="Redact addresses and names in output",
    ),
) -> None:
    """Scan for nearby Bluetooth LE devices."""
    console = Console()

    settings = with_scan_duration(load_settings_or_exit(), duration)
    console.print(f"Scanning for BLE devices ({settings.scanning.duration:g}s)...")
    logger.info(
        "Scan settings: duration=%.2fs, services=%s, allow_duplicates=%s",
        settings.scanning.duration,
        settings.scanning.service_uuids or "any",
        settings.scanning.allow_duplicates,
    )
    outcome = asyncio.run(collect_devices(build_stack(mock), settings))
    print_notices(console, outcome.notices)

    devices = outcome.state.devices
    if not devices:
        console.print("No devices found.")
        return

    redactor = Redactor(enabled=redact)
    table = Table()
    table.add_column("Name", style="green")
    table.add_column("Address", style="cyan")
    table.add_column("RSSI", justify="right")
    table.add_column("State")

    for device in devices:
        rssi = "" if device.rssi is None else f"{device.rssi} dBm"
        table.add_row(
            redactor.redact_name(device.name),
            redactor.redact_address(device.id),
            rssi,
            device.connection_state.value,
        )

    console.print(table)
    console.print(f"\n[green]Found {len(devices)} device(s)[/green]")


def register(app: typer.Typer) -> None:
    app.command()(scan)
