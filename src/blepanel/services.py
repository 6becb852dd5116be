"""Run a screen session to completion for one-shot commands."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from blepanel.config import Settings
from blepanel.core import BluetoothScreen, PermissionProvider
from blepanel.models import Device, Notice, ScreenState
from blepanel.stack import BleStack

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.1


@dataclass
class ScanOutcome:
    state: ScreenState
    notices: list[Notice]


@dataclass
class ConnectOutcome:
    """Result of scanning for, connecting to and releasing one device."""

    found: bool
    connected: bool
    device: Device | None = None
    notices: list[Notice] = field(default_factory=list)


def _auto_scanning(settings: Settings) -> Settings:
    scanning = settings.scanning.model_copy(update={"auto_start": True})
    return settings.model_copy(update={"scanning": scanning})


def find_device_id(screen: BluetoothScreen, address: str) -> str | None:
    wanted = address.lower()
    for device in screen.registry.list():
        if device.id.lower() == wanted:
            return device.id
    return None


async def wait_for_scan(screen: BluetoothScreen, address: str | None = None) -> None:
    """Wait until the scan ends, or until ``address`` has been discovered."""
    while screen.scan.is_scanning:
        if address is not None and find_device_id(screen, address) is not None:
            return
        await asyncio.sleep(POLL_INTERVAL)


async def collect_devices(
    stack: BleStack,
    settings: Settings,
    permission_provider: PermissionProvider | None = None,
) -> ScanOutcome:
    async with BluetoothScreen(
        stack, _auto_scanning(settings), permission_provider
    ) as screen:
        await wait_for_scan(screen)
        state = screen.snapshot()
        return ScanOutcome(state=state, notices=screen.notices.drain())


async def connect_device(
    stack: BleStack,
    settings: Settings,
    address: str,
    permission_provider: PermissionProvider | None = None,
) -> ConnectOutcome:
    async with BluetoothScreen(
        stack, _auto_scanning(settings), permission_provider
    ) as screen:
        await wait_for_scan(screen, address)
        device_id = find_device_id(screen, address)
        if device_id is None:
            logger.debug("Device %s not seen during scan", address)
            return ConnectOutcome(
                found=False, connected=False, notices=screen.notices.drain()
            )

        connected = await screen.device_pressed(device_id)
        device = screen.registry.get(device_id)
        if connected:
            await screen.device_pressed(device_id)
        return ConnectOutcome(
            found=True,
            connected=connected,
            device=device,
            notices=screen.notices.drain(),
        )
