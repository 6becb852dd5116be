"""BLE stack backed by bleak."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

import bleak
from bleak.exc import BleakError

from blepanel.errors import BleStackError
from blepanel.models import (
    PeripheralConnected,
    PeripheralDisconnected,
    PeripheralDiscovered,
    ScanStarted,
    ScanStopped,
)

from .base import EventEmitter, EventHandler, Subscription

if TYPE_CHECKING:
    from bleak.backends.device import BLEDevice
    from bleak.backends.scanner import AdvertisementData

logger = logging.getLogger(__name__)


class BleakStack:
    def __init__(self) -> None:
        self._emitter = EventEmitter()
        self._scanner: bleak.BleakScanner | None = None
        self._stop_task: asyncio.Task[None] | None = None
        self._allow_duplicates = True
        self._seen: set[str] = set()
        self._devices: dict[str, BLEDevice] = {}
        self._clients: dict[str, bleak.BleakClient] = {}
        self._started = False

    def add_listener(self, event_type: type, handler: EventHandler) -> Subscription:
        return self._emitter.add_listener(event_type, handler)

    async def start(self) -> None:
        if self._started:
            return
        self._started = True
        logger.debug("bleak stack started")

    async def scan(
        self, service_uuids: list[str], duration: float, allow_duplicates: bool
    ) -> None:
        if self._scanner is not None:
            logger.debug("Restarting running scan")
            await self._stop_scan()

        self._allow_duplicates = allow_duplicates
        self._seen.clear()
        scanner = bleak.BleakScanner(
            detection_callback=self._on_detection,
            service_uuids=service_uuids or None,
        )
        try:
            await scanner.start()
        except (BleakError, OSError) as exc:
            raise BleStackError(f"Scan failed to start: {exc}") from exc

        self._scanner = scanner
        logger.debug(
            "Scanning for %.1fs (services=%s)", duration, service_uuids or "any"
        )
        self._emitter.emit(ScanStarted())
        self._stop_task = asyncio.create_task(self._stop_after(duration))

    async def _stop_after(self, duration: float) -> None:
        await asyncio.sleep(duration)
        self._stop_task = None
        await self._stop_scan()

    async def _stop_scan(self) -> None:
        task = self._stop_task
        self._stop_task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

        scanner = self._scanner
        self._scanner = None
        if scanner is None:
            return
        try:
            await scanner.stop()
        except (BleakError, OSError) as exc:
            logger.warning("Failed to stop scanner cleanly: %s", exc)
        finally:
            self._emitter.emit(ScanStopped())

    def _on_detection(self, device: BLEDevice, adv: AdvertisementData) -> None:
        self._devices[device.address] = device
        if not self._allow_duplicates:
            if device.address in self._seen:
                return
            self._seen.add(device.address)
        self._emitter.emit(
            PeripheralDiscovered(
                id=device.address,
                name=adv.local_name or device.name,
                rssi=adv.rssi,
            )
        )

    async def connect(self, device_id: str) -> None:
        existing = self._clients.get(device_id)
        if existing is not None and existing.is_connected:
            logger.debug("Already connected to %s", device_id)
            return

        target = self._devices.get(device_id, device_id)
        client = bleak.BleakClient(
            target, disconnected_callback=self._on_client_disconnected
        )
        try:
            await client.connect()
        except asyncio.CancelledError:
            await self._discard_client(device_id, client)
            raise
        except (BleakError, asyncio.TimeoutError, OSError) as exc:
            await self._discard_client(device_id, client)
            raise BleStackError(f"Connect to {device_id} failed: {exc}") from exc

        self._clients[device_id] = client
        self._emitter.emit(PeripheralConnected(id=device_id))

    async def _discard_client(self, device_id: str, client: bleak.BleakClient) -> None:
        """Tear down a client whose connect attempt failed or was cancelled."""
        try:
            await client.disconnect()
        except (BleakError, asyncio.TimeoutError, OSError) as exc:
            logger.debug("Dropping failed client for %s: %s", device_id, exc)

    def _forget(self, device_id: str, client: bleak.BleakClient) -> None:
        # only links that completed connect() produce a disconnect event
        if self._clients.get(device_id) is not client:
            return
        del self._clients[device_id]
        logger.debug("Peripheral %s disconnected", device_id)
        self._emitter.emit(PeripheralDisconnected(id=device_id))

    def _on_client_disconnected(self, client: bleak.BleakClient) -> None:
        for device_id, tracked in list(self._clients.items()):
            if tracked is client:
                self._forget(device_id, client)

    async def disconnect(self, device_id: str) -> None:
        client = self._clients.get(device_id)
        if client is None:
            raise BleStackError(f"No active connection to {device_id}")
        try:
            await client.disconnect()
        except (BleakError, asyncio.TimeoutError, OSError) as exc:
            raise BleStackError(f"Disconnect from {device_id} failed: {exc}") from exc
        self._forget(device_id, client)

    async def retrieve_services(self, device_id: str) -> list[str]:
        client = self._clients.get(device_id)
        if client is None:
            raise BleStackError(f"No active connection to {device_id}")
        try:
            return [str(service.uuid) for service in client.services]
        except BleakError as exc:
            raise BleStackError(
                f"Service discovery on {device_id} failed: {exc}"
            ) from exc

    async def close(self) -> None:
        await self._stop_scan()
        for device_id, client in list(self._clients.items()):
            try:
                await client.disconnect()
            except (BleakError, asyncio.TimeoutError, OSError) as exc:
                logger.warning(
                    "Failed to disconnect %s during close: %s", device_id, exc
                )
            self._forget(device_id, client)
        self._started = False
