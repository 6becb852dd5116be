"""Scripted in-memory BLE stack for development without a radio."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from blepanel.errors import BleStackError
from blepanel.models import (
    BleEvent,
    PeripheralConnected,
    PeripheralDisconnected,
    PeripheralDiscovered,
    ScanStarted,
    ScanStopped,
)

from .base import EventEmitter, EventHandler, Subscription

logger = logging.getLogger(__name__)


@dataclass
class MockPeripheral:
    id: str
    name: str | None
    rssi: int = -60
    services: list[str] = field(default_factory=list)


def default_peripherals() -> list[MockPeripheral]:
    return [
        MockPeripheral(
            id="C4:7C:8D:6A:21:0F",
            name="Living Room Speaker",
            rssi=-48,
            services=["0000180f-0000-1000-8000-00805f9b34fb"],
        ),
        MockPeripheral(
            id="F0:99:B6:12:4C:A3",
            name="HR Strap",
            rssi=-67,
            services=[
                "0000180d-0000-1000-8000-00805f9b34fb",
                "0000180f-0000-1000-8000-00805f9b34fb",
            ],
        ),
        MockPeripheral(id="5D:1E:02:9B:77:C0", name=None, rssi=-80),
    ]


@dataclass
class MockBleStack:
    peripherals: list[MockPeripheral] = field(default_factory=default_peripherals)
    fail_scan: bool = False
    fail_connect: set[str] = field(default_factory=set)
    fail_disconnect: set[str] = field(default_factory=set)
    connect_delay: float = 0.0
    emit_connection_events: bool = True

    calls: list[tuple[Any, ...]] = field(default_factory=list)
    started: bool = False
    closed: bool = False

    _emitter: EventEmitter = field(default_factory=EventEmitter, repr=False)
    _connected: set[str] = field(default_factory=set, repr=False)
    _scan_task: asyncio.Task[None] | None = field(default=None, repr=False)

    @property
    def emitter(self) -> EventEmitter:
        return self._emitter

    @property
    def connected(self) -> set[str]:
        return set(self._connected)

    def add_listener(self, event_type: type, handler: EventHandler) -> Subscription:
        return self._emitter.add_listener(event_type, handler)

    def emit(self, event: BleEvent) -> None:
        self._emitter.emit(event)

    async def start(self) -> None:
        self.calls.append(("start",))
        self.started = True

    async def scan(
        self, service_uuids: list[str], duration: float, allow_duplicates: bool
    ) -> None:
        self.calls.append(("scan", list(service_uuids), duration, allow_duplicates))
        if self.fail_scan:
            raise BleStackError("Mock scan failure")
        if self._scan_task is not None:
            self._scan_task.cancel()
        self._emitter.emit(ScanStarted())
        self._scan_task = asyncio.create_task(self._run_scan(service_uuids, duration))

    async def _run_scan(self, service_uuids: list[str], duration: float) -> None:
        for peripheral in list(self.peripherals):
            await asyncio.sleep(0)
            if service_uuids and not set(service_uuids) & set(peripheral.services):
                continue
            self._emitter.emit(
                PeripheralDiscovered(
                    id=peripheral.id, name=peripheral.name, rssi=peripheral.rssi
                )
            )
        await asyncio.sleep(duration)
        self._scan_task = None
        self._emitter.emit(ScanStopped())

    async def connect(self, device_id: str) -> None:
        self.calls.append(("connect", device_id))
        await asyncio.sleep(self.connect_delay)
        if device_id in self.fail_connect:
            raise BleStackError(f"Mock connect failure for {device_id}")
        self._connected.add(device_id)
        if self.emit_connection_events:
            self._emitter.emit(PeripheralConnected(id=device_id))

    async def disconnect(self, device_id: str) -> None:
        self.calls.append(("disconnect", device_id))
        await asyncio.sleep(0)
        if device_id in self.fail_disconnect:
            raise BleStackError(f"Mock disconnect failure for {device_id}")
        if device_id not in self._connected:
            raise BleStackError(f"No active connection to {device_id}")
        self._connected.discard(device_id)
        if self.emit_connection_events:
            self._emitter.emit(PeripheralDisconnected(id=device_id))

    async def retrieve_services(self, device_id: str) -> list[str]:
        self.calls.append(("retrieve_services", device_id))
        if device_id not in self._connected:
            raise BleStackError(f"No active connection to {device_id}")
        for peripheral in self.peripherals:
            if peripheral.id == device_id:
                return list(peripheral.services)
        return []

    async def close(self) -> None:
        self.calls.append(("close",))
        if self._scan_task is not None:
            self._scan_task.cancel()
            self._scan_task = None
        self._connected.clear()
        self.closed = True
        logger.debug("Mock stack closed")
