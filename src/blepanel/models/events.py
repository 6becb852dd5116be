"""Tagged events delivered by a BLE stack."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class PeripheralDiscovered:
    id: str
    name: str | None = None
    rssi: int | None = None


@dataclass(frozen=True)
class ScanStarted:
    pass


@dataclass(frozen=True)
class ScanStopped:
    pass


@dataclass(frozen=True)
class PeripheralConnected:
    id: str


@dataclass(frozen=True)
class PeripheralDisconnected:
    id: str


BleEvent = Union[
    PeripheralDiscovered,
    ScanStarted,
    ScanStopped,
    PeripheralConnected,
    PeripheralDisconnected,
]

EVENT_TYPES: tuple[type, ...] = (
    PeripheralDiscovered,
    ScanStarted,
    ScanStopped,
    PeripheralConnected,
    PeripheralDisconnected,
)
