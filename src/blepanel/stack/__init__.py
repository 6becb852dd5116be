from __future__ import annotations

from .base import BleStack, EventEmitter, EventHandler, Subscription
from .bleak_stack import BleakStack
from .mock import MockBleStack, MockPeripheral, default_peripherals

__all__ = [
    "BleStack",
    "BleakStack",
    "EventEmitter",
    "EventHandler",
    "MockBleStack",
    "MockPeripheral",
    "Subscription",
    "default_peripherals",
]
