from __future__ import annotations

from .adapter import BleEventAdapter
from .connection import ConnectionOrchestrator
from .notices import NoticeCenter
from .permissions import PermissionGate, PermissionProvider, StaticPermissionProvider
from .registry import DeviceRegistry
from .scan import ScanController
from .screen import BluetoothScreen

__all__ = [
    "BleEventAdapter",
    "BluetoothScreen",
    "ConnectionOrchestrator",
    "DeviceRegistry",
    "NoticeCenter",
    "PermissionGate",
    "PermissionProvider",
    "ScanController",
    "StaticPermissionProvider",
]
