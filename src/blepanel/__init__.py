"""blepanel - discover, list and connect nearby Bluetooth Low Energy peripherals."""

from __future__ import annotations

from importlib.metadata import version

from .config import ConnectionConfig, ScanningConfig, Settings, get_settings
from .core import BluetoothScreen, DeviceRegistry
from .errors import BlePanelError, BleStackError
from .models import ConnectionState, Device, ScanSession
from .stack import BleakStack, MockBleStack

__all__ = [
    "BleStackError",
    "BlePanelError",
    "BleakStack",
    "BluetoothScreen",
    "ConnectionConfig",
    "ConnectionState",
    "Device",
    "DeviceRegistry",
    "MockBleStack",
    "ScanSession",
    "ScanningConfig",
    "Settings",
    "__version__",
    "get_settings",
]

__version__ = version("blepanel")
