"""Data models for blepanel."""

from blepanel.models.device import ConnectionState, Device, ScanSession, ScreenState
from blepanel.models.events import (
    EVENT_TYPES,
    BleEvent,
    PeripheralConnected,
    PeripheralDisconnected,
    PeripheralDiscovered,
    ScanStarted,
    ScanStopped,
)
from blepanel.models.notice import ErrorKind, Notice, NoticeLevel
from blepanel.models.permission import Capability, PermissionStatus

__all__ = [
    "EVENT_TYPES",
    "BleEvent",
    "Capability",
    "ConnectionState",
    "Device",
    "ErrorKind",
    "Notice",
    "NoticeLevel",
    "PeripheralConnected",
    "PeripheralDiscovered",
    "PeripheralDisconnected",
    "PermissionStatus",
    "ScanSession",
    "ScanStarted",
    "ScanStopped",
    "ScreenState",
]
