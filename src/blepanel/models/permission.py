from __future__ import annotations

from enum import Enum


class Capability(str, Enum):
    LOCATION = "location"
    BLUETOOTH_SCAN = "bluetooth_scan"
    BLUETOOTH_CONNECT = "bluetooth_connect"


class PermissionStatus(str, Enum):
    GRANTED = "granted"
    DENIED = "denied"
