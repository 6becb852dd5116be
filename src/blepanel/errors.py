from __future__ import annotations


class BlePanelError(Exception):
    """Base class for blepanel errors."""


class BleStackError(BlePanelError):
    """A BLE stack command (scan, connect, disconnect, ...) failed."""
