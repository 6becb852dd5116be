"""In-memory reconciliation of discovered peripherals."""

from __future__ import annotations

import logging

from blepanel.models import ConnectionState, Device

logger = logging.getLogger(__name__)


class DeviceRegistry:
    """Devices keyed by stack id, kept in first-discovery order.

    Only peripherals that advertise a name are tracked. Reads return copies so
    callers never hold references to the live entries.
    """

    def __init__(self) -> None:
        self._devices: dict[str, Device] = {}
        self._connected: dict[str, None] = {}

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    def upsert_discovered(
        self, device_id: str, name: str | None, rssi: int | None
    ) -> bool:
        """Record a discovery event; return True when a new entry was created.

        The first advertised name is kept; later events only refresh ``rssi``.
        """
        if not name:
            logger.debug("Ignoring unnamed peripheral %s", device_id)
            return False

        device = self._devices.get(device_id)
        if device is None:
            self._devices[device_id] = Device(id=device_id, name=name, rssi=rssi)
            logger.debug("Discovered '%s' (%s, rssi=%s)", name, device_id, rssi)
            return True

        device.rssi = rssi
        return False

    def mark_connected(self, device_id: str) -> None:
        device = self._devices.get(device_id)
        if device is None:
            logger.debug("Connected event for untracked peripheral %s", device_id)
            return
        device.connection_state = ConnectionState.CONNECTED
        self._connected[device_id] = None

    def mark_disconnected(self, device_id: str) -> None:
        self._connected.pop(device_id, None)
        device = self._devices.get(device_id)
        if device is None:
            logger.debug("Disconnected event for untracked peripheral %s", device_id)
            return
        device.connection_state = ConnectionState.DISCONNECTED
        device.services = []

    def transition(
        self, device_id: str, expected: ConnectionState, new: ConnectionState
    ) -> bool:
        """Move ``device_id`` to ``new`` only if it is currently ``expected``."""
        device = self._devices.get(device_id)
        if device is None or device.connection_state != expected:
            return False
        if new == ConnectionState.CONNECTED:
            self.mark_connected(device_id)
        elif new == ConnectionState.DISCONNECTED:
            self.mark_disconnected(device_id)
        else:
            device.connection_state = new
        logger.debug("%s: %s -> %s", device_id, expected.value, new.value)
        return True

    def set_services(self, device_id: str, services: list[str]) -> None:
        device = self._devices.get(device_id)
        if device is not None:
            device.services = list(services)

    def reset(self, keep_connections: bool = False) -> None:
        """Drop tracked devices.

        With ``keep_connections`` every entry that is not ``disconnected`` stays
        listed, so links still held by the stack remain visible and pressable.
        """
        if not keep_connections:
            self._devices.clear()
            self._connected.clear()
            return
        self._devices = {
            device_id: device
            for device_id, device in self._devices.items()
            if device.connection_state != ConnectionState.DISCONNECTED
        }

    def get(self, device_id: str) -> Device | None:
        device = self._devices.get(device_id)
        return device.model_copy(deep=True) if device is not None else None

    def connected_ids(self) -> list[str]:
        return list(self._connected)

    def list(self) -> list[Device]:
        return [device.model_copy(deep=True) for device in self._devices.values()]
