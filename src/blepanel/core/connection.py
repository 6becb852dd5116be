"""Connect and disconnect commands with registry bookkeeping."""

from __future__ import annotations

import asyncio
import logging

from blepanel.config import ConnectionConfig
from blepanel.errors import BleStackError
from blepanel.models import ConnectionState, ErrorKind
from blepanel.stack import BleStack

from .notices import NoticeCenter
from .registry import DeviceRegistry

logger = logging.getLogger(__name__)


class ConnectionOrchestrator:
    """Issues connect/disconnect to the stack and reconciles the outcome.

    Other events may land while a command is awaited, so every handler re-reads
    the registry after the await instead of trusting its own earlier write.
    """

    def __init__(
        self,
        stack: BleStack,
        registry: DeviceRegistry,
        config: ConnectionConfig,
        notices: NoticeCenter,
    ) -> None:
        self._stack = stack
        self._registry = registry
        self._config = config
        self._notices = notices

    async def connect(self, device_id: str) -> bool:
        device = self._registry.get(device_id)
        if device is None:
            logger.warning("Cannot connect to unknown device %s", device_id)
            return False
        if not self._registry.transition(
            device_id, ConnectionState.DISCONNECTED, ConnectionState.CONNECTING
        ):
            logger.info(
                "Ignoring connect to %s while %s",
                device_id,
                device.connection_state.value,
            )
            return False

        try:
            await asyncio.wait_for(
                self._stack.connect(device_id), timeout=self._config.timeout
            )
        except (BleStackError, asyncio.TimeoutError) as exc:
            self._registry.transition(
                device_id, ConnectionState.CONNECTING, ConnectionState.DISCONNECTED
            )
            self._notices.error(
                "Connection Failed",
                f"Failed to connect to {device.name}: {str(exc) or 'timed out'}",
                ErrorKind.CONNECT_FAILED,
            )
            return False

        current = self._registry.get(device_id)
        if current is None:
            logger.info("Connected to %s after it left the device list", device_id)
            return True
        if current.connection_state == ConnectionState.CONNECTING:
            self._registry.mark_connected(device_id)
        elif current.connection_state != ConnectionState.CONNECTED:
            logger.info(
                "Connect to %s completed but device is now %s",
                device_id,
                current.connection_state.value,
            )
            return False

        self._notices.success("Connected", f"Connected to {device.name}")
        if self._config.retrieve_services:
            await self._retrieve_services(device_id)
        return True

    async def _retrieve_services(self, device_id: str) -> None:
        try:
            services = await asyncio.wait_for(
                self._stack.retrieve_services(device_id),
                timeout=self._config.timeout,
            )
        except (BleStackError, asyncio.TimeoutError) as exc:
            logger.warning("Could not retrieve services for %s: %s", device_id, exc)
            return
        logger.debug("Services on %s: %s", device_id, services)
        self._registry.set_services(device_id, services)

    async def disconnect(self, device_id: str) -> bool:
        device = self._registry.get(device_id)
        if (
            device is not None
            and device.connection_state == ConnectionState.DISCONNECTING
        ):
            logger.info("Disconnect from %s already in progress", device_id)
            return False
        label = device.name if device is not None else device_id

        # Best effort: the call is issued even when the entry is not Connected.
        moved = self._registry.transition(
            device_id, ConnectionState.CONNECTED, ConnectionState.DISCONNECTING
        )

        try:
            await asyncio.wait_for(
                self._stack.disconnect(device_id), timeout=self._config.timeout
            )
        except (BleStackError, asyncio.TimeoutError) as exc:
            if moved:
                self._registry.transition(
                    device_id,
                    ConnectionState.DISCONNECTING,
                    ConnectionState.CONNECTED,
                )
            self._notices.error(
                "Disconnection Failed",
                f"Failed to disconnect from {label}: {str(exc) or 'timed out'}",
                ErrorKind.DISCONNECT_FAILED,
            )
            return False

        self._registry.mark_disconnected(device_id)
        self._notices.success("Disconnected", f"Disconnected from {label}")
        return True

    async def toggle(self, device_id: str) -> bool:
        device = self._registry.get(device_id)
        if device is None:
            logger.debug("Ignoring press on unknown device %s", device_id)
            return False
        if device.is_connected:
            return await self.disconnect(device_id)
        if device.connection_state == ConnectionState.DISCONNECTED:
            return await self.connect(device_id)
        logger.info(
            "Ignoring press on %s while %s", device_id, device.connection_state.value
        )
        return False

    async def disconnect_all(self) -> None:
        # Entries already disconnecting are finished by their own command.
        device_ids = []
        for device_id in self._registry.connected_ids():
            device = self._registry.get(device_id)
            if device is not None and device.is_connected:
                device_ids.append(device_id)
        if not device_ids:
            return
        logger.debug("Disconnecting %d device(s)", len(device_ids))
        results = await asyncio.gather(
            *(self.disconnect(device_id) for device_id in device_ids),
            return_exceptions=True,
        )
        for device_id, result in zip(device_ids, results):
            if isinstance(result, BaseException):
                logger.error("Unexpected error disconnecting %s: %r", device_id, result)
