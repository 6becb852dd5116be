"""One Bluetooth screen session: owns all state between activate and teardown."""

from __future__ import annotations

import logging
from types import TracebackType

from blepanel.config import Settings
from blepanel.models import PermissionStatus, ScreenState
from blepanel.stack import BleStack

from .adapter import BleEventAdapter
from .connection import ConnectionOrchestrator
from .notices import NoticeCenter
from .permissions import PermissionGate, PermissionProvider
from .registry import DeviceRegistry
from .scan import ScanController

logger = logging.getLogger(__name__)


class BluetoothScreen:
    def __init__(
        self,
        stack: BleStack,
        settings: Settings | None = None,
        permission_provider: PermissionProvider | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._stack = stack
        self.notices = NoticeCenter()
        self.registry = DeviceRegistry()
        self.scan = ScanController(
            stack, self.registry, self._settings.scanning, self.notices
        )
        self.connections = ConnectionOrchestrator(
            stack, self.registry, self._settings.connection, self.notices
        )
        self.adapter = BleEventAdapter(stack, self.registry, self.scan)
        self.permissions = PermissionGate(
            permission_provider, self._settings.permissions.required, self.notices
        )
        self._enabled = True
        self._active = False
        self.permission_status: PermissionStatus | None = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def active(self) -> bool:
        return self._active

    async def activate(self) -> None:
        if self._active:
            raise RuntimeError("Screen session is already active")
        self._active = True
        try:
            await self._stack.start()
            self.permission_status = await self.permissions.ensure_permissions()
            self.adapter.attach()
        except BaseException:
            await self.teardown()
            raise

        logger.debug("Screen activated")
        if self._settings.scanning.auto_start:
            await self.start_scan_requested()

    async def teardown(self) -> None:
        if not self._active:
            return
        self._active = False
        self.adapter.detach()
        self.scan.close()
        await self._stack.close()
        logger.debug("Screen torn down")

    async def __aenter__(self) -> BluetoothScreen:
        await self.activate()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.teardown()

    async def start_scan_requested(self) -> bool:
        if not self._enabled:
            logger.info("Bluetooth is disabled; not scanning")
            return False
        return await self.scan.start_scan()

    async def device_pressed(self, device_id: str) -> bool:
        if not self._enabled:
            logger.info("Bluetooth is disabled; ignoring press on %s", device_id)
            return False
        return await self.connections.toggle(device_id)

    async def bluetooth_toggled(self, enabled: bool) -> None:
        if enabled == self._enabled:
            return
        self._enabled = enabled
        if enabled:
            logger.info("Bluetooth enabled")
            await self.start_scan_requested()
            return

        logger.info("Bluetooth disabled")
        await self.connections.disconnect_all()
        self.registry.reset()
        self.scan.force_idle()

    def snapshot(self) -> ScreenState:
        return ScreenState(
            enabled=self._enabled,
            scanning=self._enabled and self.scan.is_scanning,
            devices=self.registry.list(),
        )
