"""Translate BLE stack events into registry and scan-controller calls."""

from __future__ import annotations

import logging
from collections.abc import Callable
from types import TracebackType
from typing import Any

from blepanel.models import (
    EVENT_TYPES,
    BleEvent,
    PeripheralConnected,
    PeripheralDisconnected,
    PeripheralDiscovered,
    ScanStarted,
    ScanStopped,
)
from blepanel.stack import BleStack, Subscription

from .registry import DeviceRegistry
from .scan import ScanController

logger = logging.getLogger(__name__)


class BleEventAdapter:
    """Owns the stack listener subscriptions for one screen session.

    ``attach()`` subscribes once; ``detach()`` releases every subscription
    exactly once. ``handle()`` applies a single event and can be driven directly.
    """

    def __init__(
        self, stack: BleStack, registry: DeviceRegistry, scan: ScanController
    ) -> None:
        self._stack = stack
        self._registry = registry
        self._scan = scan
        self._subscriptions: list[Subscription] = []
        self._handlers: dict[type, Callable[[Any], None]] = {
            PeripheralDiscovered: self._on_discovered,
            ScanStarted: self._on_scan_started,
            ScanStopped: self._on_scan_stopped,
            PeripheralConnected: self._on_connected,
            PeripheralDisconnected: self._on_disconnected,
        }

    @property
    def attached(self) -> bool:
        return bool(self._subscriptions)

    def attach(self) -> None:
        if self._subscriptions:
            raise RuntimeError("BLE event listeners are already attached")
        try:
            for event_type in EVENT_TYPES:
                self._subscriptions.append(
                    self._stack.add_listener(event_type, self.handle)
                )
        except Exception:
            self.detach()
            raise
        logger.debug("Attached %d BLE listeners", len(self._subscriptions))

    def detach(self) -> None:
        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription.remove()
        if subscriptions:
            logger.debug("Detached %d BLE listeners", len(subscriptions))

    def __enter__(self) -> BleEventAdapter:
        self.attach()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.detach()

    def handle(self, event: BleEvent) -> None:
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning("Unhandled BLE event %r", event)
            return
        handler(event)

    def _on_discovered(self, event: PeripheralDiscovered) -> None:
        self._registry.upsert_discovered(event.id, event.name, event.rssi)

    def _on_scan_started(self, _event: ScanStarted) -> None:
        self._scan.on_scan_started()

    def _on_scan_stopped(self, _event: ScanStopped) -> None:
        self._scan.on_scan_stopped()

    def _on_connected(self, event: PeripheralConnected) -> None:
        self._registry.mark_connected(event.id)

    def _on_disconnected(self, event: PeripheralDisconnected) -> None:
        self._registry.mark_disconnected(event.id)
