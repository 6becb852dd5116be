"""The boundary between blepanel and a native BLE stack."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol

from blepanel.models import BleEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], None]


class Subscription:
    """Handle for one registered listener; ``remove()`` is idempotent."""

    def __init__(self, emitter: EventEmitter, event_type: type, handler: EventHandler):
        self._emitter = emitter
        self.event_type = event_type
        self.handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def remove(self) -> None:
        if not self._active:
            return
        self._active = False
        self._emitter._remove(self)


class EventEmitter:
    """Synchronous per-event-type listener registry."""

    def __init__(self) -> None:
        self._listeners: dict[type, list[Subscription]] = {}

    def add_listener(self, event_type: type, handler: EventHandler) -> Subscription:
        subscription = Subscription(self, event_type, handler)
        self._listeners.setdefault(event_type, []).append(subscription)
        return subscription

    def listener_count(self, event_type: type | None = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return sum(len(subs) for subs in self._listeners.values())

    def emit(self, event: BleEvent) -> None:
        for subscription in list(self._listeners.get(type(event), [])):
            if not subscription.active:
                continue
            try:
                subscription.handler(event)
            except Exception:
                logger.exception(
                    "Listener for %s failed", type(event).__name__
                )

    def _remove(self, subscription: Subscription) -> None:
        subs = self._listeners.get(subscription.event_type, [])
        if subscription in subs:
            subs.remove(subscription)


class BleStack(Protocol):
    """Commands a BLE stack accepts; results arrive as awaited values and events.

    Implementations raise ``BleStackError`` for every failed command.
    """

    async def start(self) -> None: ...

    async def scan(
        self, service_uuids: list[str], duration: float, allow_duplicates: bool
    ) -> None: ...

    async def connect(self, device_id: str) -> None: ...

    async def disconnect(self, device_id: str) -> None: ...

    async def retrieve_services(self, device_id: str) -> list[str]: ...

    async def close(self) -> None: ...

    def add_listener(self, event_type: type, handler: EventHandler) -> Subscription: ...
