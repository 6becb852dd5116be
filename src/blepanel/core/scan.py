"""Single active scan with a timer-driven return to idle."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from blepanel.config import ScanningConfig
from blepanel.errors import BleStackError
from blepanel.models import ErrorKind, ScanSession
from blepanel.stack import BleStack

from .notices import NoticeCenter
from .registry import DeviceRegistry

logger = logging.getLogger(__name__)


class ScanController:
    """Idle -> Scanning -> Idle.

    The stack's own stop event is honoured, but the session also ends on a local
    timer so a lost ScanStopped event cannot leave the UI stuck in Scanning.
    """

    def __init__(
        self,
        stack: BleStack,
        registry: DeviceRegistry,
        config: ScanningConfig,
        notices: NoticeCenter,
    ) -> None:
        self._stack = stack
        self._registry = registry
        self._config = config
        self._notices = notices
        self._session = ScanSession(timeout_duration_ms=self._duration_ms)
        self._timer: asyncio.TimerHandle | None = None

    @property
    def _duration_ms(self) -> int:
        return int(self._config.duration * 1000)

    @property
    def session(self) -> ScanSession:
        return self._session

    @property
    def is_scanning(self) -> bool:
        return self._session.active

    async def start_scan(self, fresh: bool = True) -> bool:
        if self._session.active:
            logger.info("Scan already in progress; ignoring start request")
            return False

        if fresh:
            self._registry.reset(keep_connections=True)
        session = self._begin()

        try:
            await self._stack.scan(
                list(self._config.service_uuids),
                self._config.duration,
                self._config.allow_duplicates,
            )
        except BleStackError as exc:
            self._notices.error("Scan Failed", str(exc), ErrorKind.SCAN_FAILED)
            if self._session is session:
                self._to_idle()
            return False

        logger.debug("Scanning for %.1fs", self._config.duration)
        return True

    def on_scan_started(self) -> None:
        if self._session.active:
            return
        logger.debug("Scan started by the stack")
        self._begin()

    def on_scan_stopped(self) -> None:
        self._to_idle()

    def force_idle(self) -> None:
        self._to_idle()

    def close(self) -> None:
        self._cancel_timer()

    def _begin(self) -> ScanSession:
        self._cancel_timer()
        session = ScanSession(
            active=True,
            started_at=datetime.now(timezone.utc),
            timeout_duration_ms=self._duration_ms,
        )
        self._session = session
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._config.duration, self._on_timeout, session)
        return session

    def _on_timeout(self, session: ScanSession) -> None:
        if self._session is not session:
            return
        self._timer = None
        logger.debug("Scan window elapsed")
        self._to_idle()

    def _to_idle(self) -> None:
        self._cancel_timer()
        if self._session.active:
            self._session = self._session.model_copy(update={"active": False})
            logger.debug("Scan session ended")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
