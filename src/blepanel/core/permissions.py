from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from blepanel.models import Capability, ErrorKind, PermissionStatus

from .notices import NoticeCenter

logger = logging.getLogger(__name__)


class PermissionProvider(Protocol):
    async def request_capabilities(
        self, capabilities: list[Capability]
    ) -> dict[Capability, PermissionStatus]: ...


class StaticPermissionProvider:
    """Grants every capability except the ones listed in ``denied``."""

    def __init__(self, denied: Iterable[Capability] = ()) -> None:
        self._denied = set(denied)
        self.requests: list[list[Capability]] = []

    async def request_capabilities(
        self, capabilities: list[Capability]
    ) -> dict[Capability, PermissionStatus]:
        self.requests.append(list(capabilities))
        return {
            capability: (
                PermissionStatus.DENIED
                if capability in self._denied
                else PermissionStatus.GRANTED
            )
            for capability in capabilities
        }


class PermissionGate:
    """Checks runtime grants; denial is reported but never blocks the screen.

    Without a provider the platform has no runtime grants and everything is
    granted.
    """

    def __init__(
        self,
        provider: PermissionProvider | None,
        required: Iterable[Capability],
        notices: NoticeCenter,
    ) -> None:
        self._provider = provider
        self._required = list(required)
        self._notices = notices

    async def ensure_permissions(self) -> PermissionStatus:
        if self._provider is None or not self._required:
            return PermissionStatus.GRANTED

        try:
            results = await self._provider.request_capabilities(list(self._required))
        except Exception:
            logger.exception("Permission request failed")
            results = {}

        denied = [
            capability
            for capability in self._required
            if results.get(capability) != PermissionStatus.GRANTED
        ]
        if not denied:
            logger.debug("All permissions granted")
            return PermissionStatus.GRANTED

        logger.debug("Denied capabilities: %s", ", ".join(c.value for c in denied))
        self._notices.warning(
            "Permissions Required",
            "Please grant all permissions to use Bluetooth features",
            ErrorKind.PERMISSION_DENIED,
        )
        return PermissionStatus.DENIED
