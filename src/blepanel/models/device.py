from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class Device(BaseModel):
    model_config = {"extra": "forbid"}

    id: str
    name: str
    rssi: int | None = None
    connection_state: ConnectionState = ConnectionState.DISCONNECTED
    services: list[str] = Field(default_factory=list)

    @property
    def is_connected(self) -> bool:
        return self.connection_state == ConnectionState.CONNECTED


class ScanSession(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    active: bool = False
    started_at: datetime | None = None
    timeout_duration_ms: int = Field(default=0, ge=0)


class ScreenState(BaseModel):
    """Read-only projection of a screen session for rendering."""

    model_config = {"extra": "forbid"}

    enabled: bool
    scanning: bool
    devices: list[Device]
