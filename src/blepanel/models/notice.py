from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    SCAN_FAILED = "scan_failed"
    CONNECT_FAILED = "connect_failed"
    DISCONNECT_FAILED = "disconnect_failed"


@dataclass(frozen=True)
class Notice:
    """A transient, user-visible message."""

    level: NoticeLevel
    title: str
    message: str
    error: ErrorKind | None = None
