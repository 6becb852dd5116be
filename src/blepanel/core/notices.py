from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable

from blepanel.models import ErrorKind, Notice, NoticeLevel

logger = logging.getLogger(__name__)

NoticeCallback = Callable[[Notice], None]

DEFAULT_MAXLEN = 50


class NoticeCenter:
    """Collects transient notices and forwards them to subscribers."""

    def __init__(self, maxlen: int = DEFAULT_MAXLEN) -> None:
        self._pending: deque[Notice] = deque(maxlen=maxlen)
        self._callbacks: list[NoticeCallback] = []

    def subscribe(self, callback: NoticeCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def post(self, notice: Notice) -> None:
        if notice.level == NoticeLevel.ERROR:
            logger.error("%s: %s", notice.title, notice.message)
        elif notice.level == NoticeLevel.WARNING:
            logger.warning("%s: %s", notice.title, notice.message)
        else:
            logger.info("%s: %s", notice.title, notice.message)

        self._pending.append(notice)
        for callback in list(self._callbacks):
            try:
                callback(notice)
            except Exception:
                logger.exception("Notice callback failed")

    def success(self, title: str, message: str) -> None:
        self.post(Notice(NoticeLevel.SUCCESS, title, message))

    def warning(self, title: str, message: str, error: ErrorKind | None = None) -> None:
        self.post(Notice(NoticeLevel.WARNING, title, message, error))

    def error(self, title: str, message: str, error: ErrorKind) -> None:
        self.post(Notice(NoticeLevel.ERROR, title, message, error))

    @property
    def pending(self) -> list[Notice]:
        return list(self._pending)

    def drain(self) -> list[Notice]:
        notices = list(self._pending)
        self._pending.clear()
        return notices
