"""
Transient user-facing notices.

The console surfaces fetch and write outcomes as dismissible notices that
close on their own after a few seconds. Views render ``NoticeBoard.active()``;
the core only records them.
"""

import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from medicore_admin.core.shared.logger import notice_context

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A single dismissible notice."""

    id: int
    level: NoticeLevel
    message: str
    created_at: float = field(default_factory=time.monotonic)
    auto_close_seconds: float | None = 3.0

    def expired(self, now: float | None = None) -> bool:
        if self.auto_close_seconds is None:
            return False
        now = time.monotonic() if now is None else now
        return now - self.created_at >= self.auto_close_seconds


NoticeListener = Callable[[Notice], None]


class NoticeBoard:
    """
    Ordered collection of active notices (oldest first).

    Example:
        ```python
        notices = NoticeBoard(auto_close_seconds=3.0)
        notices.error("Failed to fetch doctors")
        for notice in notices.active():
            render(notice)
        ```
    """

    def __init__(self, auto_close_seconds: float | None = 3.0) -> None:
        self._auto_close_seconds = auto_close_seconds
        self._notices: list[Notice] = []
        self._ids = itertools.count(1)
        self._listeners: list[NoticeListener] = []

    def push(self, level: NoticeLevel, message: str, auto_close_seconds: float | None = None) -> Notice:
        notice = Notice(
            id=next(self._ids),
            level=level,
            message=message,
            auto_close_seconds=auto_close_seconds if auto_close_seconds is not None else self._auto_close_seconds,
        )
        self._notices.append(notice)
        log_level = logging.WARNING if level is NoticeLevel.ERROR else logging.DEBUG
        logger.log(log_level, f"Notice: {message}", extra=notice_context(notice))

        for listener in list(self._listeners):
            try:
                listener(notice)
            except Exception:
                logger.exception("Notice listener failed", extra=notice_context(notice))
        return notice

    def info(self, message: str) -> Notice:
        return self.push(NoticeLevel.INFO, message)

    def success(self, message: str) -> Notice:
        return self.push(NoticeLevel.SUCCESS, message)

    def warning(self, message: str) -> Notice:
        return self.push(NoticeLevel.WARNING, message)

    def error(self, message: str) -> Notice:
        return self.push(NoticeLevel.ERROR, message)

    def dismiss(self, notice_id: int) -> bool:
        """Remove a notice; returns False if it was already gone."""
        for index, notice in enumerate(self._notices):
            if notice.id == notice_id:
                del self._notices[index]
                return True
        return False

    def prune(self, now: float | None = None) -> int:
        """Drop auto-closed notices, returning how many were removed."""
        before = len(self._notices)
        self._notices = [n for n in self._notices if not n.expired(now)]
        return before - len(self._notices)

    def active(self, now: float | None = None) -> list[Notice]:
        self.prune(now)
        return list(self._notices)

    def clear(self) -> None:
        self._notices.clear()

    def subscribe(self, listener: NoticeListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def __len__(self) -> int:
        return len(self._notices)
