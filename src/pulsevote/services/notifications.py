"""Transient viewer notices (success/info/error toasts).

Services never render anything; they push a `Notice` onto a `Notifier` and
the presentation layer decides how to show it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    """Severity of a notice."""

    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


_LOG_LEVELS = {
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notice:
    """A single user-facing message."""

    level: NoticeLevel
    message: str


@dataclass
class Notifier:
    """Collects notices emitted during a viewer session."""

    notices: list[Notice] = field(default_factory=list)

    def emit(self, level: NoticeLevel, message: str) -> Notice:
        """Record and log a notice."""
        notice = Notice(level, message)
        self.notices.append(notice)
        logger.log(_LOG_LEVELS[level], "notice[%s]: %s", level.value, message)
        return notice

    def success(self, message: str) -> Notice:
        return self.emit(NoticeLevel.SUCCESS, message)

    def info(self, message: str) -> Notice:
        return self.emit(NoticeLevel.INFO, message)

    def error(self, message: str) -> Notice:
        return self.emit(NoticeLevel.ERROR, message)

    @property
    def last(self) -> Notice | None:
        """Most recent notice, if any."""
        return self.notices[-1] if self.notices else None
