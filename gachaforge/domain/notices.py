"""Severity-ranked notices surfaced to students and staff."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Awaitable, Callable, Deque, Mapping

logger = logging.getLogger(__name__)


class Severity(IntEnum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    CRITICAL = logging.CRITICAL


@dataclass(slots=True, frozen=True)
class Notice:
    severity: Severity
    operation: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)

    def render(self) -> str:
        return f"[{self.severity.name}] {self.operation}: {self.message}"


NoticeListener = Callable[[Notice], Awaitable[None]]


class NoticeBoard:
    """Async pub-sub for notices that also logs and retains recent ones."""

    def __init__(self, *, maxlen: int = 200) -> None:
        self._listeners: list[tuple[Severity, NoticeListener]] = []
        self._recent: Deque[Notice] = deque(maxlen=maxlen)

    def subscribe(self, listener: NoticeListener, *, min_severity: Severity = Severity.INFO) -> None:
        self._listeners.append((min_severity, listener))

    async def publish(self, notice: Notice) -> Notice:
        logger.log(int(notice.severity), "%s", notice.render(), extra={"notice": notice})
        self._recent.append(notice)
        for min_severity, listener in list(self._listeners):
            if notice.severity >= min_severity:
                await listener(notice)
        return notice

    async def emit(
        self, severity: Severity, operation: str, message: str, **context: Any
    ) -> Notice:
        return await self.publish(Notice(severity, operation, message, context))

    def recent(self, *, min_severity: Severity = Severity.INFO) -> list[Notice]:
        return [notice for notice in self._recent if notice.severity >= min_severity]
