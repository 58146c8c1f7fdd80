"""Session registry and aiogram filters built on it."""

from __future__ import annotations

from aiogram.filters import BaseFilter
from aiogram.types import CallbackQuery, Message

from ..domain.session import Session, StaffSession, StudentSession


class SessionRegistry:
    """Per Telegram user session contexts."""

    def __init__(self) -> None:
        self._sessions: dict[int, Session] = {}

    def get(self, user_id: int) -> Session | None:
        return self._sessions.get(user_id)

    def set(self, user_id: int, session: Session) -> None:
        self._sessions[user_id] = session

    def clear(self, user_id: int) -> Session | None:
        return self._sessions.pop(user_id, None)

    def staff_user_ids(self) -> list[int]:
        return [
            user_id
            for user_id, session in self._sessions.items()
            if isinstance(session, StaffSession)
        ]

    def __len__(self) -> int:
        return len(self._sessions)


class StudentSessionFilter(BaseFilter):
    """Pass when the sender is logged in as a student; injects ``session``."""

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry

    async def __call__(self, event: Message | CallbackQuery) -> dict | bool:
        user = event.from_user
        if not user:
            return False
        session = self._registry.get(user.id)
        if isinstance(session, StudentSession):
            return {"session": session}
        return False


class StaffSessionFilter(BaseFilter):
    """Pass when the sender unlocked the staff panel; injects ``session``."""

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry

    async def __call__(self, event: Message | CallbackQuery) -> dict | bool:
        user = event.from_user
        if not user:
            return False
        session = self._registry.get(user.id)
        if isinstance(session, StaffSession):
            return {"session": session}
        return False
