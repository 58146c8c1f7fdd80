from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from aiogram import Router

from gachaforge.app import STAFF_BLOCKED_MESSAGE
from gachaforge.config import StorageConfig
from gachaforge.domain.notices import NoticeBoard, Severity
from gachaforge.domain.session import StaffSession, StudentSession
from gachaforge.exceptions import PersistenceError, StoreUnavailableError
from gachaforge.storage.base import Account, DrawRecord
from gachaforge.telegram import (
    SessionRegistry,
    StaffSessionFilter,
    StudentSessionFilter,
    build_router,
    build_staff_notice_relay,
)
from gachaforge.telegram.aiogram_router import describe_store_error, redeem_record
from gachaforge.testing import app_fixture


def _event(user_id: int | None):
    return SimpleNamespace(from_user=SimpleNamespace(id=user_id) if user_id else None)


def test_build_router_orders_staff_before_student_before_public(memory_app):
    router = build_router(memory_app)
    assert isinstance(router, Router)
    assert [child.name for child in router.sub_routers] == [
        "gachaforge.staff",
        "gachaforge.student",
        "gachaforge.public",
    ]


def test_session_registry():
    registry = SessionRegistry()
    session = StaffSession()
    registry.set(5, session)
    assert registry.get(5) is session
    assert len(registry) == 1
    assert registry.clear(5) is session
    assert registry.clear(5) is None
    assert registry.get(5) is None


@pytest.mark.asyncio()
async def test_session_filters_inject_matching_session():
    registry = SessionRegistry()
    student = StudentSession(account=Account(account_id=1, name="Lin", points=300))
    registry.set(1, student)
    registry.set(2, StaffSession())

    student_filter = StudentSessionFilter(registry)
    staff_filter = StaffSessionFilter(registry)

    assert await student_filter(_event(1)) == {"session": student}
    assert await student_filter(_event(2)) is False
    assert await staff_filter(_event(2)) == {"session": registry.get(2)}
    assert await staff_filter(_event(1)) is False
    assert await staff_filter(_event(3)) is False
    assert await student_filter(_event(None)) is False


@pytest.mark.asyncio()
async def test_redeem_record_messages(memory_app):
    cash = await memory_app.record_store.insert(
        DrawRecord(None, "Lin", "5 yuan red packet", "CASH", 5)
    )
    points = await memory_app.record_store.insert(DrawRecord(None, "Lin", "5 points", "POINT", 5))

    assert (await redeem_record(memory_app, cash.record_id)).startswith("✅ Redeemed")
    assert "already redeemed" in await redeem_record(memory_app, cash.record_id)
    assert "settled automatically" in await redeem_record(memory_app, points.record_id)
    assert "does not exist" in await redeem_record(memory_app, "404")


@pytest.mark.asyncio()
async def test_redeem_record_offline_is_blocked():
    app = app_fixture(storage=StorageConfig(backend="offline"))
    assert await redeem_record(app, "1") == STAFF_BLOCKED_MESSAGE


def test_describe_store_error():
    assert describe_store_error("redeem", StoreUnavailableError("down")) == STAFF_BLOCKED_MESSAGE
    assert describe_store_error("adjust", PersistenceError("locked")) == "❌ adjust failed: locked"


@pytest.mark.asyncio()
async def test_staff_notice_relay_reaches_staff_chats_only():
    registry = SessionRegistry()
    registry.set(1, StudentSession(account=Account(account_id=1, name="Lin", points=300)))
    registry.set(2, StaffSession())
    registry.set(3, StaffSession())
    assert registry.staff_user_ids() == [2, 3]

    bot = AsyncMock()
    board = NoticeBoard()
    board.subscribe(build_staff_notice_relay(bot, registry), min_severity=Severity.WARNING)

    await board.emit(Severity.INFO, "redeem", "Redeemed")
    await board.emit(Severity.CRITICAL, "save draw record", "Prize was not recorded")

    calls = bot.send_message.await_args_list
    assert [call.args[0] for call in calls] == [2, 3]
    assert calls[0].args[1] == "🚨 save draw record: Prize was not recorded"
