"""Factory helpers to wire GachaForge services into aiogram."""

from __future__ import annotations

import logging

from aiogram import Bot, F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from ..app import STAFF_BLOCKED_MESSAGE, GachaApp
from ..domain.notices import Notice, NoticeListener, Severity
from ..domain.session import StaffLogin, StaffSession, StudentLogin, StudentSession
from ..exceptions import (
    AlreadyRedeemedError,
    AuthenticationError,
    ConfigurationError,
    InsufficientFundsError,
    NotFoundError,
    NotRedeemableError,
    StoreError,
    StoreUnavailableError,
)
from .api_utils import safe_answer, safe_api_call, safe_callback_answer, safe_delete
from .filters import SessionRegistry, StaffSessionFilter, StudentSessionFilter
from .formatters import (
    format_account,
    format_accounts,
    format_draw_message,
    format_history,
    format_notice,
    format_records,
    render_help_message,
    render_staff_panel,
)
from .keyboards import draw_keyboard, redeem_keyboard, welcome_keyboard

logger = logging.getLogger(__name__)

STUDENT_COMMANDS = ("draw", "balance", "history")
STAFF_COMMANDS = ("records", "pending", "accounts", "redeem", "adjust", "notices")
RECENT_NOTICE_LIMIT = 10


def build_router(app: GachaApp, *, registry: SessionRegistry | None = None) -> Router:
    """Return a router with staff, student and public handlers, in that order."""
    registry = registry or SessionRegistry()
    root = Router(name="gachaforge")
    root.include_router(build_staff_router(app, registry))
    root.include_router(build_student_router(app, registry))
    root.include_router(build_public_router(app, registry))
    return root


def build_public_router(app: GachaApp, registry: SessionRegistry) -> Router:
    router = Router(name="gachaforge.public")
    cost = app.settlement.cost_per_draw

    @router.message(Command("start", "help"))
    async def handle_help(message: Message) -> None:
        await safe_answer(
            message,
            render_help_message(
                app.status(), cost_per_draw=cost, starting_points=app.config.draw.starting_points
            ),
            reply_markup=welcome_keyboard(cost),
        )

    @router.message(Command("login"))
    async def handle_login(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user:
            return
        name = (command.args or "").strip()
        if not name:
            await safe_answer(message, "Usage: /login <name>")
            return
        try:
            session = await app.sessions.login(StudentLogin(name))
        except StoreError as exc:
            await safe_answer(message, f"Login failed: {exc}")
            return
        registry.set(user.id, session)
        text = format_account(session.account, fragment_set_size=app.config.draw.fragment_set_size)
        banner = app.status().banner
        if banner or session.offline:
            text = f"⚠️ {banner or 'Store unreachable, playing offline.'}\n\n{text}"
        await safe_answer(message, text, reply_markup=welcome_keyboard(cost))

    @router.message(Command("staff"))
    async def handle_staff(message: Message, command: CommandObject) -> None:
        user = message.from_user
        if not user:
            return
        await safe_delete(message)
        try:
            session = await app.sessions.login(StaffLogin(command.args or ""))
        except AuthenticationError:
            await safe_answer(message, "Wrong passphrase.")
            return
        registry.set(user.id, session)
        await safe_answer(message, render_staff_panel(app.status()))

    @router.message(Command("logout"))
    async def handle_logout(message: Message) -> None:
        user = message.from_user
        if not user:
            return
        if registry.clear(user.id) is None:
            await safe_answer(message, "You are not logged in.")
        else:
            await safe_answer(message, "Logged out.")

    @router.message(Command(*STUDENT_COMMANDS))
    async def handle_student_without_session(message: Message) -> None:
        await safe_answer(message, "Log in first with /login <name>.")

    @router.message(Command(*STAFF_COMMANDS))
    async def handle_staff_without_session(message: Message) -> None:
        await safe_answer(message, "Staff only. Unlock the panel with /staff <passphrase>.")

    @router.callback_query(F.data.startswith("gacha:"))
    async def handle_callback_without_session(callback: CallbackQuery) -> None:
        await safe_callback_answer(callback, "Please log in again.", show_alert=True)

    return router


def build_student_router(app: GachaApp, registry: SessionRegistry) -> Router:
    router = Router(name="gachaforge.student")
    router.message.filter(StudentSessionFilter(registry))
    router.callback_query.filter(StudentSessionFilter(registry))
    cost = app.settlement.cost_per_draw
    set_size = app.config.draw.fragment_set_size

    async def run_draw(session: StudentSession) -> tuple[str, bool]:
        try:
            outcome = await app.settlement.draw(session)
        except InsufficientFundsError as exc:
            return (
                f"Not enough points: a draw costs {exc.required}, you have {exc.available}.",
                False,
            )
        except ConfigurationError as exc:
            logger.error("Draw refused, prize table misconfigured: %s", exc)
            return f"Draws are disabled: {exc}", False
        return format_draw_message(outcome, cost_per_draw=cost, fragment_set_size=set_size), True

    @router.message(Command("draw"))
    async def handle_draw(message: Message, session: StudentSession) -> None:
        text, drawn = await run_draw(session)
        await safe_answer(message, text, reply_markup=draw_keyboard(cost) if drawn else None)

    @router.callback_query(F.data == "gacha:draw")
    async def handle_draw_again(callback: CallbackQuery, session: StudentSession) -> None:
        text, drawn = await run_draw(session)
        await safe_callback_answer(callback)
        await safe_answer(callback.message, text, reply_markup=draw_keyboard(cost) if drawn else None)

    @router.message(Command("balance"))
    async def handle_balance(message: Message, session: StudentSession) -> None:
        await safe_answer(message, format_account(session.account, fragment_set_size=set_size))

    @router.callback_query(F.data == "gacha:balance")
    async def handle_balance_callback(callback: CallbackQuery, session: StudentSession) -> None:
        await safe_callback_answer(callback)
        await safe_answer(callback.message, format_account(session.account, fragment_set_size=set_size))

    @router.message(Command("history"))
    async def handle_history(message: Message, session: StudentSession) -> None:
        await safe_answer(message, format_history(session.history))

    @router.callback_query(F.data == "gacha:history")
    async def handle_history_callback(callback: CallbackQuery, session: StudentSession) -> None:
        await safe_callback_answer(callback)
        await safe_answer(callback.message, format_history(session.history))

    return router


def build_staff_router(app: GachaApp, registry: SessionRegistry) -> Router:
    router = Router(name="gachaforge.staff")
    router.message.filter(StaffSessionFilter(registry))
    router.callback_query.filter(StaffSessionFilter(registry))
    redemption = app.redemption
    set_size = app.config.draw.fragment_set_size

    @router.message(Command("records"))
    async def handle_records(message: Message, command: CommandObject, session: StaffSession) -> None:
        try:
            records = list(await redemption.list_records(command.args or None, limit=50))
        except StoreError as exc:
            await safe_answer(message, describe_store_error("read records", exc))
            return
        await safe_answer(message, format_records(records), reply_markup=redeem_keyboard(records))

    @router.message(Command("pending"))
    async def handle_pending(message: Message, command: CommandObject, session: StaffSession) -> None:
        try:
            records = await redemption.list_pending(command.args or None)
        except StoreError as exc:
            await safe_answer(message, describe_store_error("read pending prizes", exc))
            return
        await safe_answer(message, format_records(records), reply_markup=redeem_keyboard(records))

    @router.message(Command("accounts"))
    async def handle_accounts(message: Message, command: CommandObject, session: StaffSession) -> None:
        try:
            accounts = await redemption.list_accounts(command.args or None)
        except StoreError as exc:
            await safe_answer(message, describe_store_error("read accounts", exc))
            return
        await safe_answer(message, format_accounts(accounts, fragment_set_size=set_size))

    @router.message(Command("redeem"))
    async def handle_redeem(message: Message, command: CommandObject, session: StaffSession) -> None:
        record_id = (command.args or "").strip().lstrip("#")
        if not record_id:
            await safe_answer(message, "Usage: /redeem <record id>")
            return
        await safe_answer(message, await redeem_record(app, record_id))

    @router.callback_query(F.data.startswith("gacha:redeem:"))
    async def handle_redeem_callback(callback: CallbackQuery, session: StaffSession) -> None:
        record_id = callback.data.split(":")[-1]
        text = await redeem_record(app, record_id)
        await safe_callback_answer(callback, text, show_alert=True)

    @router.message(Command("adjust"))
    async def handle_adjust(message: Message, command: CommandObject, session: StaffSession) -> None:
        parts = (command.args or "").split()
        if len(parts) != 2:
            await safe_answer(message, "Usage: /adjust <account id> <delta>")
            return
        try:
            account_id, delta = int(parts[0]), int(parts[1])
        except ValueError:
            await safe_answer(message, "Account id and delta must be whole numbers.")
            return
        try:
            account = await redemption.adjust_points(account_id, delta)
        except ValueError as exc:
            await safe_answer(message, str(exc))
            return
        except NotFoundError as exc:
            await safe_answer(message, f"Adjust points failed: {exc}")
            return
        except StoreError as exc:
            await safe_answer(message, describe_store_error("adjust points", exc))
            return
        await safe_answer(message, f"✅ {account.name} now has {account.points} points.")

    @router.message(Command("notices"))
    async def handle_notices(message: Message, session: StaffSession) -> None:
        notices = app.notices.recent(min_severity=Severity.WARNING)[-RECENT_NOTICE_LIMIT:]
        if not notices:
            await safe_answer(message, "No warnings since startup.")
            return
        await safe_answer(message, "\n".join(format_notice(notice) for notice in notices))

    return router


def build_staff_notice_relay(bot: Bot, registry: SessionRegistry) -> NoticeListener:
    """Forward notices to every user currently holding a staff session."""

    async def relay(notice: Notice) -> None:
        text = format_notice(notice)
        for user_id in registry.staff_user_ids():
            await safe_api_call("bot.send_message", bot.send_message, user_id, text)

    return relay


async def redeem_record(app: GachaApp, record_id: str) -> str:
    try:
        record = await app.redemption.redeem(record_id)
    except NotFoundError:
        return f"Redeem failed: record #{record_id} does not exist."
    except NotRedeemableError:
        return f"Record #{record_id} is settled automatically; nothing to hand over."
    except AlreadyRedeemedError:
        return f"⚠️ Record #{record_id} was already redeemed."
    except StoreError as exc:
        return describe_store_error("redeem", exc)
    return f"✅ Redeemed #{record.record_id}: {record.prize_name} for {record.user_name}."


def describe_store_error(operation: str, exc: StoreError) -> str:
    if isinstance(exc, StoreUnavailableError):
        return STAFF_BLOCKED_MESSAGE
    return f"❌ {operation} failed: {exc}"
