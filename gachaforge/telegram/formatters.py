"""Plain-text rendering of accounts, draws and ledger entries."""

from __future__ import annotations

from typing import Iterable

from ..app import STAFF_BLOCKED_MESSAGE, StoreStatus
from ..domain.notices import Notice, Severity
from ..domain.prizes import PrizeCategory, Rarity
from ..domain.redemption import is_auto_settled, is_redeemable
from ..domain.session import DEFAULT_STARTING_POINTS
from ..domain.settlement import DrawOutcome
from ..storage.base import Account, DrawRecord

_RARITY_MARKS = {
    Rarity.COMMON: "⚪",
    Rarity.UNCOMMON: "🔵",
    Rarity.RARE: "🟣",
    Rarity.LEGENDARY: "🟡",
}

_SEVERITY_MARKS = {
    Severity.INFO: "ℹ️",
    Severity.WARNING: "⚠️",
    Severity.CRITICAL: "🚨",
}


def fragment_progress(count: int, set_size: int) -> str:
    text = f"{count}/{set_size}"
    if count >= set_size:
        text += " ✅"
    return text


def format_account(account: Account, *, fragment_set_size: int = 3) -> str:
    lines = [
        f"👤 {account.name}",
        f"💰 Points: {account.points}",
        f"🧩 500 yuan fragments: {fragment_progress(account.fragment_500, fragment_set_size)}",
        f"🧩 Free quarter fragments: {fragment_progress(account.fragment_free, fragment_set_size)}",
    ]
    if not account.is_persisted:
        lines.append("")
        lines.append("Offline account: nothing you win here is saved.")
    return "\n".join(lines)


def format_notice(notice: Notice) -> str:
    return f"{_SEVERITY_MARKS[notice.severity]} {notice.operation}: {notice.message}"


def format_draw_message(outcome: DrawOutcome, *, cost_per_draw: int, fragment_set_size: int = 3) -> str:
    prize = outcome.prize
    lines = [
        f"{_RARITY_MARKS[prize.rarity]} {prize.name} [{prize.rarity.label}]",
    ]
    if prize.description:
        lines.append(prize.description)
    lines.append("")
    if prize.category == PrizeCategory.POINT:
        lines.append(f"+{prize.value} points credited.")
    elif prize.category == PrizeCategory.FRAGMENT:
        lines.append("Fragment added to your collection.")
    elif prize.category != PrizeCategory.EMPTY:
        lines.append(f"Show record #{outcome.record.record_id} to staff to collect your prize.")
    lines.append(f"Spent {cost_per_draw} points, balance: {outcome.account.points}.")
    lines.append(
        "Fragments: "
        f"500 yuan {fragment_progress(outcome.account.fragment_500, fragment_set_size)}, "
        f"free quarter {fragment_progress(outcome.account.fragment_free, fragment_set_size)}"
    )
    if outcome.failures:
        lines.append("")
        lines.extend(format_notice(notice) for notice in outcome.failures)
    return "\n".join(lines)


def format_history(records: Iterable[DrawRecord]) -> str:
    records = list(records)
    if not records:
        return "No draws yet. Use /draw to try your luck."
    lines = ["🧾 Recent draws:"]
    for record in records:
        if is_auto_settled(record):
            status = "auto"
        else:
            status = "collected" if record.is_redeemed else "to collect"
        lines.append(f"• #{record.record_id} {record.prize_name} ({status})")
    return "\n".join(lines)


def format_records(records: Iterable[DrawRecord]) -> str:
    records = list(records)
    if not records:
        return "No draw records found."
    lines = ["🧾 Draw records:"]
    for record in records:
        created = record.created_at.strftime("%Y-%m-%d %H:%M") if record.created_at else "?"
        if is_redeemable(record):
            status = f"pending, /redeem {record.record_id}"
        elif record.is_redeemed:
            status = "redeemed"
        else:
            status = "auto-settled"
        lines.append(
            f"• #{record.record_id} {created} {record.user_name}: "
            f"{record.prize_name} [{record.prize_category}] ({status})"
        )
    return "\n".join(lines)


def format_accounts(accounts: Iterable[Account], *, fragment_set_size: int = 3) -> str:
    accounts = list(accounts)
    if not accounts:
        return "No accounts found."
    lines = ["👥 Accounts (by points):"]
    for account in accounts:
        lines.append(
            f"• id {account.account_id} {account.name}: {account.points} pts, "
            f"fragments {fragment_progress(account.fragment_500, fragment_set_size)} / "
            f"{fragment_progress(account.fragment_free, fragment_set_size)}"
        )
    return "\n".join(lines)


def render_help_message(
    status: StoreStatus, *, cost_per_draw: int, starting_points: int = DEFAULT_STARTING_POINTS
) -> str:
    lines = []
    if status.banner:
        lines.append(f"⚠️ {status.banner}")
        lines.append("")
    lines.extend(
        [
            "🎁 Prize draw",
            "",
            "Students:",
            f"• /login <name> — sign in (new names start with {starting_points} points)",
            f"• /draw — spend {cost_per_draw} points on a draw",
            "• /balance — points and fragments",
            "• /history — your recent draws",
            "• /logout",
            "",
            "Staff:",
            "• /staff <passphrase> — open the staff panel",
            "• /records [name] — ledger, newest first",
            "• /pending [name] — prizes still to hand over",
            "• /accounts [filter] — accounts by points",
            "• /redeem <record id> — mark a prize as handed over",
            "• /adjust <account id> <delta> — correct a balance",
            "• /notices — recent warnings (also pushed to unlocked staff chats)",
        ]
    )
    return "\n".join(lines)


def render_staff_panel(status: StoreStatus) -> str:
    if status.offline:
        return STAFF_BLOCKED_MESSAGE
    return "🛡️ Staff panel ready. Use /pending, /records, /accounts, /redeem, /adjust and /notices."
