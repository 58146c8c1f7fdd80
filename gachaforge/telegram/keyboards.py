"""Keyboard helpers for GachaForge bots."""

from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from ..storage.base import DrawRecord
from ..domain.redemption import is_redeemable


def draw_keyboard(cost_per_draw: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=f"🎁 Draw again (-{cost_per_draw})", callback_data="gacha:draw")],
            [InlineKeyboardButton(text="💰 Balance", callback_data="gacha:balance")],
            [InlineKeyboardButton(text="🧾 History", callback_data="gacha:history")],
        ]
    )


def welcome_keyboard(cost_per_draw: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=f"🎁 Draw (-{cost_per_draw})", callback_data="gacha:draw")],
            [InlineKeyboardButton(text="🧾 History", callback_data="gacha:history")],
        ]
    )


def redeem_keyboard(records: list[DrawRecord]) -> InlineKeyboardMarkup | None:
    rows = [
        [
            InlineKeyboardButton(
                text=f"✅ #{record.record_id} {record.user_name}: {record.prize_name}",
                callback_data=f"gacha:redeem:{record.record_id}",
            )
        ]
        for record in records
        if is_redeemable(record)
    ]
    return InlineKeyboardMarkup(inline_keyboard=rows) if rows else None
