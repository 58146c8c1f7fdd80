"""Telegram integration helpers."""

from .aiogram_router import build_router, build_staff_notice_relay
from .filters import SessionRegistry, StaffSessionFilter, StudentSessionFilter
from .keyboards import draw_keyboard, redeem_keyboard, welcome_keyboard

__all__ = [
    "build_router",
    "build_staff_notice_relay",
    "SessionRegistry",
    "StaffSessionFilter",
    "StudentSessionFilter",
    "draw_keyboard",
    "redeem_keyboard",
    "welcome_keyboard",
]
