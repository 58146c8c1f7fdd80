"""Telegram Bot API calls that tolerate rate limits and blocked chats."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar

from aiogram import exceptions as tg_errors
from aiogram.types import CallbackQuery, Message

ResultT = TypeVar("ResultT")

logger = logging.getLogger(__name__)


def _flood_delay(exc: tg_errors.TelegramRetryAfter) -> float:
    return float(getattr(exc, "retry_after", 0) or 1.0)


async def safe_api_call(
    label: str,
    func: Callable[..., Awaitable[ResultT]],
    *args: Any,
    retries: int = 3,
    **kwargs: Any,
) -> ResultT | None:
    """Await ``func``; sleep and retry on flood control, None on expected API errors."""
    attempts = max(retries, 1)
    for attempt in range(1, attempts + 1):
        try:
            return await func(*args, **kwargs)
        except tg_errors.TelegramRetryAfter as exc:
            if attempt == attempts:
                logger.warning("%s: still rate limited after %d attempts, dropping", label, attempt)
                break
            delay = _flood_delay(exc)
            logger.info("%s: rate limited, attempt %d/%d, waiting %.1fs", label, attempt, attempts, delay)
            await asyncio.sleep(delay)
        except tg_errors.TelegramForbiddenError:
            logger.info("%s: chat blocked the bot", label)
            break
        except tg_errors.TelegramBadRequest as exc:
            logger.warning("%s: rejected by Telegram (%s)", label, exc)
            break
        except tg_errors.TelegramAPIError as exc:
            logger.error("%s: Telegram API error", label, exc_info=exc)
            break
    return None


async def safe_answer(message: Message | None, text: str, **kwargs: Any) -> bool:
    if message is None:
        return False
    sent = await safe_api_call("message.answer", message.answer, text, **kwargs)
    return sent is not None


async def safe_delete(message: Message | None) -> bool:
    """Remove a message, e.g. one that carried the staff passphrase."""
    if message is None:
        return False
    return bool(await safe_api_call("message.delete", message.delete))


async def safe_callback_answer(
    callback: CallbackQuery | None, text: str | None = None, **kwargs: Any
) -> bool:
    if callback is None:
        return False
    if text is not None:
        kwargs["text"] = text
    answered = await safe_api_call("callback.answer", callback.answer, **kwargs)
    return answered is not None
