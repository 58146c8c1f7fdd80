"""Draw settlement: charge, select, apply effects, persist."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from uuid import uuid4

from .notices import Notice, NoticeBoard, Severity
from .prizes import (
    DEFAULT_COST_PER_DRAW,
    FRAGMENT_500_ID,
    FRAGMENT_FREE_ID,
    PrizeCategory,
    PrizeDefinition,
    PrizeTable,
)
from .selector import PrizeSelector
from .session import StudentSession
from ..exceptions import InsufficientFundsError, NotFoundError, StoreError
from ..storage.base import Account, AccountStore, DrawRecord, DrawRecordStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DrawOutcome:
    """Result of one settled draw.

    ``account`` and ``record`` always hold the computed post-draw state, even
    when one of the writes failed; ``failures`` lists what was not saved.
    """

    account: Account
    record: DrawRecord
    prize: PrizeDefinition
    record_saved: bool
    account_saved: bool
    failures: tuple[Notice, ...] = ()

    @property
    def persisted(self) -> bool:
        return self.record_saved and self.account_saved


def local_record_id() -> str:
    """Client-side identifier for records the store never saw. Never reused."""
    return f"local-{uuid4().hex}"


def apply_prize_effects(account: Account, prize: PrizeDefinition, points_after_cost: int) -> Account:
    points = points_after_cost
    fragment_500 = account.fragment_500
    fragment_free = account.fragment_free
    if prize.category == PrizeCategory.POINT:
        points += prize.value
    if prize.prize_id == FRAGMENT_500_ID:
        fragment_500 += 1
    if prize.prize_id == FRAGMENT_FREE_ID:
        fragment_free += 1
    return replace(account, points=points, fragment_500=fragment_500, fragment_free=fragment_free)


class SettlementEngine:
    """Charge the draw cost, pick a prize and record the outcome.

    The balance deduction is optimistic: it is never reversed when the store
    rejects either write. Record and account writes are issued concurrently
    and may fail independently.
    """

    def __init__(
        self,
        prize_table: PrizeTable,
        selector: PrizeSelector,
        account_store: AccountStore,
        record_store: DrawRecordStore,
        notices: NoticeBoard,
        *,
        cost_per_draw: int = DEFAULT_COST_PER_DRAW,
        history_limit: int = 10,
    ) -> None:
        self._table = prize_table
        self._selector = selector
        self._accounts = account_store
        self._records = record_store
        self._notices = notices
        self._cost = cost_per_draw
        self._history_limit = history_limit

    @property
    def cost_per_draw(self) -> int:
        return self._cost

    async def draw(self, session: StudentSession) -> DrawOutcome:
        outcome = await self.settle_draw(session.account)
        session.account = outcome.account
        session.history.insert(0, outcome.record)
        del session.history[self._history_limit :]
        return outcome

    async def settle_draw(self, account: Account, cost_per_draw: int | None = None) -> DrawOutcome:
        cost = self._cost if cost_per_draw is None else cost_per_draw
        if cost <= 0:
            raise ValueError("Draw cost must be positive")
        if account.points < cost:
            raise InsufficientFundsError(cost, account.points)

        points_after_cost = account.points - cost
        prize = self._selector.select(self._table.prizes)
        updated = apply_prize_effects(account, prize, points_after_cost)
        record = DrawRecord(
            record_id=None,
            user_name=account.name,
            prize_name=prize.name,
            prize_category=prize.category.value,
            prize_value=prize.value,
            is_redeemed=False,
            account_id=account.account_id if account.is_persisted else None,
        )
        logger.info(
            "Draw for %r: %s (%s), points %s -> %s",
            account.name,
            prize.prize_id,
            prize.category.value,
            account.points,
            updated.points,
        )

        if not account.is_persisted:
            return DrawOutcome(
                account=updated,
                record=self._unsaved(record),
                prize=prize,
                record_saved=False,
                account_saved=False,
            )
        return await self._persist(updated, record, prize)

    async def _persist(self, account: Account, record: DrawRecord, prize: PrizeDefinition) -> DrawOutcome:
        record_result, account_result = await asyncio.gather(
            self._records.insert(record),
            self._accounts.update(
                account.account_id,
                points=account.points,
                fragment_500=account.fragment_500,
                fragment_free=account.fragment_free,
            ),
            return_exceptions=True,
        )
        failures: list[Notice] = []

        if isinstance(record_result, BaseException):
            if not isinstance(record_result, (StoreError, NotFoundError)):
                raise record_result
            failures.append(
                await self._notices.emit(
                    Severity.CRITICAL,
                    "save draw record",
                    f"Prize '{prize.name}' for {account.name!r} was not recorded; "
                    "take a screenshot and contact staff",
                    user_name=account.name,
                    prize_id=prize.prize_id,
                    error=str(record_result),
                )
            )
            saved_record = self._unsaved(record)
        else:
            saved_record = record_result

        if isinstance(account_result, BaseException):
            if not isinstance(account_result, (StoreError, NotFoundError)):
                raise account_result
            failures.append(
                await self._notices.emit(
                    Severity.WARNING,
                    "update account",
                    f"Balance for {account.name!r} was not saved (expected {account.points} points)",
                    account_id=account.account_id,
                    points=account.points,
                    fragment_500=account.fragment_500,
                    fragment_free=account.fragment_free,
                    error=str(account_result),
                )
            )

        return DrawOutcome(
            account=account,
            record=saved_record,
            prize=prize,
            record_saved=not isinstance(record_result, BaseException),
            account_saved=not isinstance(account_result, BaseException),
            failures=tuple(failures),
        )

    @staticmethod
    def _unsaved(record: DrawRecord) -> DrawRecord:
        return replace(record, record_id=local_record_id(), created_at=datetime.now(timezone.utc))
