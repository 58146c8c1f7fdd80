"""Staff operations: prize redemption and manual balance corrections."""

from __future__ import annotations

import logging
from typing import Sequence

from .notices import NoticeBoard, Severity
from .prizes import AUTO_SETTLED_CATEGORIES, PrizeCategory
from ..exceptions import AlreadyRedeemedError, NotFoundError, NotRedeemableError
from ..storage.base import Account, AccountStore, DrawRecord, DrawRecordStore

logger = logging.getLogger(__name__)


def is_redeemable(record: DrawRecord) -> bool:
    """True when staff still owe the prize on ``record``."""
    return not record.is_redeemed and not is_auto_settled(record)


def is_auto_settled(record: DrawRecord) -> bool:
    try:
        category = PrizeCategory(record.prize_category)
    except ValueError:
        return False
    return category in AUTO_SETTLED_CATEGORIES


class RedemptionService:
    def __init__(
        self,
        account_store: AccountStore,
        record_store: DrawRecordStore,
        notices: NoticeBoard,
    ) -> None:
        self._accounts = account_store
        self._records = record_store
        self._notices = notices

    async def redeem(self, record_id: str) -> DrawRecord:
        record = await self._records.get(record_id)
        if record is None:
            raise NotFoundError(f"Draw record {record_id} not found")
        if is_auto_settled(record):
            raise NotRedeemableError(
                f"Draw record {record_id} ({record.prize_category}) is settled automatically"
            )
        if record.is_redeemed:
            raise AlreadyRedeemedError(record_id)

        updated = await self._records.set_redeemed(record_id)
        if updated is None:
            # Another staff member flipped the flag between the read and the update.
            raise AlreadyRedeemedError(record_id)
        await self._notices.emit(
            Severity.INFO,
            "redeem",
            f"Redeemed '{updated.prize_name}' for {updated.user_name!r}",
            record_id=record_id,
        )
        return updated

    async def adjust_points(self, account_id: int, delta: int) -> Account:
        """Apply ``delta`` on top of a fresh read of the balance.

        Not a transaction: a draw settling between the read and the write is
        overwritten.
        """
        if delta == 0:
            raise ValueError("Delta must be non-zero")
        current = await self._accounts.get(account_id)
        if current is None:
            raise NotFoundError(f"Account {account_id} not found")
        updated = await self._accounts.update(account_id, points=current.points + delta)
        await self._notices.emit(
            Severity.INFO,
            "adjust points",
            f"{updated.name!r}: {current.points} -> {updated.points} ({delta:+d})",
            account_id=account_id,
            delta=delta,
        )
        return updated

    async def list_records(
        self, name_filter: str | None = None, *, limit: int | None = None
    ) -> Sequence[DrawRecord]:
        return await self._records.list_records(name_filter, limit=limit)

    async def list_pending(self, name_filter: str | None = None) -> list[DrawRecord]:
        return [record for record in await self.list_records(name_filter) if is_redeemable(record)]

    async def list_accounts(self, name_filter: str | None = None) -> Sequence[Account]:
        return await self._accounts.list_accounts(name_filter, order_by_points_desc=True)
