"""Storage abstractions used by the GachaForge services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Sequence

# Identifier carried by accounts that were never written to a store.
OFFLINE_ACCOUNT_ID = 0


@dataclass(slots=True)
class Account:
    account_id: int
    name: str
    points: int
    fragment_500: int = 0
    fragment_free: int = 0
    created_at: datetime | None = None

    @property
    def is_persisted(self) -> bool:
        return self.account_id != OFFLINE_ACCOUNT_ID


@dataclass(slots=True, frozen=True)
class DrawRecord:
    """Ledger entry snapshotting the prize won by ``user_name``.

    ``account_id`` is an optional back-reference; records are looked up by
    ``user_name``.
    """

    record_id: str | None
    user_name: str
    prize_name: str
    prize_category: str
    prize_value: int
    is_redeemed: bool = False
    created_at: datetime | None = None
    account_id: int | None = None


class AccountStore(Protocol):
    async def find_by_name(self, name: str) -> Account | None:
        ...

    async def get(self, account_id: int) -> Account | None:
        ...

    async def create(self, name: str, starting_points: int) -> Account:
        ...

    async def update(
        self,
        account_id: int,
        *,
        points: int | None = None,
        fragment_500: int | None = None,
        fragment_free: int | None = None,
    ) -> Account:
        ...

    async def list_accounts(
        self, name_filter: str | None = None, *, order_by_points_desc: bool = True
    ) -> Sequence[Account]:
        ...


class DrawRecordStore(Protocol):
    async def insert(self, record: DrawRecord) -> DrawRecord:
        ...

    async def get(self, record_id: str) -> DrawRecord | None:
        ...

    async def list_records(
        self,
        user_name: str | None = None,
        *,
        order_by_created_desc: bool = True,
        limit: int | None = None,
    ) -> Sequence[DrawRecord]:
        ...

    async def set_redeemed(self, record_id: str) -> DrawRecord | None:
        """Flip ``is_redeemed`` to True; return None when no row was flipped."""
        ...
