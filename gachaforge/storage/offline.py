"""Stand-in stores used when no backing store is configured."""

from __future__ import annotations

from typing import NoReturn, Sequence

from ..exceptions import StoreUnavailableError
from .base import Account, AccountStore, DrawRecord, DrawRecordStore


def _unavailable(operation: str) -> NoReturn:
    raise StoreUnavailableError(f"No store configured; cannot {operation}")


class OfflineAccountStore(AccountStore):
    """Every call fails with :class:`StoreUnavailableError`."""

    async def find_by_name(self, name: str) -> Account | None:
        _unavailable("look up account")

    async def get(self, account_id: int) -> Account | None:
        _unavailable("read account")

    async def create(self, name: str, starting_points: int) -> Account:
        _unavailable("create account")

    async def update(
        self,
        account_id: int,
        *,
        points: int | None = None,
        fragment_500: int | None = None,
        fragment_free: int | None = None,
    ) -> Account:
        _unavailable("update account")

    async def list_accounts(
        self, name_filter: str | None = None, *, order_by_points_desc: bool = True
    ) -> Sequence[Account]:
        _unavailable("list accounts")


class OfflineDrawRecordStore(DrawRecordStore):
    async def insert(self, record: DrawRecord) -> DrawRecord:
        _unavailable("insert draw record")

    async def get(self, record_id: str) -> DrawRecord | None:
        _unavailable("read draw record")

    async def list_records(
        self,
        user_name: str | None = None,
        *,
        order_by_created_desc: bool = True,
        limit: int | None = None,
    ) -> Sequence[DrawRecord]:
        _unavailable("list draw records")

    async def set_redeemed(self, record_id: str) -> DrawRecord | None:
        _unavailable("redeem draw record")
