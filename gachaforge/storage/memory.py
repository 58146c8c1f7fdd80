"""In-memory storage backend for GachaForge."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count
from typing import Sequence

from ..exceptions import NotFoundError, PersistenceError
from .base import Account, AccountStore, DrawRecord, DrawRecordStore


class InMemoryAccountStore(AccountStore):
    def __init__(self) -> None:
        self._records: dict[int, Account] = {}
        self._ids = count(1)

    async def find_by_name(self, name: str) -> Account | None:
        for record in self._records.values():
            if record.name == name:
                return replace(record)
        return None

    async def get(self, account_id: int) -> Account | None:
        record = self._records.get(account_id)
        return replace(record) if record else None

    async def create(self, name: str, starting_points: int) -> Account:
        if await self.find_by_name(name) is not None:
            raise PersistenceError(f"Account named {name!r} already exists")
        record = Account(
            account_id=next(self._ids),
            name=name,
            points=starting_points,
            created_at=datetime.now(timezone.utc),
        )
        self._records[record.account_id] = record
        return replace(record)

    async def update(
        self,
        account_id: int,
        *,
        points: int | None = None,
        fragment_500: int | None = None,
        fragment_free: int | None = None,
    ) -> Account:
        record = self._records.get(account_id)
        if record is None:
            raise NotFoundError(f"Account {account_id} not found")
        if points is not None:
            record.points = points
        if fragment_500 is not None:
            record.fragment_500 = fragment_500
        if fragment_free is not None:
            record.fragment_free = fragment_free
        return replace(record)

    async def list_accounts(
        self, name_filter: str | None = None, *, order_by_points_desc: bool = True
    ) -> Sequence[Account]:
        needle = name_filter.lower() if name_filter else None
        matches = [
            replace(record)
            for record in self._records.values()
            if needle is None or needle in record.name.lower()
        ]
        if order_by_points_desc:
            matches.sort(key=lambda record: record.points, reverse=True)
        return matches


class InMemoryDrawRecordStore(DrawRecordStore):
    def __init__(self) -> None:
        self._history: dict[str, DrawRecord] = {}
        self._ids = count(1)

    async def insert(self, record: DrawRecord) -> DrawRecord:
        stored = replace(
            record,
            record_id=str(next(self._ids)),
            created_at=datetime.now(timezone.utc),
        )
        self._history[stored.record_id] = stored
        return stored

    async def get(self, record_id: str) -> DrawRecord | None:
        return self._history.get(record_id)

    async def list_records(
        self,
        user_name: str | None = None,
        *,
        order_by_created_desc: bool = True,
        limit: int | None = None,
    ) -> Sequence[DrawRecord]:
        # Insertion order doubles as creation order.
        filtered = [
            rec for rec in self._history.values() if user_name is None or rec.user_name == user_name
        ]
        if order_by_created_desc:
            filtered.reverse()
        return filtered[:limit] if limit is not None else filtered

    async def set_redeemed(self, record_id: str) -> DrawRecord | None:
        record = self._history.get(record_id)
        if record is None or record.is_redeemed:
            return None
        updated = replace(record, is_redeemed=True)
        self._history[record_id] = updated
        return updated
