"""SQLAlchemy storage backend for GachaForge."""

from __future__ import annotations

from contextlib import asynccontextmanager, contextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Iterator, Sequence

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, select, update
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..exceptions import NotFoundError, PersistenceError, StoreUnavailableError
from .base import Account, AccountStore, DrawRecord, DrawRecordStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class AccountTable(Base):
    __tablename__ = "gachaforge_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    points: Mapped[int] = mapped_column(Integer, default=0)
    fragment_500: Mapped[int] = mapped_column(Integer, default=0)
    fragment_free: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class DrawRecordTable(Base):
    __tablename__ = "gachaforge_draw_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_name: Mapped[str] = mapped_column(String(255), index=True)
    account_id: Mapped[int | None] = mapped_column(
        ForeignKey("gachaforge_accounts.id"), nullable=True
    )
    prize_name: Mapped[str] = mapped_column(String(255))
    prize_category: Mapped[str] = mapped_column(String(32))
    prize_value: Mapped[int] = mapped_column(Integer, default=0)
    is_redeemed: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise StoreUnavailableError(f"Store unreachable during {operation}: {exc}") from exc
    except SQLAlchemyError as exc:
        raise PersistenceError(f"Store failed during {operation}: {exc}") from exc


class AsyncSQLAlchemyStorage:
    """Bundle of async stores backed by SQLAlchemy."""

    def __init__(self, dsn: str, *, echo: bool = False) -> None:
        self._engine = create_async_engine(dsn, echo=echo, future=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def init_models(self) -> None:
        with _store_errors("schema creation"):
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def account_store(self) -> "AsyncSQLAlchemyAccountStore":
        return AsyncSQLAlchemyAccountStore(self._session_factory)

    def draw_record_store(self) -> "AsyncSQLAlchemyDrawRecordStore":
        return AsyncSQLAlchemyDrawRecordStore(self._session_factory)


def _to_account(row: AccountTable) -> Account:
    return Account(
        account_id=row.id,
        name=row.name,
        points=row.points,
        fragment_500=row.fragment_500,
        fragment_free=row.fragment_free,
        created_at=row.created_at,
    )


def _to_record(row: DrawRecordTable) -> DrawRecord:
    return DrawRecord(
        record_id=str(row.id),
        user_name=row.user_name,
        prize_name=row.prize_name,
        prize_category=row.prize_category,
        prize_value=row.prize_value,
        is_redeemed=row.is_redeemed,
        created_at=row.created_at,
        account_id=row.account_id,
    )


def _parse_record_id(record_id: str) -> int | None:
    try:
        return int(record_id)
    except (TypeError, ValueError):
        return None


class AsyncSQLAlchemyAccountStore(AccountStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find_by_name(self, name: str) -> Account | None:
        with _store_errors("account lookup"):
            async with self._session_factory() as session:
                stmt = select(AccountTable).where(AccountTable.name == name)
                row = (await session.execute(stmt)).scalar_one_or_none()
                return _to_account(row) if row else None

    async def get(self, account_id: int) -> Account | None:
        with _store_errors("account read"):
            async with self._session_factory() as session:
                row = await session.get(AccountTable, account_id)
                return _to_account(row) if row else None

    async def create(self, name: str, starting_points: int) -> Account:
        with _store_errors("account creation"):
            async with self._session_factory() as session:
                row = AccountTable(name=name, points=starting_points, fragment_500=0, fragment_free=0)
                session.add(row)
                await session.commit()
                return _to_account(row)

    async def update(
        self,
        account_id: int,
        *,
        points: int | None = None,
        fragment_500: int | None = None,
        fragment_free: int | None = None,
    ) -> Account:
        changes = {
            key: value
            for key, value in (
                ("points", points),
                ("fragment_500", fragment_500),
                ("fragment_free", fragment_free),
            )
            if value is not None
        }
        with _store_errors("account update"):
            async with self._session_factory() as session:
                if changes:
                    stmt = update(AccountTable).where(AccountTable.id == account_id).values(**changes)
                    result = await session.execute(stmt)
                    await session.commit()
                    if result.rowcount == 0:
                        raise NotFoundError(f"Account {account_id} not found")
                row = await session.get(AccountTable, account_id, populate_existing=True)
                if row is None:
                    raise NotFoundError(f"Account {account_id} not found")
                return _to_account(row)

    async def list_accounts(
        self, name_filter: str | None = None, *, order_by_points_desc: bool = True
    ) -> Sequence[Account]:
        with _store_errors("account listing"):
            async with self._session_factory() as session:
                stmt = select(AccountTable)
                if name_filter:
                    stmt = stmt.where(AccountTable.name.ilike(f"%{name_filter}%"))
                if order_by_points_desc:
                    stmt = stmt.order_by(AccountTable.points.desc(), AccountTable.id)
                else:
                    stmt = stmt.order_by(AccountTable.id)
                rows = (await session.execute(stmt)).scalars().all()
                return [_to_account(row) for row in rows]


class AsyncSQLAlchemyDrawRecordStore(DrawRecordStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, record: DrawRecord) -> DrawRecord:
        with _store_errors("draw record insert"):
            async with self._session_factory() as session:
                row = DrawRecordTable(
                    user_name=record.user_name,
                    account_id=record.account_id,
                    prize_name=record.prize_name,
                    prize_category=str(record.prize_category),
                    prize_value=record.prize_value,
                    is_redeemed=False,
                )
                session.add(row)
                await session.commit()
                return _to_record(row)

    async def get(self, record_id: str) -> DrawRecord | None:
        pk = _parse_record_id(record_id)
        if pk is None:
            return None
        with _store_errors("draw record read"):
            async with self._session_factory() as session:
                row = await session.get(DrawRecordTable, pk)
                return _to_record(row) if row else None

    async def list_records(
        self,
        user_name: str | None = None,
        *,
        order_by_created_desc: bool = True,
        limit: int | None = None,
    ) -> Sequence[DrawRecord]:
        with _store_errors("draw record listing"):
            async with self._session_factory() as session:
                stmt = select(DrawRecordTable)
                if user_name is not None:
                    stmt = stmt.where(DrawRecordTable.user_name == user_name)
                if order_by_created_desc:
                    stmt = stmt.order_by(DrawRecordTable.created_at.desc(), DrawRecordTable.id.desc())
                else:
                    stmt = stmt.order_by(DrawRecordTable.created_at, DrawRecordTable.id)
                if limit is not None:
                    stmt = stmt.limit(limit)
                rows = (await session.execute(stmt)).scalars().all()
                return [_to_record(row) for row in rows]

    async def set_redeemed(self, record_id: str) -> DrawRecord | None:
        pk = _parse_record_id(record_id)
        if pk is None:
            return None
        with _store_errors("draw record redemption"):
            async with self._session_factory() as session:
                stmt = (
                    update(DrawRecordTable)
                    .where(DrawRecordTable.id == pk, DrawRecordTable.is_redeemed.is_(False))
                    .values(is_redeemed=True)
                )
                result = await session.execute(stmt)
                await session.commit()
                if result.rowcount == 0:
                    return None
                row = await session.get(DrawRecordTable, pk, populate_existing=True)
                return _to_record(row) if row else None
