"""Top level application object for GachaForge kiosks and bots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from random import Random
from typing import Any

from .config import GachaConfig
from .domain.notices import NoticeBoard, Severity
from .domain.prizes import PrizeTable, default_prize_table
from .domain.redemption import RedemptionService
from .domain.selector import PrizeSelector, UniformSource, WeightedSelector
from .domain.session import SessionGate
from .domain.settlement import SettlementEngine
from .exceptions import StoreUnavailableError
from .loaders import load_prize_table
from .storage.base import AccountStore, DrawRecordStore
from .storage.memory import InMemoryAccountStore, InMemoryDrawRecordStore
from .storage.offline import OfflineAccountStore, OfflineDrawRecordStore
from .storage.sqlalchemy import AsyncSQLAlchemyStorage

logger = logging.getLogger(__name__)

OFFLINE_BANNER = "Offline mode: no database is configured, draws and balances are NOT saved."
STAFF_BLOCKED_MESSAGE = (
    "Staff panel unavailable: no database is configured, so there are no records to redeem "
    "and no balances to adjust."
)


@dataclass(slots=True)
class StoreStatus:
    backend: str
    offline: bool

    @property
    def banner(self) -> str | None:
        return OFFLINE_BANNER if self.offline else None


class GachaApp:
    """Central dependency container used by the bot, CLI and tests."""

    def __init__(
        self,
        config: GachaConfig,
        *,
        account_store: AccountStore | None = None,
        record_store: DrawRecordStore | None = None,
        prize_table: PrizeTable | None = None,
        rng: UniformSource | None = None,
        selector: PrizeSelector | None = None,
        notices: NoticeBoard | None = None,
    ) -> None:
        self.config = config
        self.notices = notices or NoticeBoard()

        self.prize_table = prize_table or self._load_prize_table()
        self.prize_table.ensure_valid(
            enforce_weight_sum=config.draw.enforce_weight_sum,
            tolerance=config.draw.weight_tolerance,
        )

        self._rng = rng or (Random(config.rng_seed) if config.rng_seed is not None else Random())
        self.selector = selector or WeightedSelector(self._rng)

        self._sqlalchemy_storage: AsyncSQLAlchemyStorage | None = None
        self._offline = False
        self.account_store, self.record_store = self._wire_storage(account_store, record_store)
        self._build_services()

        if self._offline:
            logger.warning(OFFLINE_BANNER)

    def _build_services(self) -> None:
        draw = self.config.draw
        self.settlement = SettlementEngine(
            prize_table=self.prize_table,
            selector=self.selector,
            account_store=self.account_store,
            record_store=self.record_store,
            notices=self.notices,
            cost_per_draw=draw.cost_per_draw,
            history_limit=draw.history_limit,
        )
        self.sessions = SessionGate(
            self.account_store,
            self.record_store,
            self.notices,
            starting_points=draw.starting_points,
            staff_passphrase=self.config.staff.passphrase,
            history_limit=draw.history_limit,
            offline=self._offline,
        )
        self.redemption = RedemptionService(self.account_store, self.record_store, self.notices)

    def _load_prize_table(self) -> PrizeTable:
        path = self.config.draw.catalog_path
        if not path:
            return default_prize_table()
        definition = load_prize_table(path)
        if definition.cost_per_draw is not None:
            self.config.draw.cost_per_draw = definition.cost_per_draw
        logger.info("Loaded %s prizes from %s", len(definition.table), path)
        return definition.table

    def _wire_storage(
        self,
        account_store: AccountStore | None,
        record_store: DrawRecordStore | None,
    ) -> tuple[AccountStore, DrawRecordStore]:
        if account_store and record_store:
            return account_store, record_store

        backend = self.config.storage.backend
        if backend == "memory":
            return (
                account_store or InMemoryAccountStore(),
                record_store or InMemoryDrawRecordStore(),
            )
        if backend == "sqlalchemy":
            dsn = self.config.storage.resolve_dsn()
            if not dsn:
                raise ValueError("SQLAlchemy backend requires a DSN")
            storage = AsyncSQLAlchemyStorage(dsn, echo=self.config.storage.echo_sql)
            self._sqlalchemy_storage = storage
            return (
                account_store or storage.account_store(),
                record_store or storage.draw_record_store(),
            )
        if backend == "offline":
            self._offline = True
            return (
                account_store or OfflineAccountStore(),
                record_store or OfflineDrawRecordStore(),
            )
        raise ValueError(f"Unsupported storage backend {backend}")

    @property
    def offline(self) -> bool:
        return self._offline

    def status(self) -> StoreStatus:
        return StoreStatus(backend=self.config.storage.backend, offline=self._offline)

    def snapshot(self) -> dict[str, Any]:
        """Export current configuration for debugging."""
        return {
            "storage": self.config.storage.backend,
            "offline": self._offline,
            "cost_per_draw": self.settlement.cost_per_draw,
            "starting_points": self.config.draw.starting_points,
            "prizes": [prize.prize_id for prize in self.prize_table],
            "total_weight": self.prize_table.total_weight,
        }

    async def init_backend(self) -> None:
        """Create database tables, or switch to offline play if the database is unreachable."""
        if not self._sqlalchemy_storage:
            return
        try:
            await self._sqlalchemy_storage.init_models()
        except StoreUnavailableError as exc:
            await self.notices.emit(
                Severity.WARNING,
                "init backend",
                f"Database unreachable, continuing offline: {exc}",
                backend=self.config.storage.backend,
            )
            self._go_offline()

    def _go_offline(self) -> None:
        self._offline = True
        self.account_store = OfflineAccountStore()
        self.record_store = OfflineDrawRecordStore()
        self._build_services()
        logger.warning(OFFLINE_BANNER)

    async def close(self) -> None:
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.dispose()
