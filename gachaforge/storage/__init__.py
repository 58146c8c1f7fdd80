"""Storage backends for GachaForge."""

from .base import OFFLINE_ACCOUNT_ID, Account, AccountStore, DrawRecord, DrawRecordStore
from .memory import InMemoryAccountStore, InMemoryDrawRecordStore
from .offline import OfflineAccountStore, OfflineDrawRecordStore
from .sqlalchemy import AsyncSQLAlchemyStorage

__all__ = [
    "OFFLINE_ACCOUNT_ID",
    "Account",
    "AccountStore",
    "DrawRecord",
    "DrawRecordStore",
    "InMemoryAccountStore",
    "InMemoryDrawRecordStore",
    "OfflineAccountStore",
    "OfflineDrawRecordStore",
    "AsyncSQLAlchemyStorage",
]
