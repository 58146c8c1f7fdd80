"""Account resolution and role gating for students and staff."""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from typing import Union

from .notices import NoticeBoard, Severity
from ..exceptions import AuthenticationError, StoreError, StoreUnavailableError
from ..storage.base import OFFLINE_ACCOUNT_ID, Account, AccountStore, DrawRecord, DrawRecordStore

logger = logging.getLogger(__name__)

DEFAULT_STARTING_POINTS = 300


@dataclass(slots=True, frozen=True)
class StudentLogin:
    name: str


@dataclass(slots=True, frozen=True)
class StaffLogin:
    passphrase: str = field(repr=False)


LoginRequest = Union[StudentLogin, StaffLogin]


@dataclass(slots=True)
class StudentSession:
    """Context object carried through draws for one logged-in student."""

    account: Account
    history: list[DrawRecord] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.account.name

    @property
    def offline(self) -> bool:
        return not self.account.is_persisted


@dataclass(slots=True)
class StaffSession:
    offline: bool = False


Session = Union[StudentSession, StaffSession]


class SessionGate:
    """Resolve display names to accounts and check the staff passphrase."""

    def __init__(
        self,
        account_store: AccountStore,
        record_store: DrawRecordStore,
        notices: NoticeBoard,
        *,
        starting_points: int = DEFAULT_STARTING_POINTS,
        staff_passphrase: str = "",
        history_limit: int = 10,
        offline: bool = False,
    ) -> None:
        self._accounts = account_store
        self._records = record_store
        self._notices = notices
        self._starting_points = starting_points
        self._staff_passphrase = staff_passphrase
        self._history_limit = history_limit
        self._offline = offline

    async def resolve_account(self, display_name: str) -> Account:
        name = display_name.strip()
        if not name:
            raise ValueError("Display name must not be empty")
        try:
            account = await self._accounts.find_by_name(name)
            if account is None:
                account = await self._accounts.create(name, self._starting_points)
                logger.info("Created account %s for %r", account.account_id, name)
            return account
        except StoreUnavailableError as exc:
            await self._notices.emit(
                Severity.WARNING,
                "resolve account",
                f"Store unavailable, {name!r} plays offline and nothing will be saved",
                name=name,
                error=str(exc),
            )
            return Account(
                account_id=OFFLINE_ACCOUNT_ID,
                name=name,
                points=self._starting_points,
            )

    def authenticate_staff(self, secret: str) -> bool:
        if not self._staff_passphrase:
            logger.warning("Staff login attempted but no staff passphrase is configured")
            return False
        return hmac.compare_digest(secret.encode("utf-8"), self._staff_passphrase.encode("utf-8"))

    async def login(self, request: LoginRequest) -> Session:
        if isinstance(request, StudentLogin):
            account = await self.resolve_account(request.name)
            return StudentSession(account=account, history=await self._load_history(account))
        if isinstance(request, StaffLogin):
            if not self.authenticate_staff(request.passphrase):
                raise AuthenticationError("Wrong staff passphrase")
            return StaffSession(offline=self._offline)
        raise TypeError(f"Unsupported login request {type(request).__name__}")

    async def _load_history(self, account: Account) -> list[DrawRecord]:
        if not account.is_persisted:
            return []
        try:
            records = await self._records.list_records(account.name, limit=self._history_limit)
        except StoreError as exc:
            logger.warning("Could not load draw history for %r: %s", account.name, exc)
            return []
        return list(records)
