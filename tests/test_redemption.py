import pytest

from gachaforge.domain.notices import NoticeBoard, Severity
from gachaforge.domain.redemption import RedemptionService, is_auto_settled, is_redeemable
from gachaforge.exceptions import (
    AlreadyRedeemedError,
    NotFoundError,
    NotRedeemableError,
    StoreUnavailableError,
)
from gachaforge.storage import (
    InMemoryAccountStore,
    InMemoryDrawRecordStore,
    OfflineAccountStore,
    OfflineDrawRecordStore,
)
from gachaforge.storage.base import DrawRecord


def _record(user_name: str, category: str, value: int = 5, prize_name: str = "Prize") -> DrawRecord:
    return DrawRecord(
        record_id=None,
        user_name=user_name,
        prize_name=prize_name,
        prize_category=category,
        prize_value=value,
    )


@pytest.fixture()
def stores():
    return InMemoryAccountStore(), InMemoryDrawRecordStore(), NoticeBoard()


@pytest.fixture()
def service(stores):
    return RedemptionService(*stores)


def test_redeemable_predicates():
    assert is_redeemable(_record("a", "CASH"))
    assert is_redeemable(_record("a", "VOUCHER"))
    assert is_redeemable(_record("a", "PHYSICAL"))
    assert not is_redeemable(_record("a", "POINT"))
    assert not is_redeemable(_record("a", "EMPTY"))
    assert is_auto_settled(_record("a", "FRAGMENT"))
    assert not is_auto_settled(_record("a", "MYSTERY"))


@pytest.mark.asyncio()
async def test_redeem_marks_record_once(stores, service):
    _, records, notices = stores
    record = await records.insert(_record("yu", "CASH", prize_name="5 yuan red packet"))

    redeemed = await service.redeem(record.record_id)

    assert redeemed.is_redeemed
    assert redeemed.record_id == record.record_id
    assert notices.recent()[-1].operation == "redeem"

    with pytest.raises(AlreadyRedeemedError) as excinfo:
        await service.redeem(record.record_id)
    assert excinfo.value.record_id == record.record_id
    stored = await records.get(record.record_id)
    assert stored == redeemed


@pytest.mark.asyncio()
async def test_redeem_race_reports_already_redeemed(stores):
    accounts, records, notices = stores

    class RacingStore(InMemoryDrawRecordStore):
        async def set_redeemed(self, record_id):
            return None

    racing = RacingStore()
    record = await racing.insert(_record("yu", "VOUCHER"))
    service = RedemptionService(accounts, racing, notices)

    with pytest.raises(AlreadyRedeemedError):
        await service.redeem(record.record_id)
    assert notices.recent() == []


@pytest.mark.asyncio()
async def test_redeem_unknown_record(service):
    with pytest.raises(NotFoundError):
        await service.redeem("999")


@pytest.mark.asyncio()
async def test_auto_settled_records_cannot_be_redeemed(stores, service):
    _, records, _ = stores
    record = await records.insert(_record("yu", "POINT", value=10))
    with pytest.raises(NotRedeemableError):
        await service.redeem(record.record_id)
    assert not (await records.get(record.record_id)).is_redeemed


@pytest.mark.asyncio()
async def test_adjust_points_applies_delta_to_latest_balance(stores, service):
    accounts, _, notices = stores
    account = await accounts.create("zhao", 300)
    # a draw settled after staff loaded the list
    await accounts.update(account.account_id, points=270)

    updated = await service.adjust_points(account.account_id, 50)

    assert updated.points == 320
    assert (await accounts.get(account.account_id)).points == 320
    assert notices.recent(min_severity=Severity.INFO)[-1].context["delta"] == 50

    lowered = await service.adjust_points(account.account_id, -400)
    assert lowered.points == -80


@pytest.mark.asyncio()
async def test_adjust_points_errors(stores, service):
    accounts, _, _ = stores
    account = await accounts.create("qian", 300)
    with pytest.raises(ValueError):
        await service.adjust_points(account.account_id, 0)
    with pytest.raises(NotFoundError):
        await service.adjust_points(404, 10)


@pytest.mark.asyncio()
async def test_offline_store_blocks_staff_operations():
    service = RedemptionService(OfflineAccountStore(), OfflineDrawRecordStore(), NoticeBoard())
    with pytest.raises(StoreUnavailableError):
        await service.redeem("1")
    with pytest.raises(StoreUnavailableError):
        await service.adjust_points(1, 10)
    with pytest.raises(StoreUnavailableError):
        await service.list_pending()


@pytest.mark.asyncio()
async def test_list_pending_skips_settled_and_redeemed(stores, service):
    _, records, _ = stores
    cash = await records.insert(_record("sun", "CASH"))
    await records.insert(_record("sun", "POINT"))
    await records.insert(_record("sun", "FRAGMENT", value=0))
    voucher = await records.insert(_record("li", "VOUCHER"))
    item = await records.insert(_record("sun", "PHYSICAL"))
    await service.redeem(item.record_id)

    pending = await service.list_pending()
    assert [record.record_id for record in pending] == [voucher.record_id, cash.record_id]

    only_sun = await service.list_pending("sun")
    assert [record.record_id for record in only_sun] == [cash.record_id]

    assert len(await service.list_records(limit=2)) == 2


@pytest.mark.asyncio()
async def test_list_accounts_orders_by_points(stores, service):
    accounts, _, _ = stores
    low = await accounts.create("Wang Low", 10)
    high = await accounts.create("wang high", 500)
    await accounts.create("Chen", 300)

    ordered = await service.list_accounts()
    assert [account.points for account in ordered] == [500, 300, 10]

    filtered = await service.list_accounts("WANG")
    assert [account.account_id for account in filtered] == [high.account_id, low.account_id]
