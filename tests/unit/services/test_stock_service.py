# tests/unit/services/test_stock_service.py
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from order_guard.core.enums import AlertType, TransactionType
from order_guard.core.exceptions import InventoryNotFoundError, ValidationError
from order_guard.database import Base
from order_guard.models import InventoryAlert, InventoryTransaction, OrderBlock, PlatformInventory
from order_guard.schemas.inventory import OrderRequest
from order_guard.services.auto_block import AutoBlockPolicy
from order_guard.services.inventory_store import InventoryStore
from order_guard.services.order_blocking import OrderBlockingService
from order_guard.services.order_processor import OrderProcessor
from order_guard.services.stock_service import StockService


def _service(db_session, notifier):
    store = InventoryStore(db_session)
    blocking = OrderBlockingService(db_session, store=store, notifier=notifier)
    return StockService(db_session, store=store, auto_block=AutoBlockPolicy(db_session, store=store, blocking=blocking))


async def _transactions(db_session):
    result = await db_session.execute(select(InventoryTransaction).order_by(InventoryTransaction.id))
    return list(result.scalars().all())


async def _inventory(db_session):
    result = await db_session.execute(select(PlatformInventory).execution_options(populate_existing=True))
    return result.scalars().one()


@pytest.mark.asyncio
async def test_restock_adds_stock_and_raises_alert(db_session, make_inventory, notifier):
    await make_inventory(stock=2, reserved=1)

    inventory = await _service(db_session, notifier).restock("SKU-1", "shopify", 8, notes="PO-77")

    assert (inventory.stock_quantity, inventory.reserved_quantity, inventory.available_quantity) == (10, 1, 9)
    [txn] = await _transactions(db_session)
    assert txn.transaction_type == TransactionType.RESTOCK.value
    assert (txn.quantity, txn.previous_stock, txn.new_stock) == (8, 2, 10)

    alerts = (await db_session.execute(select(InventoryAlert))).scalars().all()
    assert [a.alert_type for a in alerts] == [AlertType.RESTOCKED.value]


@pytest.mark.asyncio
async def test_restock_keeps_existing_block(db_session, make_inventory, notifier):
    await make_inventory(stock=0, blocked=True, block_reason="out_of_stock")

    inventory = await _service(db_session, notifier).restock("SKU-1", "shopify", 5)

    assert inventory.is_order_blocked is True
    assert inventory.available_quantity == 5


@pytest.mark.asyncio
async def test_process_return_references_order(db_session, make_inventory, notifier):
    await make_inventory(stock=4)

    await _service(db_session, notifier).process_return("SKU-1", "shopify", 1, order_id="ORD-3")

    [txn] = await _transactions(db_session)
    assert txn.transaction_type == TransactionType.RETURN.value
    assert txn.reference_id == "ORD-3"
    assert (await _inventory(db_session)).available_quantity == 5


@pytest.mark.asyncio
async def test_reserve_moves_units_out_of_available(db_session, make_inventory, notifier):
    await make_inventory(stock=10)

    assert await _service(db_session, notifier).reserve("SKU-1", "shopify", 4, order_id="ORD-1") is True

    inventory = await _inventory(db_session)
    assert (inventory.stock_quantity, inventory.reserved_quantity, inventory.available_quantity) == (10, 4, 6)
    [txn] = await _transactions(db_session)
    assert txn.transaction_type == TransactionType.RESERVATION.value


@pytest.mark.asyncio
@pytest.mark.parametrize("blocked,quantity", [(False, 11), (True, 1)])
async def test_reserve_refuses_when_short_or_blocked(db_session, make_inventory, notifier, blocked, quantity):
    await make_inventory(stock=10, blocked=blocked, block_reason="maintenance" if blocked else None)

    assert await _service(db_session, notifier).reserve("SKU-1", "shopify", quantity) is False

    inventory = await _inventory(db_session)
    assert inventory.reserved_quantity == 0
    assert await _transactions(db_session) == []


@pytest.mark.asyncio
async def test_reserve_can_trigger_auto_block(db_session, make_inventory, make_integration, notifier):
    await make_inventory(stock=10)
    await make_integration(auto_block_low_stock=True, low_stock_threshold=3)

    await _service(db_session, notifier).reserve("SKU-1", "shopify", 7)

    blocks = (await db_session.execute(select(OrderBlock))).scalars().all()
    assert [b.reason for b in blocks] == ["low_stock"]


@pytest.mark.asyncio
async def test_release_is_capped_at_reserved(db_session, make_inventory, notifier):
    await make_inventory(stock=10, reserved=3)

    inventory = await _service(db_session, notifier).release("SKU-1", "shopify", 5)

    assert (inventory.reserved_quantity, inventory.available_quantity) == (0, 10)
    [txn] = await _transactions(db_session)
    assert txn.transaction_type == TransactionType.RELEASE.value
    assert txn.quantity == -3


@pytest.mark.asyncio
async def test_adjust_sets_counted_stock(db_session, make_inventory, notifier):
    await make_inventory(stock=10, reserved=2)

    inventory = await _service(db_session, notifier).adjust("SKU-1", "shopify", 7, notes="cycle count")

    assert (inventory.stock_quantity, inventory.available_quantity) == (7, 5)
    [txn] = await _transactions(db_session)
    assert (txn.quantity, txn.previous_stock, txn.new_stock) == (-3, 10, 7)


@pytest.mark.asyncio
async def test_adjust_below_reserved_is_rejected(db_session, make_inventory, notifier):
    await make_inventory(stock=10, reserved=4)

    with pytest.raises(ValidationError):
        await _service(db_session, notifier).adjust("SKU-1", "shopify", 3)

    assert (await _inventory(db_session)).stock_quantity == 10


@pytest.mark.asyncio
async def test_adjust_down_runs_auto_block(db_session, make_inventory, make_integration, notifier):
    await make_inventory(stock=20)
    await make_integration(auto_block_low_stock=True, low_stock_threshold=5)

    inventory = await _service(db_session, notifier).adjust("SKU-1", "shopify", 4)

    assert inventory.is_order_blocked is True
    assert inventory.order_block_reason == "low_stock"


@pytest.mark.asyncio
async def test_adjust_up_does_not_run_auto_block(db_session, make_inventory, make_integration, notifier, mocker):
    await make_inventory(stock=1)
    await make_integration(auto_block_low_stock=True, low_stock_threshold=5)
    service = _service(db_session, notifier)
    spy = mocker.spy(service.auto_block, "check_and_auto_block_low_stock")

    await service.adjust("SKU-1", "shopify", 3)

    spy.assert_not_called()


@pytest.mark.asyncio
async def test_operations_on_missing_inventory_raise(db_session, notifier):
    service = _service(db_session, notifier)

    with pytest.raises(InventoryNotFoundError):
        await service.restock("GHOST", "shopify", 1)
    with pytest.raises(InventoryNotFoundError):
        await service.reserve("GHOST", "shopify", 1)


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", [0, -2, True])
async def test_stock_quantities_are_validated(db_session, make_inventory, notifier, bad):
    await make_inventory()

    with pytest.raises(ValidationError):
        await _service(db_session, notifier).restock("SKU-1", "shopify", bad)


@pytest.mark.asyncio
async def test_release_with_nothing_reserved_writes_no_ledger_row(db_session, make_inventory, notifier):
    await make_inventory(stock=10, reserved=0)

    inventory = await _service(db_session, notifier).release("SKU-1", "shopify", 2)

    assert (inventory.reserved_quantity, inventory.available_quantity) == (0, 10)
    assert await _transactions(db_session) == []


# --- Concurrent writers: a second session commits between our read and our write ---

@pytest.fixture
async def two_sessions(tmp_path):
    """Two sessions on one file-backed database, so each commits independently."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'stock.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as first, session_factory() as second:
        first.add(PlatformInventory(
            product_id="SKU-1",
            platform="shopify",
            stock_quantity=10,
            reserved_quantity=5,
            available_quantity=5,
        ))
        await first.commit()
        yield first, second

    await engine.dispose()


def _interleave_after_first_read(mocker, service, other_write):
    """Run ``other_write`` right after the service's first inventory read."""
    original = service.store.require_inventory
    calls = []

    async def read_then_interleave(product_id, platform):
        inventory = await original(product_id, platform)
        calls.append(product_id)
        if len(calls) == 1:
            await other_write()
        return inventory

    mocker.patch.object(service.store, "require_inventory", side_effect=read_then_interleave)


async def _sell(session, quantity, order_id="ORD-X"):
    result = await OrderProcessor(session).process_order(
        OrderRequest(order_id=order_id, product_id="SKU-1", platform="shopify", quantity=quantity)
    )
    assert result.success is True


async def _ledger(session, transaction_type):
    result = await session.execute(
        select(InventoryTransaction).where(InventoryTransaction.transaction_type == transaction_type.value)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_restock_keeps_a_sale_committed_after_its_read(two_sessions, notifier, mocker):
    first, second = two_sessions
    service = _service(first, notifier)
    _interleave_after_first_read(mocker, service, lambda: _sell(second, 4))

    inventory = await service.restock("SKU-1", "shopify", 5)

    assert (inventory.stock_quantity, inventory.available_quantity) == (11, 6)
    [restock] = await _ledger(first, TransactionType.RESTOCK)
    assert (restock.previous_stock, restock.new_stock) == (6, 11)
    [sale] = await _ledger(first, TransactionType.SALE)
    assert (sale.previous_stock, sale.new_stock) == (10, 6)


@pytest.mark.asyncio
async def test_return_keeps_a_sale_committed_after_its_read(two_sessions, notifier, mocker):
    first, second = two_sessions
    service = _service(first, notifier)
    _interleave_after_first_read(mocker, service, lambda: _sell(second, 2))

    inventory = await service.process_return("SKU-1", "shopify", 1, order_id="ORD-R")

    assert inventory.stock_quantity == 9
    [returned] = await _ledger(first, TransactionType.RETURN)
    assert (returned.previous_stock, returned.new_stock) == (8, 9)


@pytest.mark.asyncio
async def test_adjust_retries_when_stock_moves_under_it(two_sessions, notifier, mocker):
    first, second = two_sessions
    service = _service(first, notifier)
    _interleave_after_first_read(mocker, service, lambda: _sell(second, 4))

    inventory = await service.adjust("SKU-1", "shopify", 8, notes="cycle count")

    assert (inventory.stock_quantity, inventory.reserved_quantity, inventory.available_quantity) == (8, 5, 3)
    [adjustment] = await _ledger(first, TransactionType.ADJUSTMENT)
    assert (adjustment.quantity, adjustment.previous_stock, adjustment.new_stock) == (2, 6, 8)


@pytest.mark.asyncio
async def test_release_recomputes_when_reservation_moves_under_it(two_sessions, notifier, mocker):
    first, second = two_sessions
    service = _service(first, notifier)

    async def release_elsewhere():
        await _service(second, notifier).release("SKU-1", "shopify", 3)

    _interleave_after_first_read(mocker, service, release_elsewhere)

    inventory = await service.release("SKU-1", "shopify", 5)

    assert (inventory.reserved_quantity, inventory.available_quantity) == (0, 10)
    released = [t.quantity for t in await _ledger(first, TransactionType.RELEASE)]
    assert sorted(released) == [-3, -2]
