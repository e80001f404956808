# tests/unit/services/test_availability.py
import pytest
from datetime import timedelta

from order_guard.core.exceptions import ValidationError
from order_guard.core.utils import utc_now
from order_guard.models import PlatformInventory
from order_guard.services.availability import (
    INSUFFICIENT_STOCK,
    ORDER_TEMPORARILY_BLOCKED,
    PRODUCT_NOT_FOUND,
    AvailabilityService,
    evaluate_availability,
    validate_quantity,
)


def _row(available=10, blocked=False, reason=None, auto_unblock_date=None):
    return PlatformInventory(
        product_id="SKU-1",
        platform="shopify",
        stock_quantity=available,
        reserved_quantity=0,
        available_quantity=available,
        is_order_blocked=blocked,
        order_block_reason=reason,
        auto_unblock_date=auto_unblock_date,
    )


# --- evaluate_availability (pure) ---

def test_missing_row_is_not_found():
    result = evaluate_availability(None, 3)
    assert result.can_fulfill is False
    assert result.available_quantity == 0
    assert result.requested_quantity == 3
    assert result.block_reason == PRODUCT_NOT_FOUND


def test_block_wins_over_sufficient_stock():
    """A blocked pair reports its block reason even with plenty of stock."""
    result = evaluate_availability(_row(available=20, blocked=True, reason="maintenance"), 1)
    assert result.can_fulfill is False
    assert result.block_reason == "maintenance"
    assert result.available_quantity == 20


def test_block_without_reason_uses_generic_message():
    result = evaluate_availability(_row(blocked=True, reason=None), 1)
    assert result.block_reason == ORDER_TEMPORARILY_BLOCKED


def test_block_echoes_auto_unblock_date():
    when = utc_now() + timedelta(days=2)
    result = evaluate_availability(_row(blocked=True, reason="supplier_delay", auto_unblock_date=when), 1)
    assert result.estimated_restock_date == when


@pytest.mark.parametrize("available,quantity,expected", [(5, 5, True), (5, 4, True), (5, 6, False)])
def test_stock_comparison_is_inclusive(available, quantity, expected):
    result = evaluate_availability(_row(available=available), quantity)
    assert result.can_fulfill is expected
    assert result.block_reason == (None if expected else INSUFFICIENT_STOCK)


@pytest.mark.parametrize("bad", [0, -1, 1.5, "2", True, None])
def test_validate_quantity_rejects_non_positive_integers(bad):
    with pytest.raises(ValidationError):
        validate_quantity(bad)


# --- AvailabilityService against the database ---

@pytest.mark.asyncio
async def test_check_order_availability_scenario_blocked_reason(db_session, make_inventory):
    await make_inventory(stock=20, blocked=True, block_reason="maintenance")

    result = await AvailabilityService(db_session).check_order_availability("SKU-1", "shopify", 1)

    assert result.can_fulfill is False
    assert result.block_reason == "maintenance"


@pytest.mark.asyncio
async def test_check_order_availability_unknown_product(db_session):
    result = await AvailabilityService(db_session).check_order_availability("NOPE", "etsy", 1)
    assert result.can_fulfill is False
    assert result.block_reason == PRODUCT_NOT_FOUND


@pytest.mark.asyncio
async def test_check_order_availability_uses_available_not_stock(db_session, make_inventory):
    await make_inventory(stock=10, reserved=7)

    service = AvailabilityService(db_session)

    assert (await service.check_order_availability("SKU-1", "shopify", 3)).can_fulfill is True
    short = await service.check_order_availability("SKU-1", "shopify", 4)
    assert short.can_fulfill is False
    assert short.block_reason == INSUFFICIENT_STOCK
    assert short.available_quantity == 3


@pytest.mark.asyncio
async def test_check_order_availability_validates_before_storage(mocker):
    store = mocker.AsyncMock()
    service = AvailabilityService(db=mocker.AsyncMock(), store=store)

    with pytest.raises(ValidationError):
        await service.check_order_availability("SKU-1", "shopify", 0)

    store.get_inventory.assert_not_awaited()
