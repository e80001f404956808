# order_guard/services/availability.py
"""
Availability Checker

Decides whether an order for a product on a platform can be fulfilled.
Blocked, out of stock and unknown products are ordinary answers, returned as
``AvailabilityResult`` values; only storage failures raise.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.exceptions import ValidationError
from order_guard.models import PlatformInventory
from order_guard.schemas.inventory import AvailabilityResult
from order_guard.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND = "Product not found on platform"
ORDER_TEMPORARILY_BLOCKED = "Order temporarily blocked"
INSUFFICIENT_STOCK = "Insufficient stock"


def validate_quantity(quantity, field: str = "quantity") -> int:
    """Reject anything but a positive integer before touching storage."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(f"{field} must be an integer, got {quantity!r}")
    if quantity <= 0:
        raise ValidationError(f"{field} must be greater than 0, got {quantity}")
    return quantity


def evaluate_availability(
    inventory: Optional[PlatformInventory], quantity: int
) -> AvailabilityResult:
    """First match wins: missing row, active block, enough stock, otherwise insufficient."""
    if inventory is None:
        return AvailabilityResult(
            can_fulfill=False,
            available_quantity=0,
            requested_quantity=quantity,
            block_reason=PRODUCT_NOT_FOUND,
        )

    base = dict(
        available_quantity=inventory.available_quantity,
        requested_quantity=quantity,
        estimated_restock_date=inventory.auto_unblock_date,
    )

    if inventory.is_order_blocked:
        return AvailabilityResult(
            can_fulfill=False,
            block_reason=inventory.order_block_reason or ORDER_TEMPORARILY_BLOCKED,
            **base,
        )

    if inventory.available_quantity >= quantity:
        return AvailabilityResult(can_fulfill=True, **base)

    return AvailabilityResult(can_fulfill=False, block_reason=INSUFFICIENT_STOCK, **base)


class AvailabilityService:
    def __init__(self, db: AsyncSession, store: Optional[InventoryStore] = None):
        self.db = db
        self.store = store or InventoryStore(db)

    async def check_order_availability(
        self, product_id: str, platform: str, quantity: int
    ) -> AvailabilityResult:
        validate_quantity(quantity)
        inventory = await self.store.get_inventory(product_id, platform)
        result = evaluate_availability(inventory, quantity)
        logger.debug(
            "Availability %s@%s qty=%s -> can_fulfill=%s (%s)",
            product_id, platform, quantity, result.can_fulfill, result.block_reason or "ok",
        )
        return result
