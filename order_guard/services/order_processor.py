"""
Order Processor

Places one order against a product/platform pair:

1. Check availability.
2. Not fulfillable: record the attempt as ``blocked`` and stop; stock is untouched.
3. Fulfillable: take the units out of stock, append a ``sale`` transaction and
   record the attempt as ``confirmed``, all in one commit. Then run the
   auto-block policy, which can never turn a confirmed order into a failure.

The stock decrement is a guarded update (``available_quantity >= qty`` and not
blocked), so two orders that both passed the check cannot oversell: the one
that loses the race is recorded as ``blocked`` with "Insufficient stock".

Every call writes exactly one ``order_management`` row, with status
``confirmed`` or ``blocked``. Partial fulfilment is not attempted.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.enums import OrderStatus, TransactionType
from order_guard.core.exceptions import DatabaseError, ValidationError
from order_guard.core.utils import utc_now
from order_guard.models import OrderManagement
from order_guard.schemas.inventory import OrderRequest, OrderResult
from order_guard.services.auto_block import AutoBlockPolicy
from order_guard.services.availability import (
    INSUFFICIENT_STOCK,
    evaluate_availability,
    validate_quantity,
)
from order_guard.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class OrderProcessor:
    def __init__(
        self,
        db: AsyncSession,
        store: Optional[InventoryStore] = None,
        auto_block: Optional[AutoBlockPolicy] = None,
    ):
        self.db = db
        self.store = store or InventoryStore(db)
        self.auto_block = auto_block or AutoBlockPolicy(db, store=self.store)

    async def process_order(self, request: OrderRequest) -> OrderResult:
        validate_quantity(request.quantity)
        if not request.order_id:
            raise ValidationError("order_id is required")

        product_id, platform, quantity = request.product_id, request.platform, request.quantity

        try:
            inventory = await self.store.get_inventory(product_id, platform)
            availability = evaluate_availability(inventory, quantity)

            if not availability.can_fulfill:
                result = await self._reject(request, availability.available_quantity, availability.block_reason)
                await self.store.commit()
                return result

            updated = await self.store.decrement_available(product_id, platform, quantity)
            if updated is None:
                # Stock or block state changed between the check and the update
                fresh = await self.store.get_inventory(product_id, platform)
                recheck = evaluate_availability(fresh, quantity)
                logger.warning(
                    "Guarded decrement rejected order %s for %s@%s; stock changed since check",
                    request.order_id, product_id, platform,
                )
                result = await self._reject(
                    request,
                    recheck.available_quantity,
                    None if recheck.can_fulfill else recheck.block_reason,
                )
                await self.store.commit()
                return result

            previous_stock = updated.stock_quantity + quantity
            await self.store.record_transaction(
                product_id,
                platform,
                TransactionType.SALE,
                quantity=-quantity,
                previous_stock=previous_stock,
                new_stock=updated.stock_quantity,
                reference_id=request.order_id,
                notes=f"Order {request.order_id}" + (f" for customer {request.customer_id}" if request.customer_id else ""),
            )
            await self._record(
                request,
                quantity_available=availability.available_quantity,
                quantity_fulfilled=quantity,
                status=OrderStatus.CONFIRMED,
            )
            config = await self.store.get_blocking_config(platform)
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to process order %s for %s@%s", request.order_id, product_id, platform)
            await self.store.rollback()
            raise

        available_after = updated.available_quantity
        logger.info(
            "Order %s confirmed: %s x %s on %s (stock %s -> %s)",
            request.order_id, quantity, product_id, platform, previous_stock, updated.stock_quantity,
        )

        await self.auto_block.check_and_auto_block_low_stock(product_id, platform, config)

        return OrderResult(
            success=True,
            order_id=request.order_id,
            order_status=OrderStatus.CONFIRMED,
            quantity_fulfilled=quantity,
            available_quantity=available_after,
            message="Order confirmed",
        )

    async def _reject(
        self, request: OrderRequest, available_quantity: int, block_reason: Optional[str]
    ) -> OrderResult:
        block_reason = block_reason or INSUFFICIENT_STOCK
        await self._record(
            request,
            quantity_available=available_quantity,
            quantity_fulfilled=0,
            status=OrderStatus.BLOCKED,
            block_reason=block_reason,
        )
        logger.info(
            "Order %s blocked for %s@%s: %s",
            request.order_id, request.product_id, request.platform, block_reason,
        )
        return OrderResult(
            success=False,
            order_id=request.order_id,
            order_status=OrderStatus.BLOCKED,
            quantity_fulfilled=0,
            available_quantity=available_quantity,
            block_reason=block_reason,
            message=f"Order could not be placed: {block_reason}",
        )

    async def _record(
        self,
        request: OrderRequest,
        quantity_available: int,
        quantity_fulfilled: int,
        status: OrderStatus,
        block_reason: Optional[str] = None,
    ) -> OrderManagement:
        return await self.store.add(
            OrderManagement(
                order_id=request.order_id,
                customer_id=request.customer_id,
                product_id=request.product_id,
                platform=request.platform,
                quantity_requested=request.quantity,
                quantity_available=quantity_available,
                quantity_fulfilled=quantity_fulfilled,
                order_status=status.value,
                block_reason=block_reason,
                created_at=utc_now(),
            )
        )
