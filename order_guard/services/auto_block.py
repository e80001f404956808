# order_guard/services/auto_block.py
"""
Auto-Block Policy Evaluator

Runs after a stock-decreasing change has been committed. It raises a
``low_stock``/``out_of_stock`` alert when availability is at or under the
platform threshold, then blocks further orders when the platform has opted in.
It is best-effort: whatever goes wrong here is logged and swallowed, because
the change that triggered it has already succeeded.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.enums import BlockReason, BlockType
from order_guard.models import PlatformInventory
from order_guard.schemas.inventory import PlatformBlockingConfig
from order_guard.services.inventory_store import InventoryStore
from order_guard.services.order_blocking import OrderBlockingService
from order_guard.services.stock_alerts import classify_stock_level

logger = logging.getLogger(__name__)


class AutoBlockPolicy:
    def __init__(
        self,
        db: AsyncSession,
        store: Optional[InventoryStore] = None,
        blocking: Optional[OrderBlockingService] = None,
    ):
        self.db = db
        self.store = store or InventoryStore(db)
        self.blocking = blocking or OrderBlockingService(db, store=self.store)

    async def check_and_auto_block_low_stock(
        self, product_id: str, platform: str, config: PlatformBlockingConfig
    ) -> None:
        """
        Apply ``config`` to the current stock of a product/platform pair.

        Never raises.
        """
        try:
            inventory = await self.store.get_inventory(product_id, platform)
            if inventory is None:
                logger.debug("Auto-block skipped: no inventory for %s@%s", product_id, platform)
                return
            await self._raise_stock_alert(inventory, config)
            await self._evaluate(inventory, config)
        except Exception:
            logger.exception("Auto-block evaluation failed for %s@%s", product_id, platform)
            await self.store.rollback()

    async def _raise_stock_alert(self, inventory: PlatformInventory, config: PlatformBlockingConfig) -> None:
        """One open alert per type and pair; resolving it lets the next crossing alert again."""
        alert = classify_stock_level(
            inventory.product_id, inventory.platform, inventory.available_quantity, config.low_stock_threshold
        )
        if alert is None:
            return
        if await self.store.has_open_alert(inventory.product_id, inventory.platform, alert.alert_type):
            return

        await self.store.record_alert(
            inventory.product_id,
            inventory.platform,
            alert.alert_type,
            alert.message,
            severity=alert.severity,
            details={
                "available_quantity": inventory.available_quantity,
                "low_stock_threshold": config.low_stock_threshold,
            },
        )
        await self.store.commit()
        logger.info(
            "%s alert (%s) for %s@%s",
            alert.alert_type.value, alert.severity.value, inventory.product_id, inventory.platform,
        )

    async def _evaluate(self, inventory: PlatformInventory, config: PlatformBlockingConfig) -> None:
        if not config.auto_block_low_stock:
            return

        product_id, platform = inventory.product_id, inventory.platform
        available = inventory.available_quantity
        threshold = config.low_stock_threshold

        if available <= threshold and not inventory.is_order_blocked:
            await self.blocking.block_orders(
                product_id,
                platform,
                BlockReason.LOW_STOCK,
                BlockType.AUTOMATIC,
                notes=(
                    f"Auto-blocked due to low stock: available quantity {available} "
                    f"is at or below threshold {threshold}"
                ),
            )
            inventory = await self.store.get_inventory(product_id, platform)

        # Usually suppressed by the low-stock block above when available hits zero
        if (
            inventory.available_quantity == 0
            and config.auto_block_out_of_stock
            and not inventory.is_order_blocked
        ):
            await self.blocking.block_orders(
                product_id,
                platform,
                BlockReason.OUT_OF_STOCK,
                BlockType.AUTOMATIC,
                notes="Auto-blocked due to out of stock",
            )
