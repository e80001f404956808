# order_guard/services/stock_service.py
"""
Manual stock operations: restock, returns, reservations and adjustments.

Each operation keeps ``available_quantity == stock_quantity - reserved_quantity``,
appends one ``InventoryTransaction`` and commits once. Quantities change through
SQL expressions or compare-and-set updates, never by writing back values read
earlier, so a sale committed in between is not lost. Operations that lower
availability run the auto-block policy afterwards.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.enums import AlertType, TransactionType
from order_guard.core.exceptions import DatabaseError, InventoryNotFoundError, ValidationError
from order_guard.models import PlatformInventory
from order_guard.services.auto_block import AutoBlockPolicy
from order_guard.services.availability import validate_quantity
from order_guard.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)

CONFLICT_RETRIES = 3


class StockService:
    def __init__(
        self,
        db: AsyncSession,
        store: Optional[InventoryStore] = None,
        auto_block: Optional[AutoBlockPolicy] = None,
    ):
        self.db = db
        self.store = store or InventoryStore(db)
        self.auto_block = auto_block or AutoBlockPolicy(db, store=self.store)

    async def restock(
        self, product_id: str, platform: str, quantity: int, notes: Optional[str] = None
    ) -> PlatformInventory:
        """Add units to stock. An existing block stays in place until unblocked."""
        return await self._add_stock(product_id, platform, quantity, TransactionType.RESTOCK, None, notes)

    async def process_return(
        self,
        product_id: str,
        platform: str,
        quantity: int,
        order_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> PlatformInventory:
        return await self._add_stock(product_id, platform, quantity, TransactionType.RETURN, order_id, notes)

    async def reserve(
        self, product_id: str, platform: str, quantity: int, order_id: Optional[str] = None
    ) -> bool:
        """
        Set aside ``quantity`` units for a pending order.

        Returns False, writing nothing, when the pair is blocked or short of stock.
        """
        validate_quantity(quantity)
        try:
            inventory = await self.store.require_inventory(product_id, platform)
            stock = inventory.stock_quantity
            updated = await self.store.reserve_available(product_id, platform, quantity)
            if updated is None:
                logger.info(
                    "Reservation of %s x %s@%s refused (available=%s, blocked=%s)",
                    quantity, product_id, platform, inventory.available_quantity, inventory.is_order_blocked,
                )
                await self.store.rollback()
                return False

            await self.store.record_transaction(
                product_id,
                platform,
                TransactionType.RESERVATION,
                quantity=quantity,
                previous_stock=stock,
                new_stock=updated.stock_quantity,
                reference_id=order_id,
                notes=f"Reserved {quantity}, reserved total {updated.reserved_quantity}",
            )
            config = await self.store.get_blocking_config(platform)
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to reserve stock for %s@%s", product_id, platform)
            await self.store.rollback()
            raise

        logger.info("Reserved %s x %s@%s (order %s)", quantity, product_id, platform, order_id or "-")
        await self.auto_block.check_and_auto_block_low_stock(product_id, platform, config)
        return True

    async def release(
        self, product_id: str, platform: str, quantity: int, order_id: Optional[str] = None
    ) -> PlatformInventory:
        """Return reserved units to availability. Never releases more than is reserved."""
        validate_quantity(quantity)
        try:
            for _ in range(CONFLICT_RETRIES):
                inventory = await self.store.require_inventory(product_id, platform)
                released = min(quantity, inventory.reserved_quantity)
                if released == 0:
                    logger.info("Nothing reserved for %s@%s; release of %s ignored", product_id, platform, quantity)
                    return inventory
                updated = await self.store.release_reserved(product_id, platform, released)
                if updated is not None:
                    break
                logger.info("Reservation for %s@%s changed during release; retrying", product_id, platform)
            else:
                raise DatabaseError(f"Reservation for {product_id}@{platform} kept changing; release abandoned")

            if released < quantity:
                logger.warning(
                    "Release of %s x %s@%s capped at reserved quantity %s",
                    quantity, product_id, platform, released,
                )
            await self.store.record_transaction(
                product_id,
                platform,
                TransactionType.RELEASE,
                quantity=-released,
                previous_stock=updated.stock_quantity,
                new_stock=updated.stock_quantity,
                reference_id=order_id,
                notes=f"Released {released}, reserved total {updated.reserved_quantity}",
            )
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to release stock for %s@%s", product_id, platform)
            await self.store.rollback()
            raise
        return updated

    async def adjust(
        self, product_id: str, platform: str, new_stock: int, notes: Optional[str] = None
    ) -> PlatformInventory:
        """Set stock to a counted value. It may not drop below what is reserved."""
        if isinstance(new_stock, bool) or not isinstance(new_stock, int) or new_stock < 0:
            raise ValidationError(f"new_stock must be a non-negative integer, got {new_stock!r}")

        try:
            # Compare-and-set on the stock we read, so the ledger delta is never stale
            for _ in range(CONFLICT_RETRIES):
                inventory = await self.store.require_inventory(product_id, platform)
                if new_stock < inventory.reserved_quantity:
                    raise ValidationError(
                        f"new_stock {new_stock} is below reserved quantity {inventory.reserved_quantity}"
                    )
                previous = inventory.stock_quantity
                updated = await self.store.set_stock(product_id, platform, previous, new_stock)
                if updated is not None:
                    break
                logger.info("Stock for %s@%s changed during adjustment; retrying", product_id, platform)
            else:
                raise DatabaseError(f"Stock for {product_id}@{platform} kept changing; adjustment abandoned")

            await self.store.record_transaction(
                product_id,
                platform,
                TransactionType.ADJUSTMENT,
                quantity=new_stock - previous,
                previous_stock=previous,
                new_stock=new_stock,
                notes=notes,
            )
            config = await self.store.get_blocking_config(platform)
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to adjust stock for %s@%s", product_id, platform)
            await self.store.rollback()
            raise

        logger.info("Adjusted stock for %s@%s: %s -> %s", product_id, platform, previous, new_stock)
        if new_stock < previous:
            await self.auto_block.check_and_auto_block_low_stock(product_id, platform, config)
            # The policy may have blocked the pair, or rolled back and expired the row
            return await self.store.require_inventory(product_id, platform)
        return updated

    async def _add_stock(
        self,
        product_id: str,
        platform: str,
        quantity: int,
        transaction_type: TransactionType,
        reference_id: Optional[str],
        notes: Optional[str],
    ) -> PlatformInventory:
        validate_quantity(quantity)
        try:
            await self.store.require_inventory(product_id, platform)
            inventory = await self.store.add_stock(product_id, platform, quantity)
            if inventory is None:
                raise InventoryNotFoundError(product_id, platform)
            previous = inventory.stock_quantity - quantity

            await self.store.record_transaction(
                product_id,
                platform,
                transaction_type,
                quantity=quantity,
                previous_stock=previous,
                new_stock=inventory.stock_quantity,
                reference_id=reference_id,
                notes=notes,
            )
            if transaction_type is TransactionType.RESTOCK:
                await self.store.record_alert(
                    product_id,
                    platform,
                    AlertType.RESTOCKED,
                    f"{product_id} restocked on {platform}: {previous} -> {inventory.stock_quantity}",
                    details={"quantity": quantity, "still_blocked": bool(inventory.is_order_blocked)},
                )
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to add stock for %s@%s", product_id, platform)
            await self.store.rollback()
            raise

        logger.info(
            "%s of %s x %s@%s (stock %s -> %s)",
            transaction_type.value, quantity, product_id, platform, previous, inventory.stock_quantity,
        )
        return inventory
