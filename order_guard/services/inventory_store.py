# order_guard/services/inventory_store.py
"""
Inventory Record Store

Thin data-access layer over the order-blocking tables. Every storage call is
bounded by ``STORAGE_TIMEOUT_SECONDS`` and any driver/ORM failure surfaces as
``DatabaseError`` so callers only have one failure type to handle.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.config import get_settings
from order_guard.core.enums import AlertSeverity, AlertType, TransactionType
from order_guard.core.exceptions import DatabaseError, InventoryNotFoundError, StorageTimeoutError
from order_guard.core.utils import utc_now
from order_guard.models import (
    InventoryAlert,
    InventoryTransaction,
    OrderBlock,
    PlatformIntegration,
    PlatformInventory,
)
from order_guard.schemas.inventory import PlatformBlockingConfig

logger = logging.getLogger(__name__)


class InventoryStore:
    def __init__(self, db: AsyncSession, timeout: Optional[float] = None):
        self.db = db
        self.timeout = timeout if timeout is not None else get_settings().STORAGE_TIMEOUT_SECONDS

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    async def _bounded(self, awaitable, operation: str):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Storage call '%s' timed out after %ss", operation, self.timeout)
            raise StorageTimeoutError(f"{operation} timed out after {self.timeout}s") from exc
        except SQLAlchemyError as exc:
            logger.error("Storage call '%s' failed: %s", operation, exc)
            raise DatabaseError(f"{operation} failed: {exc}") from exc

    async def execute(self, statement, operation: str = "execute"):
        return await self._bounded(self.db.execute(statement), operation)

    async def add(self, instance):
        self.db.add(instance)
        await self._bounded(self.db.flush(), f"insert {instance.__tablename__}")
        return instance

    async def flush(self):
        await self._bounded(self.db.flush(), "flush")

    async def commit(self):
        await self._bounded(self.db.commit(), "commit")

    async def rollback(self):
        try:
            await self._bounded(self.db.rollback(), "rollback")
        except DatabaseError:
            # The original failure is what the caller needs to see
            logger.exception("Rollback failed")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def get_inventory(self, product_id: str, platform: str) -> Optional[PlatformInventory]:
        """Fetch the inventory row, always refreshing any copy already in the session."""
        result = await self.execute(
            select(PlatformInventory)
            .where(
                PlatformInventory.product_id == product_id,
                PlatformInventory.platform == platform,
            )
            .execution_options(populate_existing=True),
            "select platform_inventory",
        )
        return result.scalars().first()

    async def require_inventory(self, product_id: str, platform: str) -> PlatformInventory:
        inventory = await self.get_inventory(product_id, platform)
        if inventory is None:
            raise InventoryNotFoundError(product_id, platform)
        return inventory

    async def get_integration(self, platform: str) -> Optional[PlatformIntegration]:
        result = await self.execute(
            select(PlatformIntegration)
            .where(PlatformIntegration.platform == platform)
            .execution_options(populate_existing=True),
            "select platform_integrations",
        )
        return result.scalars().first()

    async def get_blocking_config(self, platform: str) -> PlatformBlockingConfig:
        integration = await self.get_integration(platform)
        if integration is None:
            return PlatformBlockingConfig.disabled(platform)
        return PlatformBlockingConfig.model_validate(integration)

    async def get_active_blocks(self, product_id: str, platform: str) -> List[OrderBlock]:
        result = await self.execute(
            select(OrderBlock)
            .where(
                OrderBlock.product_id == product_id,
                OrderBlock.platform == platform,
                OrderBlock.is_active.is_(True),
            )
            .order_by(OrderBlock.block_date.desc()),
            "select order_blocks",
        )
        return list(result.scalars().all())

    async def has_open_alert(self, product_id: str, platform: str, alert_type: AlertType) -> bool:
        result = await self.execute(
            select(InventoryAlert.id)
            .where(
                InventoryAlert.product_id == product_id,
                InventoryAlert.platform == platform,
                InventoryAlert.alert_type == alert_type.value,
                InventoryAlert.is_resolved.is_(False),
            )
            .limit(1),
            "select open inventory_alert",
        )
        return result.first() is not None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def decrement_available(
        self, product_id: str, platform: str, quantity: int
    ) -> Optional[PlatformInventory]:
        """
        Atomically take ``quantity`` units out of stock.

        The update only matches when the row is unblocked and still has at least
        ``quantity`` available, so two orders racing for the same units cannot
        drive ``available_quantity`` below zero. Returns the refreshed row, or
        None when the guard did not match.
        """
        result = await self.execute(
            update(PlatformInventory)
            .where(
                PlatformInventory.product_id == product_id,
                PlatformInventory.platform == platform,
                PlatformInventory.available_quantity >= quantity,
                PlatformInventory.is_order_blocked.is_(False),
            )
            .values(
                stock_quantity=PlatformInventory.stock_quantity - quantity,
                available_quantity=PlatformInventory.available_quantity - quantity,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False),
            "decrement platform_inventory",
        )
        if result.rowcount != 1:
            return None
        return await self.get_inventory(product_id, platform)

    async def reserve_available(
        self, product_id: str, platform: str, quantity: int
    ) -> Optional[PlatformInventory]:
        """Move ``quantity`` from available to reserved under the same guard as a sale."""
        result = await self.execute(
            update(PlatformInventory)
            .where(
                PlatformInventory.product_id == product_id,
                PlatformInventory.platform == platform,
                PlatformInventory.available_quantity >= quantity,
                PlatformInventory.is_order_blocked.is_(False),
            )
            .values(
                reserved_quantity=PlatformInventory.reserved_quantity + quantity,
                available_quantity=PlatformInventory.available_quantity - quantity,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False),
            "reserve platform_inventory",
        )
        if result.rowcount != 1:
            return None
        return await self.get_inventory(product_id, platform)

    async def add_stock(self, product_id: str, platform: str, quantity: int) -> Optional[PlatformInventory]:
        """Add ``quantity`` units in the database itself, so concurrent sales are never overwritten."""
        result = await self.execute(
            update(PlatformInventory)
            .where(
                PlatformInventory.product_id == product_id,
                PlatformInventory.platform == platform,
            )
            .values(
                stock_quantity=PlatformInventory.stock_quantity + quantity,
                available_quantity=PlatformInventory.available_quantity + quantity,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False),
            "add stock platform_inventory",
        )
        if result.rowcount != 1:
            return None
        return await self.get_inventory(product_id, platform)

    async def release_reserved(
        self, product_id: str, platform: str, quantity: int
    ) -> Optional[PlatformInventory]:
        """Move ``quantity`` from reserved back to available. None when less than that is reserved."""
        result = await self.execute(
            update(PlatformInventory)
            .where(
                PlatformInventory.product_id == product_id,
                PlatformInventory.platform == platform,
                PlatformInventory.reserved_quantity >= quantity,
            )
            .values(
                reserved_quantity=PlatformInventory.reserved_quantity - quantity,
                available_quantity=PlatformInventory.available_quantity + quantity,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False),
            "release platform_inventory",
        )
        if result.rowcount != 1:
            return None
        return await self.get_inventory(product_id, platform)

    async def set_stock(
        self, product_id: str, platform: str, expected_stock: int, new_stock: int
    ) -> Optional[PlatformInventory]:
        """
        Overwrite stock with a counted value, but only if it still equals
        ``expected_stock``. Returns None when another writer got there first
        or the count would fall below what is reserved.
        """
        result = await self.execute(
            update(PlatformInventory)
            .where(
                PlatformInventory.product_id == product_id,
                PlatformInventory.platform == platform,
                PlatformInventory.stock_quantity == expected_stock,
                PlatformInventory.reserved_quantity <= new_stock,
            )
            .values(
                stock_quantity=new_stock,
                available_quantity=new_stock - PlatformInventory.reserved_quantity,
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False),
            "set stock platform_inventory",
        )
        if result.rowcount != 1:
            return None
        return await self.get_inventory(product_id, platform)

    async def close_active_blocks(
        self,
        product_id: str,
        platform: str,
        when: datetime,
        unblock_reason: Optional[str] = None,
    ) -> int:
        """Deactivate every active block row for the pair. Returns the number closed."""
        result = await self.execute(
            update(OrderBlock)
            .where(
                OrderBlock.product_id == product_id,
                OrderBlock.platform == platform,
                OrderBlock.is_active.is_(True),
            )
            .values(is_active=False, unblock_date=when, unblock_reason=unblock_reason)
            .execution_options(synchronize_session="fetch"),
            "close order_blocks",
        )
        return result.rowcount or 0

    async def record_transaction(
        self,
        product_id: str,
        platform: str,
        transaction_type: TransactionType,
        quantity: int,
        previous_stock: int,
        new_stock: int,
        reference_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> InventoryTransaction:
        return await self.add(
            InventoryTransaction(
                product_id=product_id,
                platform=platform,
                transaction_type=transaction_type.value,
                quantity=quantity,
                previous_stock=previous_stock,
                new_stock=new_stock,
                reference_id=reference_id,
                notes=notes,
                created_at=utc_now(),
            )
        )

    async def record_alert(
        self,
        product_id: str,
        platform: str,
        alert_type: AlertType,
        message: str,
        severity: AlertSeverity = AlertSeverity.INFO,
        details: Optional[Dict[str, Any]] = None,
    ) -> InventoryAlert:
        return await self.add(
            InventoryAlert(
                product_id=product_id,
                platform=platform,
                alert_type=alert_type.value,
                severity=severity.value,
                message=message,
                details=details,
                created_at=utc_now(),
            )
        )
