# order_guard/services/inventory_queries.py
"""Read side used by the dashboard: blocked orders, low stock, metrics and alerts."""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.config import get_settings
from order_guard.core.enums import OrderStatus
from order_guard.core.exceptions import AlertNotFoundError, DatabaseError
from order_guard.core.utils import utc_now
from order_guard.models import (
    InventoryAlert,
    InventoryTransaction,
    OrderManagement,
    PlatformIntegration,
    PlatformInventory,
)
from order_guard.schemas.inventory import InventoryMetrics
from order_guard.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class InventoryQueryService:
    def __init__(self, db: AsyncSession, store: Optional[InventoryStore] = None):
        self.db = db
        self.store = store or InventoryStore(db)
        self.default_threshold = get_settings().DEFAULT_LOW_STOCK_THRESHOLD

    async def get_inventory(self, product_id: str, platform: str) -> PlatformInventory:
        return await self.store.require_inventory(product_id, platform)

    async def list_inventory(self, platform: Optional[str] = None) -> List[PlatformInventory]:
        query = select(PlatformInventory)
        if platform:
            query = query.where(PlatformInventory.platform == platform)
        result = await self.store.execute(
            query.order_by(PlatformInventory.product_id, PlatformInventory.platform),
            "list platform_inventory",
        )
        return list(result.scalars().all())

    async def get_transactions(
        self, product_id: str, platform: str, limit: int = 100
    ) -> List[InventoryTransaction]:
        result = await self.store.execute(
            select(InventoryTransaction)
            .where(
                InventoryTransaction.product_id == product_id,
                InventoryTransaction.platform == platform,
            )
            .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
            .limit(limit),
            "list inventory_transactions",
        )
        return list(result.scalars().all())

    async def get_blocked_orders(
        self, platform: Optional[str] = None, limit: int = 100
    ) -> List[OrderManagement]:
        query = select(OrderManagement).where(OrderManagement.order_status == OrderStatus.BLOCKED.value)
        if platform:
            query = query.where(OrderManagement.platform == platform)
        result = await self.store.execute(
            query.order_by(OrderManagement.created_at.desc(), OrderManagement.id.desc()).limit(limit),
            "list blocked orders",
        )
        return list(result.scalars().all())

    async def get_low_stock(self, platform: Optional[str] = None) -> List[PlatformInventory]:
        """Rows at or under their platform's low-stock threshold, lowest first."""
        threshold = func.coalesce(PlatformIntegration.low_stock_threshold, self.default_threshold)
        query = (
            select(PlatformInventory)
            .outerjoin(PlatformIntegration, PlatformIntegration.platform == PlatformInventory.platform)
            .where(PlatformInventory.available_quantity <= threshold)
        )
        if platform:
            query = query.where(PlatformInventory.platform == platform)
        result = await self.store.execute(
            query.order_by(PlatformInventory.available_quantity.asc(), PlatformInventory.product_id),
            "list low stock",
        )
        return list(result.scalars().all())

    async def get_inventory_metrics(self) -> InventoryMetrics:
        rows = await self.list_inventory()
        thresholds = await self._thresholds()

        breakdown: Dict[str, int] = defaultdict(int)
        total_stock = total_available = blocked = low = out_of_stock = 0
        for row in rows:
            breakdown[row.platform] += row.stock_quantity
            total_stock += row.stock_quantity
            total_available += row.available_quantity
            if row.is_order_blocked:
                blocked += 1
            if row.available_quantity <= thresholds.get(row.platform, self.default_threshold):
                low += 1
            if row.available_quantity == 0:
                out_of_stock += 1

        return InventoryMetrics(
            total_items=len(rows),
            total_stock=total_stock,
            total_available=total_available,
            blocked_items=blocked,
            low_stock_items=low,
            out_of_stock_items=out_of_stock,
            average_stock=round(total_stock / len(rows)) if rows else 0,
            platform_breakdown=dict(breakdown),
        )

    async def list_alerts(
        self, unread_only: bool = False, unresolved_only: bool = False, limit: int = 100
    ) -> List[InventoryAlert]:
        query = select(InventoryAlert)
        if unread_only:
            query = query.where(InventoryAlert.is_read.is_(False))
        if unresolved_only:
            query = query.where(InventoryAlert.is_resolved.is_(False))
        result = await self.store.execute(
            query.order_by(InventoryAlert.created_at.desc(), InventoryAlert.id.desc()).limit(limit),
            "list inventory_alerts",
        )
        return list(result.scalars().all())

    async def mark_alert_read(self, alert_id: int) -> InventoryAlert:
        alert = await self._get_alert(alert_id)
        alert.is_read = True
        await self._commit("mark alert read")
        return alert

    async def resolve_alert(self, alert_id: int) -> InventoryAlert:
        alert = await self._get_alert(alert_id)
        alert.is_read = True
        alert.is_resolved = True
        alert.resolved_at = utc_now()
        await self._commit("resolve alert")
        return alert

    async def _get_alert(self, alert_id: int) -> InventoryAlert:
        result = await self.store.execute(
            select(InventoryAlert).where(InventoryAlert.id == alert_id), "select inventory_alert"
        )
        alert = result.scalars().first()
        if alert is None:
            raise AlertNotFoundError(f"Alert {alert_id} not found")
        return alert

    async def _commit(self, operation: str) -> None:
        try:
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to %s", operation)
            await self.store.rollback()
            raise

    async def _thresholds(self) -> Dict[str, int]:
        result = await self.store.execute(
            select(PlatformIntegration.platform, PlatformIntegration.low_stock_threshold),
            "select thresholds",
        )
        return {row.platform: row.low_stock_threshold for row in result.all()}
