# order_guard/services/order_blocking.py
"""
Order Blocker / Unblocker

Blocking writes three things: a new ``OrderBlock`` history row, the block
fields on the ``PlatformInventory`` row, and an ``order_blocked`` alert.
Unblocking closes the active history row, clears the inventory fields and
writes an ``order_unblocked`` alert. Each operation commits once, so either
all of its writes land or none do.

At most one block row is active per product/platform: a new block closes
the previous active one (``unblock_reason="superseded"``) before inserting.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from order_guard.core.enums import AlertSeverity, AlertType, BlockReason, BlockType
from order_guard.core.exceptions import DatabaseError, ValidationError
from order_guard.core.utils import to_naive_utc, utc_now
from order_guard.models import OrderBlock, PlatformInventory
from order_guard.schemas.inventory import PlatformBlockingConfig
from order_guard.services.inventory_store import InventoryStore
from order_guard.services.notification_service import (
    EmailNotificationService,
    get_email_notification_service,
)

logger = logging.getLogger(__name__)

SUPERSEDED = "superseded"
AUTO_UNBLOCK_REACHED = "Auto-unblock date reached"


def _coerce_enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}; got {value!r}") from None


class OrderBlockingService:
    def __init__(
        self,
        db: AsyncSession,
        store: Optional[InventoryStore] = None,
        notifier: Optional[EmailNotificationService] = None,
    ):
        self.db = db
        self.store = store or InventoryStore(db)
        self.notifier = notifier or get_email_notification_service()

    async def block_orders(
        self,
        product_id: str,
        platform: str,
        reason: Union[BlockReason, str],
        block_type: Union[BlockType, str] = BlockType.MANUAL,
        unblock_date: Optional[datetime] = None,
        notes: Optional[str] = None,
        custom_reason: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> OrderBlock:
        """
        Block future orders for a product on a platform.

        ``reason=custom`` requires ``custom_reason``; that text then becomes the
        reason shown to buyers. ``unblock_date`` is stored as a hint only.
        """
        reason = _coerce_enum(BlockReason, reason, "reason")
        block_type = _coerce_enum(BlockType, block_type, "block_type")
        if reason is BlockReason.CUSTOM:
            custom_reason = (custom_reason or "").strip()
            if not custom_reason:
                raise ValidationError("custom_reason is required when reason is 'custom'")
        else:
            custom_reason = None

        now = utc_now()
        unblock_date = to_naive_utc(unblock_date)
        if unblock_date is not None and unblock_date <= now:
            raise ValidationError("unblock_date must be in the future")

        display_reason = custom_reason or reason.value

        try:
            inventory = await self.store.require_inventory(product_id, platform)
            config = await self.store.get_blocking_config(platform)

            superseded = await self.store.close_active_blocks(product_id, platform, now, SUPERSEDED)
            if superseded:
                logger.info(
                    "Closed %s active block(s) for %s@%s before re-blocking",
                    superseded, product_id, platform,
                )

            block = await self.store.add(
                OrderBlock(
                    product_id=product_id,
                    platform=platform,
                    block_type=block_type.value,
                    reason=reason.value,
                    custom_reason=custom_reason,
                    notes=notes,
                    created_by=created_by,
                    block_date=now,
                    scheduled_unblock_date=unblock_date,
                    is_active=True,
                )
            )

            inventory.is_order_blocked = True
            inventory.order_block_reason = display_reason
            inventory.order_block_date = now
            inventory.auto_unblock_date = unblock_date

            await self.store.record_alert(
                product_id,
                platform,
                AlertType.ORDER_BLOCKED,
                f"Orders blocked for {product_id} on {platform}: {display_reason}",
                severity=AlertSeverity.CRITICAL if reason is BlockReason.OUT_OF_STOCK else AlertSeverity.WARNING,
                details={
                    "block_id": block.id,
                    "reason": reason.value,
                    "block_type": block_type.value,
                    "available_quantity": inventory.available_quantity,
                    "auto_unblock_date": unblock_date.isoformat() if unblock_date else None,
                    "notes": notes,
                },
            )
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to block orders for %s@%s", product_id, platform)
            await self.store.rollback()
            raise

        logger.info(
            "Blocked orders for %s@%s (%s, %s)", product_id, platform, display_reason, block_type.value
        )
        await self._notify_blocked(config, inventory, block, display_reason)
        return block

    async def unblock_orders(
        self,
        product_id: str,
        platform: str,
        reason: Optional[str] = None,
        when: Optional[datetime] = None,
    ) -> int:
        """
        Lift the block on a product/platform pair. Returns the number of block
        rows closed. Unblocking a pair that is not blocked is a no-op.

        ``when`` stamps the closed block rows; it defaults to now.
        """
        try:
            inventory = await self.store.require_inventory(product_id, platform)
            config = await self.store.get_blocking_config(platform)
            was_blocked = bool(inventory.is_order_blocked)

            closed = await self.store.close_active_blocks(
                product_id, platform, to_naive_utc(when) or utc_now(), reason
            )

            inventory.is_order_blocked = False
            inventory.order_block_reason = None
            inventory.order_block_date = None
            inventory.auto_unblock_date = None

            changed = was_blocked or closed > 0
            if changed:
                await self.store.record_alert(
                    product_id,
                    platform,
                    AlertType.ORDER_UNBLOCKED,
                    f"Orders unblocked for {product_id} on {platform}",
                    details={"reason": reason, "closed_blocks": closed},
                )
            await self.store.commit()
        except DatabaseError:
            logger.exception("Failed to unblock orders for %s@%s", product_id, platform)
            await self.store.rollback()
            raise

        if not changed:
            logger.debug("Unblock requested for %s@%s but it was not blocked", product_id, platform)
            return 0

        logger.info("Unblocked orders for %s@%s (%s)", product_id, platform, reason or "no reason given")
        if config.notify_on_order_block:
            await self.notifier.send_unblock_alert(product_id=product_id, platform=platform, reason=reason)
        return closed

    async def release_expired_blocks(self, now: Optional[datetime] = None) -> List[Tuple[str, str]]:
        """
        Lift every block whose auto_unblock_date has passed.

        Nothing calls this implicitly; the scheduler job and the CLI do.
        """
        now = to_naive_utc(now) or utc_now()
        result = await self.store.execute(
            select(PlatformInventory.product_id, PlatformInventory.platform).where(
                PlatformInventory.is_order_blocked.is_(True),
                PlatformInventory.auto_unblock_date.is_not(None),
                PlatformInventory.auto_unblock_date <= now,
            ),
            "select expired blocks",
        )
        expired = [(row.product_id, row.platform) for row in result.all()]

        for product_id, platform in expired:
            await self.unblock_orders(product_id, platform, reason=AUTO_UNBLOCK_REACHED, when=now)

        if expired:
            logger.info("Released %s expired order block(s)", len(expired))
        return expired

    async def get_active_blocks(self, platform: Optional[str] = None) -> List[OrderBlock]:
        query = select(OrderBlock).where(OrderBlock.is_active.is_(True))
        if platform:
            query = query.where(OrderBlock.platform == platform)
        result = await self.store.execute(
            query.order_by(OrderBlock.block_date.desc()), "select active order_blocks"
        )
        return list(result.scalars().all())

    async def get_block_history(self, product_id: str, platform: str) -> List[OrderBlock]:
        result = await self.store.execute(
            select(OrderBlock)
            .where(OrderBlock.product_id == product_id, OrderBlock.platform == platform)
            .order_by(OrderBlock.block_date.desc(), OrderBlock.id.desc()),
            "select order_block history",
        )
        return list(result.scalars().all())

    async def _notify_blocked(
        self,
        config: PlatformBlockingConfig,
        inventory: PlatformInventory,
        block: OrderBlock,
        display_reason: str,
    ) -> None:
        if not config.notify_on_order_block:
            return
        await self.notifier.send_block_alert(
            product_id=inventory.product_id,
            platform=inventory.platform,
            reason=display_reason,
            block_type=block.block_type,
            available_quantity=inventory.available_quantity,
            auto_unblock_date=(
                inventory.auto_unblock_date.isoformat() if inventory.auto_unblock_date else None
            ),
            notes=block.notes,
        )
