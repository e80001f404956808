# order_guard/models/platform_inventory.py
from sqlalchemy import (
    Boolean, CheckConstraint, Column, Integer, String, TIMESTAMP, UniqueConstraint
)

from order_guard.core.enums import SyncStatus
from order_guard.core.utils import utc_now
from order_guard.database import Base


class PlatformInventory(Base):
    """
    Stock for one product on one sales platform, plus its order-block state.

    ``available_quantity`` is always ``stock_quantity - reserved_quantity`` and is
    the only figure an incoming order is checked against.
    """
    __tablename__ = "platform_inventory"
    __table_args__ = (
        UniqueConstraint("product_id", "platform", name="uq_platform_inventory_product_platform"),
        CheckConstraint("available_quantity >= 0", name="ck_platform_inventory_available_nonneg"),
        CheckConstraint("reserved_quantity >= 0", name="ck_platform_inventory_reserved_nonneg"),
    )

    id = Column(Integer, primary_key=True)
    created_at = Column(TIMESTAMP(timezone=False), default=utc_now, nullable=False)
    updated_at = Column(TIMESTAMP(timezone=False), default=utc_now, onupdate=utc_now, nullable=False)

    product_id = Column(String, nullable=False, index=True)
    platform = Column(String, nullable=False, index=True)

    stock_quantity = Column(Integer, nullable=False, default=0)
    reserved_quantity = Column(Integer, nullable=False, default=0)
    available_quantity = Column(Integer, nullable=False, default=0)

    # --- Sync metadata ---
    last_synced_at = Column(TIMESTAMP(timezone=False), nullable=True)
    sync_status = Column(String, nullable=False, default=SyncStatus.PENDING.value)

    # --- Order blocking ---
    is_order_blocked = Column(Boolean, nullable=False, default=False, index=True)
    order_block_reason = Column(String, nullable=True)
    order_block_date = Column(TIMESTAMP(timezone=False), nullable=True)
    # Informational only: nothing lifts the block at this time unless a sweep runs
    auto_unblock_date = Column(TIMESTAMP(timezone=False), nullable=True, index=True)

    def __repr__(self):
        return (f"<PlatformInventory(product_id='{self.product_id}', platform='{self.platform}', "
                f"stock={self.stock_quantity}, reserved={self.reserved_quantity}, "
                f"available={self.available_quantity}, blocked={self.is_order_blocked})>")
