"""
Schemas for availability checks, order processing and order blocking.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from order_guard.core.config import get_settings
from order_guard.core.enums import BlockReason, BlockType, OrderStatus
from order_guard.schemas.base import BaseSchema


class AvailabilityResult(BaseSchema):
    """Answer to "can this order be fulfilled right now?". Negative answers are data, not errors."""
    can_fulfill: bool
    available_quantity: int
    requested_quantity: int
    block_reason: Optional[str] = None
    # Echo of auto_unblock_date; a hint, not a promise
    estimated_restock_date: Optional[datetime] = None


class PlatformBlockingConfig(BaseSchema):
    """
    Blocking policy for one platform, handed explicitly to the auto-block
    evaluator instead of being looked up inside it.
    """
    platform: str
    auto_block_low_stock: bool = False
    low_stock_threshold: int = 10
    auto_block_out_of_stock: bool = False
    allow_backorders: bool = False
    backorder_max_quantity: int = 0
    notify_on_order_block: bool = False

    @classmethod
    def disabled(cls, platform: str) -> "PlatformBlockingConfig":
        """Policy for a platform with no integration row: never auto-block, default alert threshold."""
        return cls(platform=platform, low_stock_threshold=get_settings().DEFAULT_LOW_STOCK_THRESHOLD)


class OrderRequest(BaseSchema):
    product_id: str
    platform: str
    order_id: str
    customer_id: Optional[str] = None
    quantity: int


class OrderResult(BaseSchema):
    success: bool
    order_id: str
    order_status: OrderStatus
    quantity_fulfilled: int = 0
    available_quantity: int
    block_reason: Optional[str] = None
    message: str = ""


class BlockRequest(BaseSchema):
    product_id: str
    platform: str
    reason: BlockReason
    block_type: BlockType = BlockType.MANUAL
    unblock_date: Optional[datetime] = None
    notes: Optional[str] = None
    custom_reason: Optional[str] = None
    created_by: Optional[str] = None


class UnblockRequest(BaseSchema):
    product_id: str
    platform: str
    reason: Optional[str] = None


class StockChangeRequest(BaseSchema):
    product_id: str
    platform: str
    quantity: int
    order_id: Optional[str] = None
    notes: Optional[str] = None


class StockAdjustRequest(BaseSchema):
    product_id: str
    platform: str
    new_stock: int
    notes: Optional[str] = None


class PlatformInventoryRead(BaseSchema):
    id: int
    product_id: str
    platform: str
    stock_quantity: int
    reserved_quantity: int
    available_quantity: int
    sync_status: str
    last_synced_at: Optional[datetime] = None
    is_order_blocked: bool
    order_block_reason: Optional[str] = None
    order_block_date: Optional[datetime] = None
    auto_unblock_date: Optional[datetime] = None


class OrderBlockRead(BaseSchema):
    id: int
    product_id: str
    platform: str
    block_type: BlockType
    reason: BlockReason
    custom_reason: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    block_date: datetime
    scheduled_unblock_date: Optional[datetime] = None
    unblock_date: Optional[datetime] = None
    unblock_reason: Optional[str] = None
    is_active: bool


class OrderManagementRead(BaseSchema):
    id: int
    order_id: str
    customer_id: Optional[str] = None
    product_id: str
    platform: str
    quantity_requested: int
    quantity_available: int
    quantity_fulfilled: int
    order_status: OrderStatus
    block_reason: Optional[str] = None
    created_at: datetime


class InventoryAlertRead(BaseSchema):
    id: int
    product_id: str
    platform: str
    alert_type: str
    severity: str
    message: str
    details: Optional[Dict[str, Any]] = None
    is_read: bool
    is_resolved: bool
    created_at: datetime
    resolved_at: Optional[datetime] = None


class InventoryMetrics(BaseSchema):
    total_items: int = 0
    total_stock: int = 0
    total_available: int = 0
    blocked_items: int = 0
    low_stock_items: int = 0
    out_of_stock_items: int = 0
    average_stock: int = 0
    platform_breakdown: Dict[str, int] = Field(default_factory=dict)


class ReleasedBlock(BaseSchema):
    product_id: str
    platform: str


class ReleaseExpiredResult(BaseSchema):
    released: List[ReleasedBlock] = Field(default_factory=list)


class PlatformIntegrationRead(BaseSchema):
    id: int
    platform: str
    is_connected: bool
    auto_block_low_stock: bool
    low_stock_threshold: int
    auto_block_out_of_stock: bool
    allow_backorders: bool
    backorder_max_quantity: int
    notify_on_order_block: bool
    created_at: datetime
    updated_at: datetime


class PlatformIntegrationUpdate(BaseSchema):
    """Partial update; fields left out keep their current (or default) value."""
    is_connected: Optional[bool] = None
    auto_block_low_stock: Optional[bool] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    auto_block_out_of_stock: Optional[bool] = None
    allow_backorders: Optional[bool] = None
    backorder_max_quantity: Optional[int] = Field(None, ge=0)
    notify_on_order_block: Optional[bool] = None
