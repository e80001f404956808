"""
Shared enums and constants used across the application.
"""

from enum import Enum


class BlockType(str, Enum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"
    SCHEDULED = "scheduled"


class BlockReason(str, Enum):
    """Why orders are blocked. CUSTOM carries its text in ``custom_reason``."""
    OUT_OF_STOCK = "out_of_stock"
    LOW_STOCK = "low_stock"
    MAINTENANCE = "maintenance"
    QUALITY_ISSUE = "quality_issue"
    SUPPLIER_DELAY = "supplier_delay"
    CUSTOM = "custom"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    # Defined for the data model; the order processor never produces it
    PARTIALLY_FULFILLED = "partially_fulfilled"
    CANCELLED = "cancelled"
    BLOCKED = "blocked"


class TransactionType(str, Enum):
    SALE = "sale"
    RESTOCK = "restock"
    RETURN = "return"
    ADJUSTMENT = "adjustment"
    RESERVATION = "reservation"
    RELEASE = "release"


class AlertType(str, Enum):
    ORDER_BLOCKED = "order_blocked"
    ORDER_UNBLOCKED = "order_unblocked"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    RESTOCKED = "restocked"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class SyncStatus(str, Enum):
    """Sync state of a platform inventory row."""
    PENDING = "pending"
    SYNCED = "synced"
    OUT_OF_SYNC = "out_of_sync"
    ERROR = "error"
