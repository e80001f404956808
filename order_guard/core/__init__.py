"""
Core module exports.
"""
from .enums import (
    AlertSeverity,
    AlertType,
    BlockReason,
    BlockType,
    OrderStatus,
    SyncStatus,
    TransactionType,
)

from .exceptions import (
    AlertNotFoundError,
    BaseServiceError,
    DatabaseError,
    IntegrationNotFoundError,
    InventoryNotFoundError,
    StorageTimeoutError,
    ValidationError,
)
