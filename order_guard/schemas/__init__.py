from .inventory import (
    AvailabilityResult,
    BlockRequest,
    InventoryAlertRead,
    InventoryMetrics,
    OrderBlockRead,
    OrderManagementRead,
    OrderRequest,
    OrderResult,
    PlatformBlockingConfig,
    PlatformIntegrationRead,
    PlatformIntegrationUpdate,
    PlatformInventoryRead,
    ReleaseExpiredResult,
    ReleasedBlock,
    StockAdjustRequest,
    StockChangeRequest,
    UnblockRequest,
)
