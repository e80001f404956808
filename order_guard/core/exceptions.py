class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ValidationError(BaseServiceError):
    """Raised when input is rejected before any storage call is made."""
    pass

class InventoryNotFoundError(BaseServiceError):
    """Raised when a write targets a product/platform pair with no inventory row."""

    def __init__(self, product_id: str, platform: str):
        self.product_id = product_id
        self.platform = platform
        super().__init__(f"No inventory record for product {product_id} on {platform}")

class AlertNotFoundError(BaseServiceError):
    """Raised when an inventory alert id does not exist."""
    pass

class IntegrationNotFoundError(BaseServiceError):
    """Raised when a platform has no integration settings row."""
    pass

class DatabaseError(Exception):
    """Exception raised for database-related errors."""
    pass

class StorageTimeoutError(DatabaseError):
    """Raised when a storage call exceeds STORAGE_TIMEOUT_SECONDS."""
    pass
