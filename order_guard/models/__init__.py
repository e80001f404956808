from .platform_inventory import PlatformInventory
from .inventory_transaction import InventoryTransaction
from .order_block import OrderBlock
from .order_management import OrderManagement
from .platform_integration import PlatformIntegration
from .inventory_alert import InventoryAlert

__all__ = [
    "PlatformInventory",
    "InventoryTransaction",
    "OrderBlock",
    "OrderManagement",
    "PlatformIntegration",
    "InventoryAlert",
]
