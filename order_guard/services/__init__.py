from .inventory_store import InventoryStore
from .availability import AvailabilityService, evaluate_availability, validate_quantity
from .order_blocking import OrderBlockingService
from .auto_block import AutoBlockPolicy
from .order_processor import OrderProcessor
from .stock_service import StockService
from .inventory_queries import InventoryQueryService
from .notification_service import EmailNotificationService, get_email_notification_service
from .platform_integrations import PlatformIntegrationService
from .stock_alerts import classify_stock_level
