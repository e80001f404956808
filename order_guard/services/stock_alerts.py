# order_guard/services/stock_alerts.py
"""
Stock-level alert classification.

At zero a pair is out of stock (critical). Under half its low-stock threshold it
is critically low; at or under the threshold it is a warning. Above the
threshold no alert is due.
"""

from typing import NamedTuple, Optional

from order_guard.core.enums import AlertSeverity, AlertType


class StockAlert(NamedTuple):
    alert_type: AlertType
    severity: AlertSeverity
    message: str


def classify_stock_level(
    product_id: str, platform: str, available: int, threshold: int
) -> Optional[StockAlert]:
    if available <= 0:
        return StockAlert(
            AlertType.OUT_OF_STOCK,
            AlertSeverity.CRITICAL,
            f"{product_id} is out of stock on {platform}",
        )
    if available > threshold:
        return None
    if available < threshold * 0.5:
        return StockAlert(
            AlertType.LOW_STOCK,
            AlertSeverity.CRITICAL,
            f"{product_id} is critically low on {platform} ({available} remaining)",
        )
    return StockAlert(
        AlertType.LOW_STOCK,
        AlertSeverity.WARNING,
        f"{product_id} is at or below its low-stock threshold on {platform} ({available}/{threshold})",
    )
