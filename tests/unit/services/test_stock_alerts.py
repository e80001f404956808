# tests/unit/services/test_stock_alerts.py
import pytest

from order_guard.core.enums import AlertSeverity, AlertType
from order_guard.services.stock_alerts import classify_stock_level


@pytest.mark.parametrize(
    "available, threshold, expected",
    [
        (0, 10, (AlertType.OUT_OF_STOCK, AlertSeverity.CRITICAL)),
        (-2, 10, (AlertType.OUT_OF_STOCK, AlertSeverity.CRITICAL)),
        (4, 10, (AlertType.LOW_STOCK, AlertSeverity.CRITICAL)),
        (5, 10, (AlertType.LOW_STOCK, AlertSeverity.WARNING)),
        (10, 10, (AlertType.LOW_STOCK, AlertSeverity.WARNING)),
        (1, 1, (AlertType.LOW_STOCK, AlertSeverity.WARNING)),
    ],
)
def test_stock_level_alerts(available, threshold, expected):
    alert = classify_stock_level("SKU-1", "shopify", available, threshold)

    assert (alert.alert_type, alert.severity) == expected
    assert "SKU-1" in alert.message and "shopify" in alert.message


@pytest.mark.parametrize("available, threshold", [(11, 10), (1, 0), (3, -1)])
def test_no_alert_above_threshold(available, threshold):
    assert classify_stock_level("SKU-1", "shopify", available, threshold) is None
