# order_guard/models/inventory_alert.py
from sqlalchemy import Boolean, Column, Integer, JSON, String, Text, TIMESTAMP

from order_guard.core.enums import AlertSeverity
from order_guard.core.utils import utc_now
from order_guard.database import Base


class InventoryAlert(Base):
    """
    Notification record written as a side effect of blocking, unblocking and
    stock changes. The dashboard reads these and flips ``is_read`` / ``is_resolved``.
    """
    __tablename__ = "inventory_alerts"

    id = Column(Integer, primary_key=True)
    product_id = Column(String, nullable=False, index=True)
    platform = Column(String, nullable=False, index=True)

    alert_type = Column(String, nullable=False, index=True)
    severity = Column(String, nullable=False, default=AlertSeverity.INFO.value)
    message = Column(Text, nullable=False)
    details = Column(JSON, nullable=True)

    is_read = Column(Boolean, nullable=False, default=False, index=True)
    is_resolved = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP(timezone=False), default=utc_now, nullable=False, index=True)
    resolved_at = Column(TIMESTAMP(timezone=False), nullable=True)

    def __repr__(self):
        return f"<InventoryAlert {self.alert_type} {self.product_id}@{self.platform}>"
