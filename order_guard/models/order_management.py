# order_guard/models/order_management.py
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP

from order_guard.core.enums import OrderStatus
from order_guard.core.utils import utc_now
from order_guard.database import Base


class OrderManagement(Base):
    """Outcome of one order attempt against a product/platform pair."""
    __tablename__ = "order_management"

    id = Column(Integer, primary_key=True)
    order_id = Column(String, nullable=False, index=True)
    customer_id = Column(String, nullable=True, index=True)
    product_id = Column(String, nullable=False, index=True)
    platform = Column(String, nullable=False, index=True)

    quantity_requested = Column(Integer, nullable=False)
    quantity_available = Column(Integer, nullable=False)
    quantity_fulfilled = Column(Integer, nullable=False, default=0)

    order_status = Column(String, nullable=False, default=OrderStatus.PENDING.value, index=True)
    block_reason = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=False), default=utc_now, nullable=False, index=True)

    def __repr__(self):
        return (f"<OrderManagement(order_id='{self.order_id}', product_id='{self.product_id}', "
                f"platform='{self.platform}', status='{self.order_status}')>")
