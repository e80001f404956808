# order_guard/models/platform_integration.py
from sqlalchemy import Boolean, Column, Integer, String, TIMESTAMP

from order_guard.core.utils import utc_now
from order_guard.database import Base


class PlatformIntegration(Base):
    """Per-platform blocking configuration. Only administrative tooling writes it."""
    __tablename__ = "platform_integrations"

    id = Column(Integer, primary_key=True)
    platform = Column(String, nullable=False, unique=True, index=True)
    is_connected = Column(Boolean, nullable=False, default=True)

    auto_block_low_stock = Column(Boolean, nullable=False, default=False)
    low_stock_threshold = Column(Integer, nullable=False, default=10)
    auto_block_out_of_stock = Column(Boolean, nullable=False, default=True)
    allow_backorders = Column(Boolean, nullable=False, default=False)
    backorder_max_quantity = Column(Integer, nullable=False, default=0)
    notify_on_order_block = Column(Boolean, nullable=False, default=True)

    created_at = Column(TIMESTAMP(timezone=False), default=utc_now, nullable=False)
    updated_at = Column(TIMESTAMP(timezone=False), default=utc_now, onupdate=utc_now, nullable=False)

    def __repr__(self):
        return (f"<PlatformIntegration(platform='{self.platform}', "
                f"auto_block_low_stock={self.auto_block_low_stock}, threshold={self.low_stock_threshold})>")
