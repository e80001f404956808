# order_guard/models/order_block.py
from sqlalchemy import Boolean, Column, Integer, String, Text, TIMESTAMP

from order_guard.core.utils import utc_now
from order_guard.database import Base


class OrderBlock(Base):
    """
    One block episode for a product/platform pair.

    History rows accumulate; the blocking service keeps at most one
    ``is_active`` row per pair by closing the previous one first.
    """
    __tablename__ = "order_blocks"

    id = Column(Integer, primary_key=True)
    product_id = Column(String, nullable=False, index=True)
    platform = Column(String, nullable=False, index=True)

    block_type = Column(String, nullable=False)  # manual, automatic, scheduled
    reason = Column(String, nullable=False)  # BlockReason value
    custom_reason = Column(Text, nullable=True)  # only for reason == custom
    notes = Column(Text, nullable=True)
    created_by = Column(String, nullable=True)

    block_date = Column(TIMESTAMP(timezone=False), default=utc_now, nullable=False)
    scheduled_unblock_date = Column(TIMESTAMP(timezone=False), nullable=True)
    unblock_date = Column(TIMESTAMP(timezone=False), nullable=True)
    unblock_reason = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    @property
    def display_reason(self) -> str:
        return self.custom_reason if self.reason == "custom" and self.custom_reason else self.reason

    def __repr__(self):
        return (f"<OrderBlock(id={self.id}, product_id='{self.product_id}', platform='{self.platform}', "
                f"reason='{self.reason}', type='{self.block_type}', active={self.is_active})>")
