# order_guard/models/inventory_transaction.py
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP

from order_guard.core.utils import utc_now
from order_guard.database import Base


class InventoryTransaction(Base):
    """
    Append-only ledger of stock changes.
    One row per committed stock mutation; rows are never updated or deleted.
    """
    __tablename__ = "inventory_transactions"

    id = Column(Integer, primary_key=True)
    product_id = Column(String, nullable=False, index=True)
    platform = Column(String, nullable=False, index=True)

    transaction_type = Column(String, nullable=False, index=True)  # sale, restock, return, adjustment, reservation, release
    quantity = Column(Integer, nullable=False)  # signed change
    previous_stock = Column(Integer, nullable=False)
    new_stock = Column(Integer, nullable=False)

    reference_id = Column(String, nullable=True, index=True)  # order id for sales/reservations
    notes = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP(timezone=False), default=utc_now, nullable=False, index=True)

    def __repr__(self):
        return (f"<InventoryTransaction(id={self.id}, type='{self.transaction_type}', "
                f"product_id='{self.product_id}', platform='{self.platform}', "
                f"{self.previous_stock}->{self.new_stock})>")
