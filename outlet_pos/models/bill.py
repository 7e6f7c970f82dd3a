from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from outlet_pos.database.base import Base


class Bill(Base):
    __tablename__ = "bills"

    id = Column(Integer, primary_key=True)
    bill_number = Column(String(20), nullable=False, unique=True)
    outlet = Column(String(20), nullable=False)
    bill_date = Column(Date, nullable=False)

    customer_name = Column(String)
    customer_phone = Column(String)

    subtotal = Column(Float, nullable=False)
    tax = Column(Float, nullable=False, default=0)
    discount = Column(Float, nullable=False, default=0)
    total = Column(Float, nullable=False)
    profit = Column(Float, nullable=False, default=0)
    payment_method = Column(String(20), nullable=False, default="Cash")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    items = relationship(
        "BillItem",
        back_populates="bill",
        order_by="BillItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_bills_total_non_negative"),
        Index("idx_bills_outlet_date", "outlet", "bill_date"),
    )


class BillItem(Base):
    __tablename__ = "bill_items"

    id = Column(Integer, primary_key=True)
    bill_id = Column(Integer, ForeignKey("bills.id"), nullable=False)
    position = Column(Integer, nullable=False)

    # Snapshot of the product at sale time; no FK so edits never cascade here.
    product_id = Column(Integer, nullable=False)
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    line_total = Column(Float, nullable=False)
    purchase_price = Column(Float, nullable=False)

    bill = relationship("Bill", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_bill_items_quantity_positive"),
        Index("idx_bill_items_bill", "bill_id"),
    )


__all__ = ["Bill", "BillItem"]
