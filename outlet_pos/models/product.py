from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    UniqueConstraint,
)

from outlet_pos.database.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


def classify_stock(quantity, min_stock_level):
    if quantity <= 0:
        return "out_of_stock"
    if quantity <= min_stock_level:
        return "low_stock"
    return "in_stock"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    outlet = Column(String(20), nullable=False)

    sku = Column(String, nullable=False)
    name = Column(String, nullable=False)
    brand = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=False, default="")

    purchase_price = Column(Float, nullable=False)
    selling_price = Column(Float, nullable=False)
    quantity = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=10)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        UniqueConstraint("outlet", "sku", name="uq_products_outlet_sku"),
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("purchase_price >= 0", name="ck_products_purchase_price"),
        CheckConstraint("selling_price >= 0", name="ck_products_selling_price"),
        Index("idx_products_outlet_active", "outlet", "is_active"),
    )

    @property
    def stock_status(self):
        return classify_stock(self.quantity or 0, self.min_stock_level or 0)


__all__ = ["Product", "classify_stock"]
