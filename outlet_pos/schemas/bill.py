from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from outlet_pos.schemas.product import Outlet

PaymentMethod = Literal["Cash", "Card", "Bank Transfer"]


class CartLine(BaseModel):
    product_id: int = Field(validation_alias=AliasChoices("product_id", "productId"))
    quantity: int = Field(ge=1)

    model_config = ConfigDict(populate_by_name=True)


class BillCreate(BaseModel):
    outlet: Outlet
    customer_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("customer_name", "customerName"),
    )
    customer_phone: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("customer_phone", "customerPhone"),
    )
    items: List[CartLine]
    discount: float = Field(default=0, ge=0)
    payment_method: PaymentMethod = Field(
        default="Cash",
        validation_alias=AliasChoices("payment_method", "paymentMethod"),
    )

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, allow_inf_nan=False)


class BillItemRead(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    line_total: float
    purchase_price: float

    model_config = ConfigDict(from_attributes=True)


class BillRead(BaseModel):
    id: int
    bill_number: str
    outlet: str
    bill_date: date
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    items: List[BillItemRead]
    subtotal: float
    tax: float
    discount: float
    total: float
    payment_method: str
    profit: float
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
