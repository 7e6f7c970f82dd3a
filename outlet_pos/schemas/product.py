from datetime import datetime
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from outlet_pos.config import get_settings

Outlet = Literal["harigala", "arandara"]
Category = Literal["Bicycle", "Accessories", "Parts", "Clothing", "Tools"]


class ProductBase(BaseModel):
    name: str = Field(min_length=1)
    brand: str = Field(min_length=1)
    category: Category
    sku: str = Field(min_length=1)
    purchase_price: float = Field(
        ge=0,
        validation_alias=AliasChoices("purchase_price", "purchasePrice"),
    )
    selling_price: float = Field(
        ge=0,
        validation_alias=AliasChoices("selling_price", "sellingPrice"),
    )
    quantity: int = Field(ge=0)
    min_stock_level: int = Field(
        default_factory=lambda: get_settings().DEFAULT_MIN_STOCK_LEVEL,
        ge=0,
        validation_alias=AliasChoices("min_stock_level", "minStockLevel"),
    )
    description: str = ""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, allow_inf_nan=False)


class ProductCreate(ProductBase):
    outlet: Outlet


class ProductUpdate(ProductBase):
    outlet: Optional[Outlet] = None


class ProductRead(BaseModel):
    id: int
    outlet: str
    name: str
    brand: str
    category: str
    sku: str
    purchase_price: float
    selling_price: float
    quantity: int
    min_stock_level: int
    description: str
    is_active: bool
    stock_status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuantityUpdate(BaseModel):
    """Manual stock adjustment: ``set`` replaces on-hand stock, ``add`` applies a delta."""

    quantity: int
    mode: Literal["set", "add"] = "set"

    @model_validator(mode="after")
    def _check_quantity(self):
        if self.mode == "set" and self.quantity < 0:
            raise ValueError("quantity must be non-negative")
        return self
