from typing import Dict, List

from pydantic import BaseModel

from outlet_pos.schemas.product import ProductRead


class SalesSummary(BaseModel):
    total_sales: float
    total_profit: float
    total_bills: int
    average_order_value: float


class DailySales(BaseModel):
    sales: float
    profit: float
    bills: int


class TopProduct(BaseModel):
    name: str
    quantity: int
    revenue: float


class SalesReport(BaseModel):
    summary: SalesSummary
    daily_sales: Dict[str, DailySales]
    top_products: List[TopProduct]


class InventorySummary(BaseModel):
    total_products: int
    total_value: float
    low_stock_count: int
    out_of_stock_count: int


class CategoryBreakdown(BaseModel):
    count: int
    value: float
    quantity: int


class InventoryReport(BaseModel):
    summary: InventorySummary
    low_stock_products: List[ProductRead]
    out_of_stock_products: List[ProductRead]
    category_breakdown: Dict[str, CategoryBreakdown]
