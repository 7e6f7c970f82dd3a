from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from outlet_pos.config import get_settings
from outlet_pos.core.exceptions import ValidationError
from outlet_pos.models.bill import Bill
from outlet_pos.models.product import Product
from outlet_pos.services.inventory_service import stock_status, validate_outlet


def _round(value):
    return round(value, 2)


def load_bills(
    db: Session,
    outlet: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[Bill]:
    validate_outlet(outlet)
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must not be after end_date")

    stmt = select(Bill).where(Bill.outlet == outlet)
    if start_date:
        stmt = stmt.where(Bill.bill_date >= start_date)
    if end_date:
        stmt = stmt.where(Bill.bill_date <= end_date)
    return list(db.execute(stmt.order_by(Bill.bill_date, Bill.id)).scalars().all())


def sales_report(
    db: Session,
    outlet: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    *,
    top_n: Optional[int] = None,
) -> dict:
    if top_n is None:
        top_n = get_settings().TOP_PRODUCTS_LIMIT
    bills = load_bills(db, outlet, start_date, end_date)

    total_sales = sum(bill.total for bill in bills)
    total_profit = sum(bill.profit for bill in bills)
    total_bills = len(bills)

    daily_sales = {}
    product_sales = {}
    for bill in bills:
        day = daily_sales.setdefault(
            bill.bill_date.isoformat(), {"sales": 0.0, "profit": 0.0, "bills": 0}
        )
        day["sales"] += bill.total
        day["profit"] += bill.profit
        day["bills"] += 1

        for item in bill.items:
            entry = product_sales.setdefault(
                item.product_name,
                {"name": item.product_name, "quantity": 0, "revenue": 0.0},
            )
            entry["quantity"] += item.quantity
            entry["revenue"] += item.line_total

    for day in daily_sales.values():
        day["sales"] = _round(day["sales"])
        day["profit"] = _round(day["profit"])
    top_products = sorted(product_sales.values(), key=lambda entry: entry["revenue"], reverse=True)
    for entry in top_products:
        entry["revenue"] = _round(entry["revenue"])

    return {
        "summary": {
            "total_sales": _round(total_sales),
            "total_profit": _round(total_profit),
            "total_bills": total_bills,
            "average_order_value": _round(total_sales / total_bills) if total_bills else 0.0,
        },
        "daily_sales": daily_sales,
        "top_products": top_products[:top_n],
    }


def inventory_report(db: Session, outlet: str) -> dict:
    validate_outlet(outlet)
    products = (
        db.execute(
            select(Product)
            .where(Product.outlet == outlet, Product.is_active.is_(True))
            .order_by(Product.name)
        )
        .scalars()
        .all()
    )

    low_stock = []
    out_of_stock = []
    categories = {}
    total_value = 0.0
    for product in products:
        value = product.quantity * product.purchase_price
        total_value += value

        status = stock_status(product)
        # Out-of-stock products also count as low stock, matching the dashboard.
        if status != "in_stock":
            low_stock.append(product)
        if status == "out_of_stock":
            out_of_stock.append(product)

        bucket = categories.setdefault(
            product.category, {"count": 0, "value": 0.0, "quantity": 0}
        )
        bucket["count"] += 1
        bucket["value"] += value
        bucket["quantity"] += product.quantity

    for bucket in categories.values():
        bucket["value"] = _round(bucket["value"])

    return {
        "summary": {
            "total_products": len(products),
            "total_value": _round(total_value),
            "low_stock_count": len(low_stock),
            "out_of_stock_count": len(out_of_stock),
        },
        "low_stock_products": low_stock,
        "out_of_stock_products": out_of_stock,
        "category_breakdown": categories,
    }


__all__ = ["inventory_report", "load_bills", "sales_report"]
