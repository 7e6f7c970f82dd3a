"""Bill creation: validate the cart, price it, number it, persist it, take the stock.

Pricing and stock validation never write. Numbering, the bill insert and every
stock decrement share one database transaction, so a failure at any point
leaves neither a bill nor a decrement behind. A bill-number collision with a
concurrent sale rolls the attempt back and starts over, up to
``BILL_NUMBER_MAX_ATTEMPTS`` times.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from outlet_pos.config import get_settings
from outlet_pos.core.constants import DEFAULT_PAYMENT_METHOD, PAYMENT_METHODS
from outlet_pos.core.dates import business_today
from outlet_pos.core.exceptions import (
    AllocationRace,
    BillNotFound,
    InsufficientStock,
    ValidationError,
)
from outlet_pos.models.bill import Bill, BillItem
from outlet_pos.services import inventory_service
from outlet_pos.services.bill_number_service import next_bill_number

logger = logging.getLogger(__name__)


def _money(value) -> float:
    return round(float(value), 2)


@dataclass
class QuotedLine:
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    purchase_price: float
    line_total: float
    line_profit: float


@dataclass
class BillQuote:
    lines: list[QuotedLine] = field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    profit: float = 0.0


def _line_value(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def normalize_cart(items) -> list[tuple[int, int]]:
    if not items:
        raise ValidationError("Cart is empty")
    lines = []
    for idx, item in enumerate(items):
        product_id = _line_value(item, "product_id")
        quantity = _line_value(item, "quantity")
        if product_id is None:
            raise ValidationError(f"Missing product_id at line {idx + 1}")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError(
                f"Invalid quantity at line {idx + 1}; quantity must be a whole number of at least 1",
                product_id=product_id,
            )
        lines.append((product_id, quantity))
    return lines


def quote_bill(
    db: Session,
    outlet: str,
    cart: Iterable[tuple[int, int]],
    *,
    discount: float = 0.0,
    tax_rate: Optional[float] = None,
) -> BillQuote:
    """Resolve every cart line against live stock and price the bill. Read only."""
    if tax_rate is None:
        tax_rate = get_settings().TAX_RATE

    quote = BillQuote(discount=_money(discount))
    requested: dict[int, int] = {}
    line_profit_total = 0.0
    for product_id, quantity in cart:
        product = inventory_service.find_by_id(db, outlet, product_id)
        requested[product.id] = requested.get(product.id, 0) + quantity
        if requested[product.id] > product.quantity:
            raise InsufficientStock(
                product.id,
                product.name,
                requested=requested[product.id],
                available=product.quantity,
            )

        line_total = _money(product.selling_price * quantity)
        line_profit = _money((product.selling_price - product.purchase_price) * quantity)
        quote.lines.append(
            QuotedLine(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=product.selling_price,
                purchase_price=product.purchase_price,
                line_total=line_total,
                line_profit=line_profit,
            )
        )
        line_profit_total += line_profit

    quote.subtotal = _money(sum(line.line_total for line in quote.lines))
    quote.tax = _money(quote.subtotal * tax_rate)
    if quote.discount > quote.subtotal + quote.tax:
        raise ValidationError(
            "Discount exceeds bill total",
            discount=quote.discount,
        )
    quote.total = _money(quote.subtotal + quote.tax - quote.discount)
    # Discount comes off profit as a whole, not spread over the lines.
    quote.profit = _money(line_profit_total - quote.discount)
    return quote


def _bill_number_taken(db: Session, bill_number: str) -> bool:
    return db.execute(
        select(Bill.id).where(Bill.bill_number == bill_number)
    ).first() is not None


def _persist_bill(
    db: Session,
    outlet: str,
    quote: BillQuote,
    *,
    bill_number: str,
    bill_date: date,
    customer_name,
    customer_phone,
    payment_method: str,
) -> Bill:
    bill = Bill(
        bill_number=bill_number,
        outlet=outlet,
        bill_date=bill_date,
        customer_name=customer_name or None,
        customer_phone=customer_phone or None,
        subtotal=quote.subtotal,
        tax=quote.tax,
        discount=quote.discount,
        total=quote.total,
        profit=quote.profit,
        payment_method=payment_method,
        items=[
            BillItem(
                position=position,
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                line_total=line.line_total,
                purchase_price=line.purchase_price,
            )
            for position, line in enumerate(quote.lines)
        ],
    )
    db.add(bill)
    db.flush()

    for line in quote.lines:
        inventory_service.decrement_quantity(db, outlet, line.product_id, line.quantity)
    return bill


def create_bill(
    db: Session,
    outlet: str,
    items,
    *,
    customer_name: Optional[str] = None,
    customer_phone: Optional[str] = None,
    discount: float = 0.0,
    payment_method: str = DEFAULT_PAYMENT_METHOD,
    today: Optional[date] = None,
) -> Bill:
    inventory_service.validate_outlet(outlet)
    cart = normalize_cart(items)
    if discount is None:
        discount = 0.0
    if not math.isfinite(discount):
        raise ValidationError("discount must be a finite number")
    if discount < 0:
        raise ValidationError("discount must be non-negative")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Invalid payment method", payment_method=payment_method)

    max_attempts = max(1, get_settings().BILL_NUMBER_MAX_ATTEMPTS)
    for attempt in range(1, max_attempts + 1):
        bill_date = today or business_today()
        bill_number = None
        try:
            quote = quote_bill(db, outlet, cart, discount=discount)
            bill_number = next_bill_number(db, outlet, bill_date)
            bill = _persist_bill(
                db,
                outlet,
                quote,
                bill_number=bill_number,
                bill_date=bill_date,
                customer_name=customer_name,
                customer_phone=customer_phone,
                payment_method=payment_method,
            )
            db.commit()
        except IntegrityError:
            db.rollback()
            if bill_number is None or not _bill_number_taken(db, bill_number):
                raise
            logger.warning(
                "Bill number %s taken by a concurrent sale (attempt %s/%s)",
                bill_number,
                attempt,
                max_attempts,
                extra={"outlet": outlet, "bill_number": bill_number, "attempt": attempt},
            )
            continue
        except InsufficientStock as exc:
            db.rollback()
            logger.info(
                "Sale rejected: %s",
                exc.message,
                extra={"outlet": outlet, "product_id": exc.product_id},
            )
            raise
        except Exception:
            db.rollback()
            raise

        logger.info(
            "Bill %s created: %s line(s), total %.2f",
            bill.bill_number,
            len(bill.items),
            bill.total,
            extra={"outlet": outlet, "bill_number": bill.bill_number},
        )
        return bill

    raise AllocationRace(outlet, max_attempts)


def list_bills(db: Session, outlet: str) -> list[Bill]:
    inventory_service.validate_outlet(outlet)
    bills = (
        db.execute(
            select(Bill)
            .where(Bill.outlet == outlet)
            .order_by(Bill.created_at.desc(), Bill.id.desc())
        )
        .scalars()
        .all()
    )
    return list(bills)


def get_bill(db: Session, outlet: str, bill_id: int) -> Bill:
    inventory_service.validate_outlet(outlet)
    bill = (
        db.execute(select(Bill).where(Bill.id == bill_id, Bill.outlet == outlet))
        .scalars()
        .first()
    )
    if bill is None:
        raise BillNotFound(bill_id)
    return bill


__all__ = [
    "BillQuote",
    "QuotedLine",
    "create_bill",
    "get_bill",
    "list_bills",
    "normalize_cart",
    "quote_bill",
]
