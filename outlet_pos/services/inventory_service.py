"""Per-outlet product catalog and the stock quantity ledger.

Quantity changes go through a single conditional UPDATE so two concurrent
sales can never both take the last units of a product. The primitives
(``decrement_quantity``, ``increment_quantity``, ``set_quantity``) only flush;
the caller owns the transaction. Catalog edits commit on their own.
"""

import logging
import math
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from outlet_pos.core.constants import OUTLETS
from outlet_pos.core.exceptions import (
    DuplicateSku,
    InsufficientStock,
    ProductNotFound,
    ValidationError,
)
from outlet_pos.models.product import Product, classify_stock

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "name",
    "brand",
    "category",
    "sku",
    "purchase_price",
    "selling_price",
    "quantity",
    "min_stock_level",
    "description",
)


def validate_outlet(outlet: str) -> str:
    if outlet not in OUTLETS:
        raise ValidationError("Invalid outlet", outlet=outlet)
    return outlet


def stock_status(product: Product) -> str:
    return classify_stock(product.quantity, product.min_stock_level)


def _check_prices(values: dict):
    for field in ("purchase_price", "selling_price"):
        price = values.get(field)
        if price is not None and (not math.isfinite(price) or price < 0):
            raise ValidationError(f"{field} must be a finite, non-negative number")


def find_by_id(
    db: Session,
    outlet: str,
    product_id: int,
    *,
    include_inactive: bool = False,
) -> Product:
    validate_outlet(outlet)
    product = (
        db.execute(
            select(Product)
            .where(Product.id == product_id, Product.outlet == outlet)
            .execution_options(populate_existing=True)
        )
        .scalars()
        .first()
    )
    if product is None or (not product.is_active and not include_inactive):
        raise ProductNotFound(product_id)
    return product


def find_by_sku(db: Session, outlet: str, sku: str, *, exclude_id: int | None = None) -> Product | None:
    stmt = select(Product).where(Product.outlet == outlet, Product.sku == sku)
    if exclude_id is not None:
        stmt = stmt.where(Product.id != exclude_id)
    return db.execute(stmt).scalars().first()


def list_active(db: Session, outlet: str) -> list[Product]:
    validate_outlet(outlet)
    products = (
        db.execute(
            select(Product)
            .where(Product.outlet == outlet, Product.is_active.is_(True))
            .order_by(Product.created_at.desc(), Product.id.desc())
        )
        .scalars()
        .all()
    )
    return list(products)


def _apply_delta(db: Session, outlet: str, product_id: int, delta: int) -> int:
    stmt = (
        update(Product)
        .where(
            Product.id == product_id,
            Product.outlet == outlet,
            Product.is_active.is_(True),
        )
        .values(
            quantity=Product.quantity + delta,
            updated_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    if delta < 0:
        stmt = stmt.where(Product.quantity >= -delta)
    return db.execute(stmt).rowcount


def _raise_for_rejected_delta(db: Session, outlet: str, product_id: int, amount: int):
    # Raises ProductNotFound when the row is missing or inactive.
    product = find_by_id(db, outlet, product_id)
    raise InsufficientStock(
        product.id,
        product.name,
        requested=amount,
        available=product.quantity,
    )


def decrement_quantity(db: Session, outlet: str, product_id: int, amount: int) -> Product:
    validate_outlet(outlet)
    if amount <= 0:
        raise ValidationError("amount must be positive", product_id=product_id)
    if not _apply_delta(db, outlet, product_id, -amount):
        _raise_for_rejected_delta(db, outlet, product_id, amount)
    return find_by_id(db, outlet, product_id)


def increment_quantity(db: Session, outlet: str, product_id: int, amount: int) -> Product:
    """Apply a signed delta; a negative delta may not drive stock below zero."""
    validate_outlet(outlet)
    if amount == 0:
        return find_by_id(db, outlet, product_id)
    if not _apply_delta(db, outlet, product_id, amount):
        if amount > 0:
            raise ProductNotFound(product_id)
        _raise_for_rejected_delta(db, outlet, product_id, -amount)
    return find_by_id(db, outlet, product_id)


def set_quantity(db: Session, outlet: str, product_id: int, quantity: int) -> Product:
    validate_outlet(outlet)
    if quantity < 0:
        raise ValidationError("Invalid quantity", product_id=product_id)
    result = db.execute(
        update(Product)
        .where(
            Product.id == product_id,
            Product.outlet == outlet,
            Product.is_active.is_(True),
        )
        .values(quantity=quantity, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        raise ProductNotFound(product_id)
    return find_by_id(db, outlet, product_id)


def adjust_quantity(
    db: Session,
    outlet: str,
    product_id: int,
    quantity: int,
    mode: str = "set",
) -> Product:
    """Manual stock adjustment from the back office."""
    try:
        if mode == "set":
            product = set_quantity(db, outlet, product_id, quantity)
        elif mode == "add":
            product = increment_quantity(db, outlet, product_id, quantity)
        else:
            raise ValidationError("Invalid quantity mode", mode=mode)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(
        "Stock adjusted (%s %s) for product %s: now %s",
        mode,
        quantity,
        product_id,
        product.quantity,
        extra={"outlet": outlet, "product_id": product_id},
    )
    return product


def _commit_catalog_change(db: Session, outlet: str, sku: str):
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if find_by_sku(db, outlet, sku) is not None:
            raise DuplicateSku(outlet, sku) from exc
        raise


def create_product(db: Session, outlet: str, values: dict) -> Product:
    validate_outlet(outlet)
    _check_prices(values)
    sku = values["sku"]
    if find_by_sku(db, outlet, sku) is not None:
        raise DuplicateSku(outlet, sku)

    product = Product(
        outlet=outlet,
        is_active=True,
        **{field: values[field] for field in _EDITABLE_FIELDS if field in values},
    )
    db.add(product)
    _commit_catalog_change(db, outlet, sku)
    db.refresh(product)
    logger.info(
        "Product %s (%s) created",
        product.id,
        product.sku,
        extra={"outlet": outlet, "product_id": product.id},
    )
    return product


def update_product(db: Session, outlet: str, product_id: int, values: dict) -> Product:
    _check_prices(values)
    product = find_by_id(db, outlet, product_id, include_inactive=True)
    sku = values.get("sku", product.sku)
    if find_by_sku(db, outlet, sku, exclude_id=product.id) is not None:
        raise DuplicateSku(outlet, sku)

    for field in _EDITABLE_FIELDS:
        if field in values:
            setattr(product, field, values[field])
    _commit_catalog_change(db, outlet, sku)
    db.refresh(product)
    return product


def deactivate_product(db: Session, outlet: str, product_id: int) -> Product:
    product = find_by_id(db, outlet, product_id)
    product.is_active = False
    db.commit()
    logger.info(
        "Product %s deactivated",
        product_id,
        extra={"outlet": outlet, "product_id": product_id},
    )
    return product


__all__ = [
    "adjust_quantity",
    "create_product",
    "deactivate_product",
    "decrement_quantity",
    "find_by_id",
    "find_by_sku",
    "increment_quantity",
    "list_active",
    "set_quantity",
    "stock_status",
    "update_product",
    "validate_outlet",
]
