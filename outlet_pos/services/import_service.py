import logging
import math
from pathlib import Path

from openpyxl import load_workbook

from outlet_pos.config import get_settings
from outlet_pos.core.constants import PRODUCT_CATEGORIES
from outlet_pos.database import init_db, session_scope
from outlet_pos.models.product import Product
from outlet_pos.services.inventory_service import find_by_sku, validate_outlet

logger = logging.getLogger(__name__)

HEADER_ALIASES = {
    "sku": "sku",
    "item_code": "sku",
    "code": "sku",
    "name": "name",
    "product": "name",
    "product_name": "name",
    "brand": "brand",
    "category": "category",
    "purchase_price": "purchase_price",
    "purchaseprice": "purchase_price",
    "cost": "purchase_price",
    "cost_price": "purchase_price",
    "selling_price": "selling_price",
    "sellingprice": "selling_price",
    "price": "selling_price",
    "quantity": "quantity",
    "qty": "quantity",
    "stock": "quantity",
    "min_stock_level": "min_stock_level",
    "minstocklevel": "min_stock_level",
    "min_stock": "min_stock_level",
    "reorder_level": "min_stock_level",
    "description": "description",
}

REQUIRED_COLUMNS = {"sku", "name", "brand", "category", "purchase_price", "selling_price"}

_CATEGORY_LOOKUP = {category.lower(): category for category in PRODUCT_CATEGORIES}


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_header(value):
    if value is None:
        return ""
    value_text = str(value).strip().lower()
    if not value_text:
        return ""
    for char in (" ", "-", ".", "/"):
        value_text = value_text.replace(char, "_")
    value_text = "_".join(part for part in value_text.split("_") if part)
    alias = HEADER_ALIASES.get(value_text)
    if alias:
        return alias
    alias = HEADER_ALIASES.get(value_text.replace("_", ""))
    if alias:
        return alias
    return value_text


def to_str(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    return str(value).strip()


def to_int(value, field, required=True):
    if _is_blank(value):
        if required:
            raise ValueError(f"{field} is required")
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValueError(f"{field} must be an integer")
    value_text = str(value).strip()
    try:
        numeric = float(value_text.replace(",", ""))
    except ValueError:
        raise ValueError(f"{field} must be an integer") from None
    if not numeric.is_integer():
        raise ValueError(f"{field} must be an integer")
    return int(numeric)


def to_price(value, field):
    if _is_blank(value):
        raise ValueError(f"{field} is required")
    if isinstance(value, str):
        value = value.replace(",", "")
    try:
        price = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be a number") from None
    if not math.isfinite(price):
        raise ValueError(f"{field} must be a finite number")
    if price < 0:
        raise ValueError(f"{field} must be non-negative")
    return price


def to_category(value):
    text = to_str(value, "category")
    category = _CATEGORY_LOOKUP.get(text.lower())
    if category is None:
        raise ValueError(
            "category must be one of: {}".format(", ".join(PRODUCT_CATEGORIES))
        )
    return category


def load_sheet_rows(worksheet):
    rows_iter = worksheet.iter_rows(values_only=True)
    headers = next(rows_iter, None)
    if not headers:
        return [], set()
    header_keys = [normalize_header(header) for header in headers]
    indices = [(idx, key) for idx, key in enumerate(header_keys) if key]
    columns = {key for key in header_keys if key}

    rows = []
    for row_number, row in enumerate(rows_iter, start=2):
        if row is None or all(_is_blank(value) for value in row):
            continue
        record = {key: row[idx] if idx < len(row) else None for idx, key in indices}
        record["_row"] = row_number
        rows.append(record)
    return rows, columns


def validate_columns(columns):
    missing = sorted(REQUIRED_COLUMNS - columns)
    if missing:
        raise ValueError("products sheet missing columns: {}".format(", ".join(missing)))


def build_product_values(row, default_min_stock_level=None):
    if default_min_stock_level is None:
        default_min_stock_level = get_settings().DEFAULT_MIN_STOCK_LEVEL
    quantity = to_int(row.get("quantity"), "quantity", required=False)
    if quantity is not None and quantity < 0:
        raise ValueError("quantity must be non-negative")
    min_level = to_int(row.get("min_stock_level"), "min_stock_level", required=False)
    return {
        "sku": to_str(row.get("sku"), "sku"),
        "name": to_str(row.get("name"), "name"),
        "brand": to_str(row.get("brand"), "brand"),
        "category": to_category(row.get("category")),
        "purchase_price": to_price(row.get("purchase_price"), "purchase_price"),
        "selling_price": to_price(row.get("selling_price"), "selling_price"),
        "quantity": quantity if quantity is not None else 0,
        "min_stock_level": min_level if min_level is not None else default_min_stock_level,
        "description": to_str(row.get("description"), "description", required=False) or "",
    }


def upsert_product(db, outlet, row):
    values = build_product_values(row)
    product = find_by_sku(db, outlet, values["sku"])
    if product is not None:
        for key, value in values.items():
            setattr(product, key, value)
        product.is_active = True
        return "updated"
    db.add(Product(outlet=outlet, is_active=True, **values))
    return "inserted"


def import_rows(db, outlet, rows):
    counts = {"inserted": 0, "updated": 0, "skipped": 0, "errors": []}
    seen = set()
    for row in rows:
        row_number = row.get("_row")
        try:
            sku = to_str(row.get("sku"), "sku")
            if sku in seen:
                raise ValueError(f"duplicate sku {sku} in sheet")
            action = upsert_product(db, outlet, row)
            # Flush so a later row for the same sku sees this one.
            db.flush()
        except ValueError as exc:
            counts["skipped"] += 1
            counts["errors"].append(f"row {row_number}: {exc}")
            continue
        seen.add(sku)
        counts[action] += 1
    return counts


def import_workbook(workbook_path, outlet, sheet=None, dry_run=False, session_factory=None):
    validate_outlet(outlet)
    workbook_path = Path(workbook_path)
    if not workbook_path.exists():
        raise FileNotFoundError(f"File not found: {workbook_path}")
    if workbook_path.suffix.lower() != ".xlsx":
        raise ValueError("Only .xlsx files are supported.")

    workbook = load_workbook(workbook_path, data_only=True)
    if sheet:
        if sheet not in workbook.sheetnames:
            raise ValueError(f"Sheet not found: {sheet}")
        worksheet = workbook[sheet]
    else:
        worksheet = workbook[workbook.sheetnames[0]]

    rows, columns = load_sheet_rows(worksheet)
    validate_columns(columns)

    if session_factory is None:
        init_db()

    with session_scope(session_factory) as db:
        counts = import_rows(db, outlet, rows)
        if dry_run:
            db.rollback()
        else:
            db.commit()

    logger.info(
        "Imported %s into %s: %s inserted, %s updated, %s skipped%s",
        workbook_path.name,
        outlet,
        counts["inserted"],
        counts["updated"],
        counts["skipped"],
        " (dry run)" if dry_run else "",
        extra={"outlet": outlet},
    )
    return counts


__all__ = [
    "build_product_values",
    "import_rows",
    "import_workbook",
    "load_sheet_rows",
    "normalize_header",
    "validate_columns",
]
