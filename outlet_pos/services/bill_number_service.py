"""Date-scoped sequential bill numbers, e.g. ``HAR20240115003``.

The number is derived from the greatest existing number for the same
outlet and day, so two concurrent sales can compute the same value. The
unique index on ``bills.bill_number`` turns that into an IntegrityError
which the billing service retries.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from outlet_pos.core.constants import BILL_SEQUENCE_DIGITS, BILL_SEQUENCE_MAX
from outlet_pos.core.exceptions import ValidationError
from outlet_pos.models.bill import Bill


def outlet_prefix(outlet: str) -> str:
    return outlet[:3].upper()


def bill_number_stem(outlet: str, day: date) -> str:
    return f"{outlet_prefix(outlet)}{day.strftime('%Y%m%d')}"


def format_bill_number(outlet: str, day: date, sequence: int) -> str:
    return f"{bill_number_stem(outlet, day)}{sequence:0{BILL_SEQUENCE_DIGITS}d}"


def parse_sequence(bill_number: str) -> int:
    tail = bill_number[-BILL_SEQUENCE_DIGITS:]
    if len(tail) != BILL_SEQUENCE_DIGITS or not tail.isdigit():
        raise ValueError(f"Malformed bill number: {bill_number!r}")
    return int(tail)


def latest_bill_number(db: Session, outlet: str, day: date) -> str | None:
    stem = bill_number_stem(outlet, day)
    return db.execute(
        select(Bill.bill_number)
        .where(Bill.bill_number.like(f"{stem}%"))
        .order_by(Bill.bill_number.desc())
        .limit(1)
    ).scalar()


def next_bill_number(db: Session, outlet: str, day: date) -> str:
    latest = latest_bill_number(db, outlet, day)
    sequence = 1 if latest is None else parse_sequence(latest) + 1
    if sequence > BILL_SEQUENCE_MAX:
        raise ValidationError(
            "Daily bill limit reached for outlet",
            outlet=outlet,
            bill_date=day.isoformat(),
        )
    return format_bill_number(outlet, day, sequence)


__all__ = [
    "bill_number_stem",
    "format_bill_number",
    "latest_bill_number",
    "next_bill_number",
    "outlet_prefix",
    "parse_sequence",
]
