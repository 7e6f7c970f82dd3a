import argparse

from sqlalchemy import delete, select

from outlet_pos.core.logging import setup_logging
from outlet_pos.database import init_db, session_scope
from outlet_pos.models.bill import Bill, BillItem
from outlet_pos.models.product import Product

SAMPLE_PRODUCTS = {
    "harigala": [
        ("BK-MTB-001", "Trail Blazer 27.5", "Hero", "Bicycle", 42000.0, 55000.0, 6),
        ("AC-HLM-010", "Urban Helmet", "Giro", "Accessories", 3500.0, 5200.0, 25),
        ("PT-CHN-101", "8-Speed Chain", "Shimano", "Parts", 1800.0, 2600.0, 4),
    ],
    "arandara": [
        ("BK-RD-002", "Road Master 700c", "Trek", "Bicycle", 68000.0, 85000.0, 3),
        ("CL-JRS-020", "Cycling Jersey", "Castelli", "Clothing", 2900.0, 4500.0, 12),
        ("TL-MUL-030", "Multi Tool 15-in-1", "Topeak", "Tools", 2200.0, 3400.0, 0),
    ],
}


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample products for both outlets.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing products and bills before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    init_db()

    with session_scope() as db:
        if args.reset:
            db.execute(delete(BillItem))
            db.execute(delete(Bill))
            db.execute(delete(Product))
            db.commit()

        has_product = db.execute(select(Product.id).limit(1)).first()
        if has_product:
            print("Seed skipped: products already exist.")
            return

        for outlet, rows in SAMPLE_PRODUCTS.items():
            db.add_all(
                Product(
                    outlet=outlet,
                    sku=sku,
                    name=name,
                    brand=brand,
                    category=category,
                    purchase_price=purchase_price,
                    selling_price=selling_price,
                    quantity=quantity,
                    min_stock_level=5,
                    description="",
                )
                for sku, name, brand, category, purchase_price, selling_price, quantity in rows
            )
        db.commit()
        print("Seed data created.")


if __name__ == "__main__":
    main()
