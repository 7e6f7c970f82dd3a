import tempfile
import threading
import unittest
from datetime import date
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from outlet_pos.core.exceptions import AllocationRace, InsufficientStock
from outlet_pos.database.base import Base
from outlet_pos.database.engine import build_engine
from outlet_pos.models import import_all_models
from outlet_pos.models.bill import Bill
from outlet_pos.services import billing_service, inventory_service

SALE_DAY = date(2024, 1, 15)
STOCK = 10
TILLS = 16


class ConcurrentSalesTest(unittest.TestCase):
    def setUp(self):
        import_all_models()
        self.tmp_dir = tempfile.TemporaryDirectory()
        db_path = Path(self.tmp_dir.name) / "pos.db"
        self.engine = build_engine(f"sqlite:///{db_path}")
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        db = self.Session()
        try:
            self.product_id = inventory_service.create_product(
                db,
                "harigala",
                {
                    "sku": "BK-001",
                    "name": "Trail Blazer",
                    "brand": "Hero",
                    "category": "Bicycle",
                    "purchase_price": 700.0,
                    "selling_price": 1000.0,
                    "quantity": STOCK,
                    "min_stock_level": 2,
                },
            ).id
        finally:
            db.close()

    def tearDown(self):
        self.engine.dispose()
        self.tmp_dir.cleanup()

    def _sell_one(self, barrier, outcomes, lock):
        db = self.Session()
        try:
            barrier.wait()
            bill = billing_service.create_bill(
                db,
                "harigala",
                [{"product_id": self.product_id, "quantity": 1}],
                today=SALE_DAY,
            )
            outcome = bill.bill_number
        except (InsufficientStock, AllocationRace) as exc:
            outcome = exc
        finally:
            db.close()
        with lock:
            outcomes.append(outcome)

    def test_parallel_tills_never_oversell_or_share_a_bill_number(self):
        barrier = threading.Barrier(TILLS)
        lock = threading.Lock()
        outcomes = []
        threads = [
            threading.Thread(target=self._sell_one, args=(barrier, outcomes, lock))
            for _ in range(TILLS)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)

        self.assertEqual(len(outcomes), TILLS)
        numbers = [outcome for outcome in outcomes if isinstance(outcome, str)]
        self.assertTrue(numbers)
        self.assertLessEqual(len(numbers), STOCK)
        self.assertEqual(len(numbers), len(set(numbers)))
        for number in numbers:
            self.assertRegex(number, r"^HAR20240115\d{3}$")

        db = self.Session()
        try:
            remaining = inventory_service.find_by_id(db, "harigala", self.product_id).quantity
            stored = db.execute(select(Bill.bill_number)).scalars().all()
        finally:
            db.close()

        self.assertGreaterEqual(remaining, 0)
        self.assertEqual(remaining, STOCK - len(numbers))
        self.assertEqual(sorted(stored), sorted(numbers))


if __name__ == "__main__":
    unittest.main()
