import unittest

from sqlalchemy.orm import sessionmaker

from outlet_pos.core.exceptions import (
    DuplicateSku,
    InsufficientStock,
    ProductNotFound,
    ValidationError,
)
from outlet_pos.database.base import Base
from outlet_pos.database.engine import build_engine
from outlet_pos.database.session import session_scope
from outlet_pos.models import import_all_models
from outlet_pos.models.product import Product, classify_stock
from outlet_pos.services import inventory_service


def _product_values(**overrides):
    values = {
        "sku": "BK-001",
        "name": "Trail Blazer",
        "brand": "Hero",
        "category": "Bicycle",
        "purchase_price": 700.0,
        "selling_price": 1000.0,
        "quantity": 5,
        "min_stock_level": 2,
        "description": "",
    }
    values.update(overrides)
    return values


class InventoryServiceTest(unittest.TestCase):
    def setUp(self):
        import_all_models()
        self.engine = build_engine("sqlite:///:memory:")
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)
        self.db = self.Session()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _create(self, outlet="harigala", **overrides):
        return inventory_service.create_product(self.db, outlet, _product_values(**overrides))

    def test_decrement_reduces_quantity(self):
        product = self._create()
        before = inventory_service.find_by_id(self.db, "harigala", product.id).updated_at

        updated = inventory_service.decrement_quantity(self.db, "harigala", product.id, 2)
        self.db.commit()

        self.assertEqual(updated.quantity, 3)
        self.assertGreaterEqual(updated.updated_at, before)

    def test_decrement_beyond_stock_is_rejected(self):
        product = self._create(quantity=1)

        with self.assertRaises(InsufficientStock) as ctx:
            inventory_service.decrement_quantity(self.db, "harigala", product.id, 2)

        self.assertEqual(ctx.exception.product_id, product.id)
        self.assertEqual(ctx.exception.details["available"], 1)
        self.assertEqual(inventory_service.find_by_id(self.db, "harigala", product.id).quantity, 1)

    def test_repeated_decrements_never_oversell(self):
        product = self._create(quantity=5)
        sold = 0
        rejected = 0
        for _ in range(7):
            try:
                inventory_service.decrement_quantity(self.db, "harigala", product.id, 1)
                self.db.commit()
                sold += 1
            except InsufficientStock:
                self.db.rollback()
                rejected += 1

        self.assertEqual(sold, 5)
        self.assertEqual(rejected, 2)
        self.assertEqual(inventory_service.find_by_id(self.db, "harigala", product.id).quantity, 0)

    def test_decrement_unknown_or_inactive_product(self):
        product = self._create()
        inventory_service.deactivate_product(self.db, "harigala", product.id)

        with self.assertRaises(ProductNotFound):
            inventory_service.decrement_quantity(self.db, "harigala", product.id, 1)
        with self.assertRaises(ProductNotFound):
            inventory_service.decrement_quantity(self.db, "harigala", 9999, 1)

    def test_outlets_are_isolated(self):
        product = self._create(outlet="harigala")

        with self.assertRaises(ProductNotFound):
            inventory_service.find_by_id(self.db, "arandara", product.id)
        with self.assertRaises(ProductNotFound):
            inventory_service.decrement_quantity(self.db, "arandara", product.id, 1)

    def test_unknown_outlet_is_a_validation_error(self):
        with self.assertRaises(ValidationError):
            inventory_service.list_active(self.db, "colombo")

    def test_sku_unique_per_outlet_only(self):
        self._create(outlet="harigala", sku="AC-1")

        with self.assertRaises(DuplicateSku):
            self._create(outlet="harigala", sku="AC-1")

        other = self._create(outlet="arandara", sku="AC-1")
        self.assertEqual(other.outlet, "arandara")

    def test_soft_deleted_product_still_holds_its_sku(self):
        product = self._create(sku="AC-2")
        inventory_service.deactivate_product(self.db, "harigala", product.id)

        with self.assertRaises(DuplicateSku):
            self._create(sku="AC-2")

    def test_session_scope_rolls_back_uncommitted_writes_on_error(self):
        product = self._create(quantity=5)

        with self.assertRaises(InsufficientStock):
            with session_scope(self.Session) as db:
                inventory_service.decrement_quantity(db, "harigala", product.id, 2)
                inventory_service.decrement_quantity(db, "harigala", product.id, 4)

        self.assertEqual(inventory_service.find_by_id(self.db, "harigala", product.id).quantity, 5)

    def test_non_finite_prices_are_rejected(self):
        with self.assertRaises(ValidationError):
            self._create(sku="INF", selling_price=float("inf"))
        with self.assertRaises(ValidationError):
            self._create(sku="NAN", purchase_price=float("nan"))

        product = self._create(sku="OK")
        with self.assertRaises(ValidationError):
            inventory_service.update_product(
                self.db, "harigala", product.id, {"selling_price": float("nan")}
            )
        self.assertEqual(inventory_service.find_by_id(self.db, "harigala", product.id).selling_price, 1000.0)
        self.assertEqual([p.sku for p in inventory_service.list_active(self.db, "harigala")], ["OK"])

    def test_update_rejects_sku_of_another_product(self):
        self._create(sku="A")
        second = self._create(sku="B")

        with self.assertRaises(DuplicateSku):
            inventory_service.update_product(
                self.db, "harigala", second.id, _product_values(sku="A")
            )

        updated = inventory_service.update_product(
            self.db, "harigala", second.id, _product_values(sku="B", selling_price=1200.0)
        )
        self.assertEqual(updated.selling_price, 1200.0)

    def test_adjust_quantity_set_and_add(self):
        product = self._create(quantity=5)

        product = inventory_service.adjust_quantity(self.db, "harigala", product.id, 12, mode="set")
        self.assertEqual(product.quantity, 12)

        product = inventory_service.adjust_quantity(self.db, "harigala", product.id, 3, mode="add")
        self.assertEqual(product.quantity, 15)

        product = inventory_service.adjust_quantity(self.db, "harigala", product.id, -4, mode="add")
        self.assertEqual(product.quantity, 11)

    def test_adjust_quantity_rejects_negative_results(self):
        product = self._create(quantity=2)

        with self.assertRaises(InsufficientStock):
            inventory_service.adjust_quantity(self.db, "harigala", product.id, -3, mode="add")
        with self.assertRaises(ValidationError):
            inventory_service.adjust_quantity(self.db, "harigala", product.id, -1, mode="set")
        with self.assertRaises(ValidationError):
            inventory_service.adjust_quantity(self.db, "harigala", product.id, 1, mode="replace")

        self.assertEqual(inventory_service.find_by_id(self.db, "harigala", product.id).quantity, 2)

    def test_list_active_excludes_deleted_products(self):
        first = self._create(sku="A")
        second = self._create(sku="B")
        self._create(outlet="arandara", sku="C")
        inventory_service.deactivate_product(self.db, "harigala", first.id)

        products = inventory_service.list_active(self.db, "harigala")

        self.assertEqual([p.id for p in products], [second.id])

    def test_stock_status_classification(self):
        self.assertEqual(classify_stock(0, 10), "out_of_stock")
        self.assertEqual(classify_stock(10, 10), "low_stock")
        self.assertEqual(classify_stock(11, 10), "in_stock")

        product = Product(quantity=3, min_stock_level=5)
        self.assertEqual(product.stock_status, "low_stock")


if __name__ == "__main__":
    unittest.main()
