import importlib

from outlet_pos.models.bill import Bill, BillItem
from outlet_pos.models.product import Product


def import_all_models() -> None:
    for module_name in (
        "outlet_pos.models.bill",
        "outlet_pos.models.product",
    ):
        importlib.import_module(module_name)


__all__ = [
    "Bill",
    "BillItem",
    "Product",
    "import_all_models",
]
