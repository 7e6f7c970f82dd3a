from outlet_pos.services.billing_service import create_bill, get_bill, list_bills
from outlet_pos.services.import_service import import_workbook
from outlet_pos.services.report_service import inventory_report, sales_report

__all__ = [
    "create_bill",
    "get_bill",
    "import_workbook",
    "inventory_report",
    "list_bills",
    "sales_report",
]
