from outlet_pos.routers.bills import router as bills_router
from outlet_pos.routers.health import router as health_router
from outlet_pos.routers.products import router as products_router
from outlet_pos.routers.reports import router as reports_router

__all__ = [
    "bills_router",
    "health_router",
    "products_router",
    "reports_router",
]
