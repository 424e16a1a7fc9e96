from inventory_ledger.routers.alerts import router as alerts_router
from inventory_ledger.routers.audit import router as audit_router
from inventory_ledger.routers.categories import router as categories_router
from inventory_ledger.routers.dashboard import router as dashboard_router
from inventory_ledger.routers.exports import router as exports_router
from inventory_ledger.routers.health import router as health_router
from inventory_ledger.routers.products import router as products_router
from inventory_ledger.routers.purchase_orders import router as purchase_orders_router
from inventory_ledger.routers.stock import router as stock_router
from inventory_ledger.routers.transfers import router as transfers_router
from inventory_ledger.routers.warehouses import router as warehouses_router

__all__ = [
    "alerts_router",
    "audit_router",
    "categories_router",
    "dashboard_router",
    "exports_router",
    "health_router",
    "products_router",
    "purchase_orders_router",
    "stock_router",
    "transfers_router",
    "warehouses_router",
]
