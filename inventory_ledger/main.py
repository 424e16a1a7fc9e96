import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from inventory_ledger.config import Settings, get_settings
from inventory_ledger.core.errors import InventoryError
from inventory_ledger.core.logging import setup_logging
from inventory_ledger.routers import (
    alerts_router,
    audit_router,
    categories_router,
    dashboard_router,
    exports_router,
    health_router,
    products_router,
    purchase_orders_router,
    stock_router,
    transfers_router,
    warehouses_router,
)

logger = logging.getLogger(__name__)

setup_logging()
settings: Settings = get_settings()

app = FastAPI(title=settings.APP_NAME)


@app.exception_handler(InventoryError)
async def inventory_error_handler(_request: Request, exc: InventoryError):
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message)
    headers = {"Retry-After": "1"} if exc.retryable else None
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict(), headers=headers)


app.include_router(health_router)
app.include_router(products_router)
app.include_router(warehouses_router)
app.include_router(categories_router)
app.include_router(stock_router)
app.include_router(purchase_orders_router)
app.include_router(transfers_router)
app.include_router(alerts_router)
app.include_router(audit_router)
app.include_router(dashboard_router)
app.include_router(exports_router)


__all__ = ["app", "inventory_error_handler"]
