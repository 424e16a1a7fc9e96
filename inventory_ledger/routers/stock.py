from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ledger.dependencies import get_stock_service
from inventory_ledger.schemas.stock import ReorderRequest, StockAdjustRequest, StockEntry
from inventory_ledger.services.stock_service import StockService

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.get("", response_model=list[StockEntry])
def list_stock(
    product_id: Optional[int] = Query(None, alias="productId"),
    warehouse_id: Optional[int] = Query(None, alias="warehouseId"),
    stock: StockService = Depends(get_stock_service),
):
    return stock.list_stock(product_id=product_id, warehouse_id=warehouse_id)


@router.post("/adjust", response_model=StockEntry)
def adjust_stock(payload: StockAdjustRequest, stock: StockService = Depends(get_stock_service)):
    change = stock.adjust_stock(
        payload.product_id,
        payload.warehouse_id,
        payload.adjustment_quantity,
        payload.reason,
    )
    return change.entry


@router.post("/reorder")
def reorder_stock(payload: ReorderRequest, stock: StockService = Depends(get_stock_service)):
    result = stock.reorder_stock(payload.product_id, payload.warehouse_id, payload.quantity)
    alert_update = {"succeeded": result.alert_update.succeeded}
    if result.alert_update.error:
        alert_update["error"] = result.alert_update.error
    return {
        "success": True,
        "message": result.message,
        "orderId": result.order.id,
        "referenceNumber": result.order.reference_number,
        "alertUpdate": alert_update,
    }
