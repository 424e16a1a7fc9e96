from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ledger.dependencies import get_stock_service
from inventory_ledger.schemas.stock import PurchaseOrder, PurchaseOrderCreate
from inventory_ledger.services.stock_service import StockService

router = APIRouter(prefix="/purchase-orders", tags=["Purchase Orders"])


@router.get("", response_model=list[PurchaseOrder], response_model_exclude_none=True)
def list_purchase_orders(
    status: Optional[str] = Query(None, description="pending, received or cancelled"),
    stock: StockService = Depends(get_stock_service),
):
    return stock.list_purchase_orders(status)


@router.post("", status_code=201, response_model=PurchaseOrder, response_model_exclude_none=True)
def create_purchase_order(
    payload: PurchaseOrderCreate,
    stock: StockService = Depends(get_stock_service),
):
    return stock.create_purchase_order(payload.product_id, payload.warehouse_id, payload.quantity)


@router.get("/{order_id}", response_model=PurchaseOrder, response_model_exclude_none=True)
def get_purchase_order(order_id: int, stock: StockService = Depends(get_stock_service)):
    return stock.get_purchase_order(order_id)


@router.post("/{order_id}/receive")
def receive_purchase_order(order_id: int, stock: StockService = Depends(get_stock_service)):
    result = stock.receive_purchase_order(order_id)
    return {
        "success": True,
        "newStock": result.new_stock_quantity,
        "order": result.order.to_record(),
    }


@router.post("/{order_id}/cancel", response_model=PurchaseOrder, response_model_exclude_none=True)
def cancel_purchase_order(order_id: int, stock: StockService = Depends(get_stock_service)):
    return stock.cancel_purchase_order(order_id)
