from typing import Literal, Optional

from pydantic import Field

from inventory_ledger.schemas.common import CamelModel

PurchaseOrderStatus = Literal["pending", "received", "cancelled"]


class StockEntry(CamelModel):
    id: int
    product_id: int
    warehouse_id: int
    quantity: int = Field(ge=0)


class StockAdjustRequest(CamelModel):
    product_id: int
    warehouse_id: int
    adjustment_quantity: int
    reason: str = ""


class ReorderRequest(CamelModel):
    product_id: int
    warehouse_id: int
    quantity: int


class PurchaseOrderCreate(CamelModel):
    product_id: int
    warehouse_id: int
    quantity: int


class PurchaseOrder(CamelModel):
    id: int
    product_id: int
    warehouse_id: int
    quantity: int
    status: PurchaseOrderStatus = "pending"
    order_date: str
    received_date: Optional[str] = None
    cancelled_date: Optional[str] = None
    reference_number: Optional[str] = None

    @property
    def audit_reference(self) -> str:
        return self.reference_number or "PO-{}".format(self.id)
