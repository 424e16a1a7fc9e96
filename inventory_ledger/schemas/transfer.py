from typing import Literal, Optional

from inventory_ledger.schemas.catalog import ProductRef, WarehouseRef
from inventory_ledger.schemas.common import CamelModel

TransferStatus = Literal["completed", "pending", "cancelled"]


class TransferCreate(CamelModel):
    product_id: int
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: int
    notes: Optional[str] = None


class Transfer(CamelModel):
    id: int
    reference_number: str
    product_id: int
    from_warehouse_id: int
    to_warehouse_id: int
    quantity: int
    status: TransferStatus
    created_at: str
    completed_at: Optional[str] = None
    notes: Optional[str] = None


class EnrichedTransfer(CamelModel):
    id: int
    reference_number: str
    product: ProductRef
    from_warehouse: WarehouseRef
    to_warehouse: WarehouseRef
    quantity: int
    status: TransferStatus
    created_at: str
    completed_at: Optional[str] = None
    notes: Optional[str] = None


class TransferPage(CamelModel):
    data: list[EnrichedTransfer]
    total: int
    limit: int
    offset: int


class ActivityEvent(CamelModel):
    id: int
    type: Literal["completed", "pending"]
    reference_number: str
    description: str
    timestamp: str
