from typing import Literal, Optional

from inventory_ledger.schemas.common import CamelModel

AuditEventType = Literal["TRANSFER_OUT", "TRANSFER_IN", "ADJUSTMENT", "RECEIPT"]


class StockChangeParams(CamelModel):
    """One stock change as the caller applied it.

    ``quantity_before``/``quantity_after`` are the caller's snapshot; the
    audit log never re-reads stock to fill them in.
    """

    event_type: AuditEventType
    reference_number: str
    product_id: int
    warehouse_id: int
    quantity_change: int
    quantity_before: int
    quantity_after: int
    notes: Optional[str] = None


class AuditLogEntry(StockChangeParams):
    id: int
    timestamp: str


class AuditQuery(CamelModel):
    product_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    event_type: Optional[AuditEventType] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
