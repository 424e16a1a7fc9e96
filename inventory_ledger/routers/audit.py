from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ledger.dependencies import get_audit_service, get_transfer_service
from inventory_ledger.schemas.audit import AuditEventType, AuditLogEntry, AuditQuery
from inventory_ledger.schemas.transfer import ActivityEvent
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.services.transfer_service import DEFAULT_ACTIVITY_LIMIT, TransferService

router = APIRouter(tags=["Audit"])


@router.get("/audit-log", response_model=list[AuditLogEntry], response_model_exclude_none=True)
def list_audit_log(
    product_id: Optional[int] = Query(None, alias="productId"),
    warehouse_id: Optional[int] = Query(None, alias="warehouseId"),
    event_type: Optional[AuditEventType] = Query(None, alias="eventType"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    audit: AuditService = Depends(get_audit_service),
):
    filters = AuditQuery(
        product_id=product_id,
        warehouse_id=warehouse_id,
        event_type=event_type,
        start_date=start_date,
        end_date=end_date,
    )
    return audit.query(filters)


@router.get("/activity", response_model=list[ActivityEvent])
def recent_activity(
    product_id: Optional[int] = Query(None, alias="productId"),
    limit: int = Query(DEFAULT_ACTIVITY_LIMIT, ge=0),
    transfers: TransferService = Depends(get_transfer_service),
):
    return transfers.recent_activity(product_id=product_id, limit=limit)
