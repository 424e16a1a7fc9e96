from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ledger.dependencies import get_transfer_service
from inventory_ledger.schemas.audit import AuditLogEntry
from inventory_ledger.schemas.transfer import (
    EnrichedTransfer,
    Transfer,
    TransferCreate,
    TransferPage,
)
from inventory_ledger.services.transfer_service import DEFAULT_PAGE_LIMIT, TransferService

router = APIRouter(prefix="/transfers", tags=["Transfers"])


@router.get("", response_model=TransferPage, response_model_exclude_none=True)
def list_transfers(
    product_id: Optional[int] = Query(None, alias="productId"),
    warehouse_id: Optional[int] = Query(None, alias="warehouseId"),
    status: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: int = Query(DEFAULT_PAGE_LIMIT),
    offset: int = Query(0),
    transfers: TransferService = Depends(get_transfer_service),
):
    return transfers.query_transfers(
        product_id=product_id,
        warehouse_id=warehouse_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )


@router.post("", status_code=201, response_model=Transfer, response_model_exclude_none=True)
def create_transfer(
    payload: TransferCreate,
    transfers: TransferService = Depends(get_transfer_service),
):
    return transfers.execute_transfer(payload)


@router.get("/{transfer_id}", response_model=EnrichedTransfer, response_model_exclude_none=True)
def get_transfer(transfer_id: int, transfers: TransferService = Depends(get_transfer_service)):
    return transfers.get_transfer(transfer_id)


@router.get("/{transfer_id}/audit", response_model=list[AuditLogEntry], response_model_exclude_none=True)
def get_transfer_audit(transfer_id: int, transfers: TransferService = Depends(get_transfer_service)):
    return transfers.audit_trail(transfer_id)
