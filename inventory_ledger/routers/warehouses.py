from fastapi import APIRouter, Depends

from inventory_ledger.dependencies import get_audit_service, get_catalog_service
from inventory_ledger.schemas.audit import AuditLogEntry
from inventory_ledger.schemas.catalog import Warehouse, WarehouseCreate, WarehouseUpdate
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.services.catalog_service import CatalogService

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])


@router.get("", response_model=list[Warehouse])
def list_warehouses(catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.list_warehouses()


@router.post("", status_code=201, response_model=Warehouse)
def create_warehouse(payload: WarehouseCreate, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.create_warehouse(payload)


@router.get("/{warehouse_id}", response_model=Warehouse)
def get_warehouse(warehouse_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.get_warehouse(warehouse_id)


@router.get("/{warehouse_id}/history", response_model=list[AuditLogEntry], response_model_exclude_none=True)
def warehouse_history(warehouse_id: int, audit: AuditService = Depends(get_audit_service)):
    return audit.warehouse_history(warehouse_id)


@router.put("/{warehouse_id}", response_model=Warehouse)
def update_warehouse(
    warehouse_id: int,
    payload: WarehouseUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.update_warehouse(warehouse_id, payload)


@router.delete("/{warehouse_id}")
def delete_warehouse(warehouse_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    removed = catalog.delete_warehouse(warehouse_id)
    return {"message": "Warehouse deleted", "removed": removed}
