from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ledger.dependencies import get_audit_service, get_catalog_service
from inventory_ledger.schemas.audit import AuditLogEntry
from inventory_ledger.schemas.catalog import Product, ProductCreate, ProductUpdate
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("", response_model=list[Product], response_model_exclude_none=True)
def list_products(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.list_products(search=search, category=category)


@router.post("", status_code=201, response_model=Product, response_model_exclude_none=True)
def create_product(payload: ProductCreate, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.create_product(payload)


@router.get("/{product_key}", response_model=Product, response_model_exclude_none=True)
def get_product(product_key: str, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.get_product(product_key)


@router.get("/{product_id}/history", response_model=list[AuditLogEntry], response_model_exclude_none=True)
def product_history(product_id: int, audit: AuditService = Depends(get_audit_service)):
    return audit.product_history(product_id)


@router.put("/{product_id}", response_model=Product, response_model_exclude_none=True)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.update_product(product_id, payload)


@router.delete("/{product_id}")
def delete_product(product_id: int, catalog: CatalogService = Depends(get_catalog_service)):
    removed = catalog.delete_product(product_id)
    return {"message": "Product deleted", "removed": removed}
