from fastapi import APIRouter, Depends

from inventory_ledger.dependencies import get_catalog_service
from inventory_ledger.schemas.catalog import (
    Category,
    CategoryCreate,
    CategorySummary,
    CategoryUpdate,
)
from inventory_ledger.services.catalog_service import CatalogService

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=list[CategorySummary], response_model_exclude_none=True)
def list_categories(catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.list_categories()


@router.post("", status_code=201, response_model=Category, response_model_exclude_none=True)
def create_category(payload: CategoryCreate, catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.create_category(payload)


@router.put("/{category_id}", response_model=Category, response_model_exclude_none=True)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    catalog: CatalogService = Depends(get_catalog_service),
):
    return catalog.update_category(category_id, payload)


@router.delete("/{category_id}")
def delete_category(category_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    removed = catalog.delete_category(category_id)
    return {"message": "Category deleted", "removed": removed}
