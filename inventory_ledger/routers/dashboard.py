from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ledger.dependencies import get_store
from inventory_ledger.schemas.dashboard import DashboardSummary
from inventory_ledger.services.dashboard_service import dashboard_summary
from inventory_ledger.storage import JsonStore

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardSummary, response_model_exclude_none=True)
def get_dashboard(
    overview_limit: Optional[int] = Query(None, alias="overviewLimit", ge=0),
    store: JsonStore = Depends(get_store),
):
    return dashboard_summary(store, overview_limit=overview_limit)
