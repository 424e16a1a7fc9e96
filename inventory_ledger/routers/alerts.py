from typing import Optional

from fastapi import APIRouter, Depends, Query

from inventory_ledger.dependencies import get_alert_service
from inventory_ledger.schemas.alert import (
    AlertCreate,
    AlertRecord,
    AlertStats,
    AlertStatusPatch,
    AlertStatusUpdate,
    EnrichedAlert,
)
from inventory_ledger.services.alert_service import AlertService

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("", response_model=list[EnrichedAlert], response_model_exclude_none=True)
def list_alerts(
    severity: Optional[str] = Query(None, description="critical, warning or info"),
    status: Optional[str] = Query(None),
    warehouse_id: Optional[int] = Query(None, alias="warehouseId"),
    alerts: AlertService = Depends(get_alert_service),
):
    return alerts.query_alerts(severity=severity, status=status, warehouse_id=warehouse_id)


@router.get("/stats", response_model=AlertStats)
def alert_stats(alerts: AlertService = Depends(get_alert_service)):
    return alerts.alert_stats()


@router.post("", response_model=AlertRecord, response_model_exclude_none=True)
def upsert_alert_status(payload: AlertCreate, alerts: AlertService = Depends(get_alert_service)):
    update = AlertStatusUpdate(
        status=payload.status,
        snooze_until=payload.snooze_until,
        notes=payload.notes,
    )
    return alerts.update_alert_status(payload.product_id, payload.warehouse_id, update)


@router.get("/{alert_id}", response_model=AlertRecord, response_model_exclude_none=True)
def get_alert(alert_id: int, alerts: AlertService = Depends(get_alert_service)):
    return alerts.get_alert(alert_id)


@router.patch("/{alert_id}", response_model=AlertRecord, response_model_exclude_none=True)
def update_alert(
    alert_id: int,
    payload: AlertStatusPatch,
    alerts: AlertService = Depends(get_alert_service),
):
    return alerts.update_alert_status_by_id(alert_id, payload)
