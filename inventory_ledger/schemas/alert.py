from typing import Literal, Optional

from pydantic import model_validator

from inventory_ledger.schemas.common import CamelModel

AlertStatus = Literal["active", "acknowledged", "resolved", "snoozed"]
AlertSeverity = Literal["critical", "warning", "info"]


class AlertRecord(CamelModel):
    id: int
    product_id: int
    warehouse_id: int
    status: AlertStatus
    acknowledged_at: Optional[str] = None
    resolved_at: Optional[str] = None
    snoozed_until: Optional[str] = None
    notes: Optional[str] = None
    created_at: str
    updated_at: str


class AlertStatusUpdate(CamelModel):
    status: AlertStatus
    snooze_until: Optional[str] = None
    notes: Optional[str] = None


class AlertStatusPatch(AlertStatusUpdate):
    @model_validator(mode="after")
    def _require_snooze_until(self):
        if self.status == "snoozed" and not self.snooze_until:
            raise ValueError("snoozeUntil is required when status is snoozed")
        return self


class AlertCreate(AlertStatusUpdate):
    product_id: int
    warehouse_id: int


class AlertProduct(CamelModel):
    id: int
    name: str
    sku: str
    category: str


class AlertWarehouse(CamelModel):
    id: int
    name: str
    code: str


class EnrichedAlert(CamelModel):
    id: int
    status: AlertStatus
    product: AlertProduct
    warehouse: AlertWarehouse
    current_stock: int
    reorder_point: int
    shortage: int
    severity: AlertSeverity
    recommended_quantity: int
    timestamp: str
    created_at: str
    updated_at: str
    acknowledged_at: Optional[str] = None
    resolved_at: Optional[str] = None
    snoozed_until: Optional[str] = None
    notes: Optional[str] = None


class AlertStats(CamelModel):
    critical: int = 0
    warning: int = 0
    overstocked: int = 0
    active: int = 0
    acknowledged: int = 0
    snoozed: int = 0
