from datetime import datetime
from typing import Optional

from inventory_ledger.core.dates import parse_timestamp, to_iso, utc_now
from inventory_ledger.schemas.alert import (
    AlertProduct,
    AlertRecord,
    AlertWarehouse,
    EnrichedAlert,
)
from inventory_ledger.schemas.catalog import Product, Warehouse
from inventory_ledger.schemas.stock import StockEntry

CRITICAL_LOW = "critical-low"
LOW_STOCK = "low-stock"
OVERSTOCKED = "overstocked"
HEALTHY = "healthy"

LOW_STOCK_THRESHOLD_MULTIPLIER = 1.2
OVERSTOCKED_THRESHOLD_MULTIPLIER = 3.0

_SEVERITY_BY_STATUS = {
    CRITICAL_LOW: "critical",
    LOW_STOCK: "warning",
    OVERSTOCKED: "info",
}


def stock_status(
    quantity,
    reorder_point,
    *,
    low_multiplier=LOW_STOCK_THRESHOLD_MULTIPLIER,
    overstock_multiplier=OVERSTOCKED_THRESHOLD_MULTIPLIER,
):
    if quantity < reorder_point:
        return CRITICAL_LOW
    if quantity <= reorder_point * low_multiplier:
        return LOW_STOCK
    if quantity > reorder_point * overstock_multiplier:
        return OVERSTOCKED
    return HEALTHY


def severity_for(status):
    return _SEVERITY_BY_STATUS.get(status)


def shortage(quantity, reorder_point):
    """Units below the reorder point; negative means surplus."""
    return reorder_point - quantity


def recommended_quantity(quantity, reorder_point):
    target = reorder_point * 2
    return max(0, target - quantity)


def effective_status(record: Optional[AlertRecord], now: Optional[datetime] = None) -> str:
    if record is None:
        return "active"
    if record.status == "snoozed" and record.snoozed_until:
        until = parse_timestamp(record.snoozed_until)
        if until is not None and until <= (now or utc_now()):
            return "active"
    return record.status


def project_alert(
    product: Product,
    warehouse: Warehouse,
    stock: StockEntry,
    record: Optional[AlertRecord] = None,
    *,
    now: Optional[datetime] = None,
    low_multiplier: float = LOW_STOCK_THRESHOLD_MULTIPLIER,
    overstock_multiplier: float = OVERSTOCKED_THRESHOLD_MULTIPLIER,
) -> Optional[EnrichedAlert]:
    """Combine live stock with the persisted workflow record.

    Returns ``None`` when the stock level is healthy. Severity, shortage
    and the recommended quantity are never persisted.
    """
    now = now or utc_now()
    status = stock_status(
        stock.quantity,
        product.reorder_point,
        low_multiplier=low_multiplier,
        overstock_multiplier=overstock_multiplier,
    )
    severity = severity_for(status)
    if severity is None:
        return None

    fallback = to_iso(now)
    created_at = record.created_at if record else fallback
    return EnrichedAlert(
        id=record.id if record else 0,
        status=effective_status(record, now),
        product=AlertProduct(
            id=product.id,
            name=product.name,
            sku=product.sku,
            category=product.category,
        ),
        warehouse=AlertWarehouse(id=warehouse.id, name=warehouse.name, code=warehouse.code),
        current_stock=stock.quantity,
        reorder_point=product.reorder_point,
        shortage=shortage(stock.quantity, product.reorder_point),
        severity=severity,
        recommended_quantity=recommended_quantity(stock.quantity, product.reorder_point),
        timestamp=created_at,
        created_at=created_at,
        updated_at=record.updated_at if record else fallback,
        acknowledged_at=record.acknowledged_at if record else None,
        resolved_at=record.resolved_at if record else None,
        snoozed_until=record.snoozed_until if record else None,
        notes=record.notes if record else None,
    )


__all__ = [
    "CRITICAL_LOW",
    "HEALTHY",
    "LOW_STOCK",
    "OVERSTOCKED",
    "effective_status",
    "project_alert",
    "recommended_quantity",
    "severity_for",
    "shortage",
    "stock_status",
]
