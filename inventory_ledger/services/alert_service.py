"""
Low-stock alerts.

Alerts are derived from live stock levels at read time; ``alerts.json``
only carries the workflow state (acknowledged, snoozed, resolved) keyed by
the (product, warehouse) pair.
"""

import logging
from datetime import datetime
from typing import Optional

from inventory_ledger.core import stock_rules
from inventory_ledger.core.constants import ALERTS, PRODUCTS, STOCK, WAREHOUSES
from inventory_ledger.core.dates import now_iso, utc_now
from inventory_ledger.core.errors import InvalidStateError, NotFoundError
from inventory_ledger.schemas.alert import (
    AlertRecord,
    AlertStats,
    AlertStatusUpdate,
    EnrichedAlert,
)
from inventory_ledger.schemas.catalog import Product, Warehouse
from inventory_ledger.schemas.stock import PurchaseOrder, StockEntry
from inventory_ledger.storage import JsonStore, find_index, next_id

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    "active": {"acknowledged", "snoozed", "resolved"},
    "acknowledged": {"snoozed", "resolved", "active"},
    "snoozed": {"active", "acknowledged", "resolved"},
    "resolved": {"active", "acknowledged", "snoozed"},
}


def check_transition(current: str, target: str) -> None:
    if current == target:
        return
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidStateError(
            "Cannot change alert from {} to {}".format(current, target),
            current=current,
            requested=target,
        )


class AlertService:
    def __init__(
        self,
        store: JsonStore,
        *,
        low_multiplier: float = stock_rules.LOW_STOCK_THRESHOLD_MULTIPLIER,
        overstock_multiplier: float = stock_rules.OVERSTOCKED_THRESHOLD_MULTIPLIER,
    ):
        self.store = store
        self.low_multiplier = low_multiplier
        self.overstock_multiplier = overstock_multiplier

    def query_alerts(
        self,
        *,
        severity: Optional[str] = None,
        status: Optional[str] = None,
        warehouse_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> list[EnrichedAlert]:
        now = now or utc_now()
        products = {row["id"]: Product.model_validate(row) for row in self.store.read_collection(PRODUCTS)}
        warehouses = {row["id"]: Warehouse.model_validate(row) for row in self.store.read_collection(WAREHOUSES)}
        records = {
            (record.product_id, record.warehouse_id): record
            for record in (AlertRecord.model_validate(row) for row in self.store.read_collection(ALERTS))
        }

        alerts = []
        for row in self.store.read_collection(STOCK):
            stock = StockEntry.model_validate(row)
            product = products.get(stock.product_id)
            warehouse = warehouses.get(stock.warehouse_id)
            if product is None or warehouse is None:
                continue
            if warehouse_id is not None and stock.warehouse_id != warehouse_id:
                continue

            alert = stock_rules.project_alert(
                product,
                warehouse,
                stock,
                records.get((stock.product_id, stock.warehouse_id)),
                now=now,
                low_multiplier=self.low_multiplier,
                overstock_multiplier=self.overstock_multiplier,
            )
            if alert is None:
                continue
            if severity and alert.severity != severity:
                continue
            if status and alert.status != status:
                continue
            alerts.append(alert)
        return alerts

    def alert_stats(self) -> AlertStats:
        alerts = self.query_alerts()
        return AlertStats(
            critical=sum(1 for a in alerts if a.severity == "critical"),
            warning=sum(1 for a in alerts if a.severity == "warning"),
            overstocked=sum(1 for a in alerts if a.shortage < 0),
            active=sum(1 for a in alerts if a.status == "active"),
            acknowledged=sum(1 for a in alerts if a.status == "acknowledged"),
            snoozed=sum(1 for a in alerts if a.status == "snoozed"),
        )

    def get_alert(self, alert_id: int) -> AlertRecord:
        for row in self.store.read_collection(ALERTS):
            if row.get("id") == alert_id:
                return AlertRecord.model_validate(row)
        raise NotFoundError("Alert tracking record not found", alert_id=alert_id)

    def find_record(self, product_id: int, warehouse_id: int) -> Optional[AlertRecord]:
        records = self.store.read_collection(ALERTS)
        index = find_index(records, productId=product_id, warehouseId=warehouse_id)
        return AlertRecord.model_validate(records[index]) if index != -1 else None

    def update_alert_status(
        self,
        product_id: int,
        warehouse_id: int,
        update: AlertStatusUpdate,
    ) -> AlertRecord:
        records = self.store.read_collection(ALERTS)
        timestamp = now_iso()
        index = find_index(records, productId=product_id, warehouseId=warehouse_id)

        if index != -1:
            current = AlertRecord.model_validate(records[index])
            check_transition(current.status, update.status)
            changes = {
                "status": update.status,
                "updated_at": timestamp,
                "snoozed_until": update.snooze_until or current.snoozed_until,
                "notes": update.notes if update.notes is not None else current.notes,
            }
            if update.status == "acknowledged":
                changes["acknowledged_at"] = timestamp
            if update.status == "resolved":
                changes["resolved_at"] = timestamp
            record = current.model_copy(update=changes)
            records[index] = record.to_record()
        else:
            check_transition("active", update.status)
            record = AlertRecord(
                id=next_id(records),
                product_id=product_id,
                warehouse_id=warehouse_id,
                status=update.status,
                created_at=timestamp,
                updated_at=timestamp,
                notes=update.notes or None,
                snoozed_until=update.snooze_until or None,
                acknowledged_at=timestamp if update.status == "acknowledged" else None,
                resolved_at=timestamp if update.status == "resolved" else None,
            )
            records.append(record.to_record())

        self.store.write_collection(ALERTS, records)
        logger.info(
            "Alert for product %s at warehouse %s is now %s",
            product_id,
            warehouse_id,
            record.status,
            extra={"product_id": product_id, "warehouse_id": warehouse_id},
        )
        return record

    def update_alert_status_by_id(self, alert_id: int, update: AlertStatusUpdate) -> AlertRecord:
        record = self.get_alert(alert_id)
        return self.update_alert_status(record.product_id, record.warehouse_id, update)

    def resolve_for_receipt(self, order: PurchaseOrder) -> Optional[AlertRecord]:
        """Mark the pair's alert resolved after a purchase order arrives.

        Resolves regardless of whether the receipt cleared the reorder point.
        """
        record = self.find_record(order.product_id, order.warehouse_id)
        if record is None:
            return None
        note = "System: Received PO #{} (+{} units)".format(order.id, order.quantity)
        notes = "{}\n{}".format(record.notes, note) if record.notes else note
        return self.update_alert_status(
            order.product_id,
            order.warehouse_id,
            AlertStatusUpdate(status="resolved", notes=notes),
        )


__all__ = ["ALLOWED_TRANSITIONS", "AlertService", "check_transition"]
