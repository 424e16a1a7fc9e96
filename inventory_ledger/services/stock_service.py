"""
Stock ledger: the only code path that changes stock quantities.

Every quantity change goes through :meth:`StockService.apply_stock_deltas`,
which runs under the stock mutex, validates all deltas against a single read
of ``stock.json``, writes stock once and then writes one audit batch.
Purchase-order receipt, manual adjustments and transfers all build on it.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from inventory_ledger.core.constants import (
    ADJUSTMENT_PREFIX,
    AUDIT_LOG,
    PURCHASE_ORDER_PREFIX,
    PURCHASE_ORDERS,
    REORDER_MESSAGE,
    STOCK,
)
from inventory_ledger.core.errors import (
    InsufficientStockError,
    InvalidStateError,
    InventoryError,
    NotFoundError,
    ValidationError,
)
from inventory_ledger.core.locks import FileMutex
from inventory_ledger.schemas.alert import AlertStatusUpdate
from inventory_ledger.schemas.audit import AuditLogEntry, StockChangeParams
from inventory_ledger.schemas.stock import PurchaseOrder, StockEntry
from inventory_ledger.services.alert_service import AlertService
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.services.catalog_service import require_product, require_warehouse
from inventory_ledger.storage import (
    JsonStore,
    find_index,
    generate_reference_number,
    next_id,
    now_iso,
)

logger = logging.getLogger(__name__)

_SIDE_EFFECT_EXCEPTIONS = (InventoryError, OSError, ValueError)


@dataclass(frozen=True)
class StockDelta:
    product_id: int
    warehouse_id: int
    change: int
    event_type: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class StockChange:
    entry: StockEntry
    quantity_before: int
    quantity_after: int
    audit: AuditLogEntry


@dataclass(frozen=True)
class SideEffectOutcome:
    """Result of a best-effort follow-up that must not fail its caller."""

    name: str
    succeeded: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class ReorderResult:
    order: PurchaseOrder
    message: str
    alert_update: SideEffectOutcome


@dataclass(frozen=True)
class ReceiptResult:
    order: PurchaseOrder
    new_stock_quantity: int


def require_positive_quantity(value, label: str = "Quantity") -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError("{} must be a positive integer".format(label), field=label.lower())
    return value


class StockService:
    def __init__(
        self,
        store: JsonStore,
        mutex: FileMutex,
        audit: AuditService,
        alerts: AlertService,
    ):
        self.store = store
        self.mutex = mutex
        self.audit = audit
        self.alerts = alerts

    # -- ledger -----------------------------------------------------------

    def apply_stock_deltas(self, deltas: Sequence[StockDelta], reference_number: str) -> list[StockChange]:
        """Apply every delta or none of them.

        Raises ``InsufficientStockError`` before anything is written when any
        delta would take its pair below zero. Missing pairs start at zero.
        """
        if not deltas:
            return []
        for delta in deltas:
            if isinstance(delta.change, bool) or not isinstance(delta.change, int) or delta.change == 0:
                raise ValidationError("Stock change must be a non-zero integer", field="change")

        def _apply() -> list[StockChange]:
            stock = self.store.read_collection(STOCK)
            planned = []
            for delta in deltas:
                index = find_index(stock, productId=delta.product_id, warehouseId=delta.warehouse_id)
                before = int(stock[index]["quantity"]) if index != -1 else 0
                after = before + delta.change
                if after < 0:
                    raise InsufficientStockError(available=before, requested=-delta.change)
                if index == -1:
                    stock.append(
                        StockEntry(
                            id=next_id(stock),
                            product_id=delta.product_id,
                            warehouse_id=delta.warehouse_id,
                            quantity=after,
                        ).to_record()
                    )
                    index = len(stock) - 1
                else:
                    stock[index]["quantity"] = after
                planned.append((delta, index, before, after))

            self.store.write_collection(STOCK, stock)
            audit_entries = self.audit.log_stock_changes(
                [
                    StockChangeParams(
                        event_type=delta.event_type,
                        reference_number=reference_number,
                        product_id=delta.product_id,
                        warehouse_id=delta.warehouse_id,
                        quantity_change=delta.change,
                        quantity_before=before,
                        quantity_after=after,
                        notes=delta.notes,
                    )
                    for delta, _index, before, after in planned
                ]
            )
            return [
                StockChange(
                    entry=StockEntry.model_validate(stock[index]),
                    quantity_before=before,
                    quantity_after=after,
                    audit=audit_entry,
                )
                for (_delta, index, before, after), audit_entry in zip(planned, audit_entries)
            ]

        changes = self.mutex.run_exclusive(_apply)
        logger.info(
            "Applied %d stock change(s) under %s",
            len(changes),
            reference_number,
            extra={"reference": reference_number},
        )
        return changes

    def list_stock(
        self,
        *,
        product_id: Optional[int] = None,
        warehouse_id: Optional[int] = None,
    ) -> list[StockEntry]:
        entries = [StockEntry.model_validate(row) for row in self.store.read_collection(STOCK)]
        if product_id is not None:
            entries = [e for e in entries if e.product_id == product_id]
        if warehouse_id is not None:
            entries = [e for e in entries if e.warehouse_id == warehouse_id]
        return entries

    def get_stock_level(self, product_id: int, warehouse_id: int) -> int:
        stock = self.store.read_collection(STOCK)
        index = find_index(stock, productId=product_id, warehouseId=warehouse_id)
        return int(stock[index]["quantity"]) if index != -1 else 0

    # -- purchase orders --------------------------------------------------

    def list_purchase_orders(self, status: Optional[str] = None) -> list[PurchaseOrder]:
        orders = [PurchaseOrder.model_validate(row) for row in self.store.read_collection(PURCHASE_ORDERS)]
        if status:
            orders = [o for o in orders if o.status == status]
        return orders

    def get_purchase_order(self, order_id: int) -> PurchaseOrder:
        for row in self.store.read_collection(PURCHASE_ORDERS):
            if row.get("id") == order_id:
                return PurchaseOrder.model_validate(row)
        raise NotFoundError("Order not found", code="ORDER_NOT_FOUND", order_id=order_id)

    def create_purchase_order(self, product_id: int, warehouse_id: int, quantity) -> PurchaseOrder:
        require_positive_quantity(quantity)
        require_product(self.store, product_id)
        require_warehouse(self.store, warehouse_id)

        def _create() -> PurchaseOrder:
            orders = self.store.read_collection(PURCHASE_ORDERS)
            order = PurchaseOrder(
                id=next_id(orders),
                product_id=product_id,
                warehouse_id=warehouse_id,
                quantity=quantity,
                status="pending",
                order_date=now_iso(),
                reference_number=generate_reference_number(PURCHASE_ORDER_PREFIX, orders),
            )
            orders.append(order.to_record())
            self.store.write_collection(PURCHASE_ORDERS, orders)
            return order

        order = self.mutex.run_exclusive(_create)
        logger.info(
            "Created purchase order %s for %d unit(s)",
            order.reference_number,
            order.quantity,
            extra={
                "reference": order.reference_number,
                "product_id": product_id,
                "warehouse_id": warehouse_id,
            },
        )
        return order

    def receive_purchase_order(self, order_id: int) -> ReceiptResult:
        """Book a pending order into stock and resolve the pair's alert.

        Receiving an order that is not pending raises ``InvalidStateError``
        so stock is never incremented twice for the same order.
        """

        def _receive() -> ReceiptResult:
            orders = self.store.read_collection(PURCHASE_ORDERS)
            index = find_index(orders, id=order_id)
            if index == -1:
                raise NotFoundError("Order not found", code="ORDER_NOT_FOUND", order_id=order_id)
            order = PurchaseOrder.model_validate(orders[index])
            if order.status != "pending":
                raise InvalidStateError(
                    "Order is already {}".format(order.status),
                    status=order.status,
                )

            changes = self.apply_stock_deltas(
                [
                    StockDelta(
                        product_id=order.product_id,
                        warehouse_id=order.warehouse_id,
                        change=order.quantity,
                        event_type="RECEIPT",
                        notes="Received PO #{}".format(order.id),
                    )
                ],
                order.audit_reference,
            )

            received = order.model_copy(update={"status": "received", "received_date": now_iso()})
            orders[index] = received.to_record()
            self.store.write_collection(PURCHASE_ORDERS, orders)
            self.alerts.resolve_for_receipt(received)
            return ReceiptResult(order=received, new_stock_quantity=changes[0].quantity_after)

        result = self.mutex.run_exclusive(_receive)
        logger.info(
            "Received purchase order %s, stock now %d",
            result.order.audit_reference,
            result.new_stock_quantity,
            extra={"reference": result.order.audit_reference},
        )
        return result

    def cancel_purchase_order(self, order_id: int) -> PurchaseOrder:
        def _cancel() -> PurchaseOrder:
            orders = self.store.read_collection(PURCHASE_ORDERS)
            index = find_index(orders, id=order_id)
            if index == -1:
                raise NotFoundError("Order not found", code="ORDER_NOT_FOUND", order_id=order_id)
            order = PurchaseOrder.model_validate(orders[index])
            if order.status != "pending":
                raise InvalidStateError(
                    "Only pending orders can be cancelled; order is {}".format(order.status),
                    status=order.status,
                )
            cancelled = order.model_copy(update={"status": "cancelled", "cancelled_date": now_iso()})
            orders[index] = cancelled.to_record()
            self.store.write_collection(PURCHASE_ORDERS, orders)
            return cancelled

        order = self.mutex.run_exclusive(_cancel)
        logger.info("Cancelled purchase order %s", order.audit_reference, extra={"reference": order.audit_reference})
        return order

    # -- adjustments and reorders -----------------------------------------

    def adjust_stock(self, product_id: int, warehouse_id: int, adjustment, reason: str) -> StockChange:
        if isinstance(adjustment, bool) or not isinstance(adjustment, int) or adjustment == 0:
            raise ValidationError("Adjustment quantity must be a non-zero integer", field="adjustmentQuantity")
        reason = (reason or "").strip()
        if not reason:
            raise ValidationError("A reason is required for stock adjustments", field="reason")
        require_product(self.store, product_id)
        require_warehouse(self.store, warehouse_id)

        def _adjust() -> StockChange:
            reference = generate_reference_number(ADJUSTMENT_PREFIX, self.store.read_collection(AUDIT_LOG))
            delta = StockDelta(
                product_id=product_id,
                warehouse_id=warehouse_id,
                change=adjustment,
                event_type="ADJUSTMENT",
                notes=reason,
            )
            return self.apply_stock_deltas([delta], reference)[0]

        return self.mutex.run_exclusive(_adjust)

    def reorder_stock(self, product_id: int, warehouse_id: int, quantity) -> ReorderResult:
        """Raise a purchase order and acknowledge the pair's alert.

        The acknowledgement is best effort: its failure is logged and
        reported on the result, the order stands either way.
        """
        order = self.create_purchase_order(product_id, warehouse_id, quantity)

        try:
            self.alerts.update_alert_status(
                product_id,
                warehouse_id,
                AlertStatusUpdate(status="acknowledged"),
            )
            outcome = SideEffectOutcome(name="acknowledge_alert", succeeded=True)
        except _SIDE_EFFECT_EXCEPTIONS as exc:
            logger.exception(
                "Failed to auto-acknowledge alert after reorder %s",
                order.reference_number,
                extra={"reference": order.reference_number},
            )
            outcome = SideEffectOutcome(name="acknowledge_alert", succeeded=False, error=str(exc))

        return ReorderResult(order=order, message=REORDER_MESSAGE, alert_update=outcome)


__all__ = [
    "ReceiptResult",
    "ReorderResult",
    "SideEffectOutcome",
    "StockChange",
    "StockDelta",
    "StockService",
    "require_positive_quantity",
]
