"""
Warehouse-to-warehouse stock transfers.

A transfer is two ledger deltas under one reference number (TRANSFER_OUT on
the source, TRANSFER_IN on the destination), applied and audited together.
"""

import logging
from typing import Optional

from inventory_ledger.core.constants import PRODUCTS, TRANSFERS, WAREHOUSES
from inventory_ledger.core.errors import NotFoundError, ValidationError
from inventory_ledger.core.locks import FileMutex
from inventory_ledger.schemas.audit import AuditLogEntry, AuditQuery
from inventory_ledger.schemas.catalog import ProductRef, WarehouseRef
from inventory_ledger.schemas.transfer import (
    ActivityEvent,
    EnrichedTransfer,
    Transfer,
    TransferCreate,
    TransferPage,
)
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.services.catalog_service import require_product, require_warehouse
from inventory_ledger.services.stock_service import StockDelta, StockService
from inventory_ledger.storage import JsonStore, generate_reference_number, next_id, now_iso

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 50
DEFAULT_ACTIVITY_LIMIT = 5


class TransferService:
    def __init__(
        self,
        store: JsonStore,
        mutex: FileMutex,
        ledger: StockService,
        audit: AuditService,
        *,
        reference_prefix: str = "TRF",
        page_limit_max: int = 100,
    ):
        self.store = store
        self.mutex = mutex
        self.ledger = ledger
        self.audit = audit
        self.reference_prefix = reference_prefix
        self.page_limit_max = page_limit_max

    def validate_request(self, request: TransferCreate) -> None:
        if request.from_warehouse_id == request.to_warehouse_id:
            raise ValidationError("Cannot transfer to the same warehouse", code="SAME_WAREHOUSE")
        quantity = request.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError("Quantity must be a positive integer", code="INVALID_QUANTITY")

        require_product(self.store, request.product_id)
        require_warehouse(self.store, request.from_warehouse_id, role="Source warehouse")
        require_warehouse(self.store, request.to_warehouse_id, role="Destination warehouse")

    def execute_transfer(self, request: TransferCreate) -> Transfer:
        """Move stock between two warehouses.

        Either both sides and the transfer record are written, or nothing
        is: an insufficient source raises before the first write.
        """
        self.validate_request(request)
        notes = request.notes or None

        def _execute() -> Transfer:
            transfers = self.store.read_collection(TRANSFERS)
            reference = generate_reference_number(self.reference_prefix, transfers)
            timestamp = now_iso()

            self.ledger.apply_stock_deltas(
                [
                    StockDelta(
                        product_id=request.product_id,
                        warehouse_id=request.from_warehouse_id,
                        change=-request.quantity,
                        event_type="TRANSFER_OUT",
                        notes=notes,
                    ),
                    StockDelta(
                        product_id=request.product_id,
                        warehouse_id=request.to_warehouse_id,
                        change=request.quantity,
                        event_type="TRANSFER_IN",
                        notes=notes,
                    ),
                ],
                reference,
            )

            transfer = Transfer(
                id=next_id(transfers),
                reference_number=reference,
                product_id=request.product_id,
                from_warehouse_id=request.from_warehouse_id,
                to_warehouse_id=request.to_warehouse_id,
                quantity=request.quantity,
                status="completed",
                created_at=timestamp,
                completed_at=timestamp,
                notes=notes,
            )
            transfers.append(transfer.to_record())
            self.store.write_collection(TRANSFERS, transfers)
            return transfer

        transfer = self.mutex.run_exclusive(_execute)
        logger.info(
            "Transfer %s completed: %d unit(s) of product %s from warehouse %s to %s",
            transfer.reference_number,
            transfer.quantity,
            transfer.product_id,
            transfer.from_warehouse_id,
            transfer.to_warehouse_id,
            extra={"reference": transfer.reference_number, "product_id": transfer.product_id},
        )
        return transfer

    def enrich_transfer(
        self,
        transfer: Transfer,
        products: Optional[dict] = None,
        warehouses: Optional[dict] = None,
    ) -> EnrichedTransfer:
        if products is None:
            products = {row["id"]: row for row in self.store.read_collection(PRODUCTS)}
        if warehouses is None:
            warehouses = {row["id"]: row for row in self.store.read_collection(WAREHOUSES)}

        def _product_ref(product_id):
            row = products.get(product_id)
            if row is None:
                return ProductRef(id=product_id, name="Unknown", sku="N/A")
            return ProductRef(id=row["id"], name=row["name"], sku=row["sku"])

        def _warehouse_ref(warehouse_id):
            row = warehouses.get(warehouse_id)
            if row is None:
                return WarehouseRef(id=warehouse_id, name="Unknown", code="N/A")
            return WarehouseRef(id=row["id"], name=row["name"], code=row["code"])

        return EnrichedTransfer(
            id=transfer.id,
            reference_number=transfer.reference_number,
            product=_product_ref(transfer.product_id),
            from_warehouse=_warehouse_ref(transfer.from_warehouse_id),
            to_warehouse=_warehouse_ref(transfer.to_warehouse_id),
            quantity=transfer.quantity,
            status=transfer.status,
            created_at=transfer.created_at,
            completed_at=transfer.completed_at,
            notes=transfer.notes,
        )

    def _load_transfers(self) -> list[Transfer]:
        return [Transfer.model_validate(row) for row in self.store.read_collection(TRANSFERS)]

    def query_transfers(
        self,
        *,
        product_id: Optional[int] = None,
        warehouse_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
    ) -> TransferPage:
        transfers = self._load_transfers()
        if product_id is not None:
            transfers = [t for t in transfers if t.product_id == product_id]
        if warehouse_id is not None:
            transfers = [
                t for t in transfers if warehouse_id in (t.from_warehouse_id, t.to_warehouse_id)
            ]
        if status:
            transfers = [t for t in transfers if t.status == status]
        if start_date:
            transfers = [t for t in transfers if t.created_at >= start_date]
        if end_date:
            transfers = [t for t in transfers if t.created_at <= end_date]

        transfers.sort(key=lambda t: (t.created_at, t.id), reverse=True)

        limit = min(max(1, int(limit)), self.page_limit_max)
        offset = max(0, int(offset))
        page = transfers[offset:offset + limit]

        products = {row["id"]: row for row in self.store.read_collection(PRODUCTS)}
        warehouses = {row["id"]: row for row in self.store.read_collection(WAREHOUSES)}
        return TransferPage(
            data=[self.enrich_transfer(t, products, warehouses) for t in page],
            total=len(transfers),
            limit=limit,
            offset=offset,
        )

    def get_transfer(self, transfer_id: int) -> EnrichedTransfer:
        for transfer in self._load_transfers():
            if transfer.id == transfer_id:
                return self.enrich_transfer(transfer)
        raise NotFoundError("Transfer not found", code="TRANSFER_NOT_FOUND")

    def audit_trail(self, transfer_id: int) -> list[AuditLogEntry]:
        """Both audit entries booked under the transfer's reference."""
        transfer = self.get_transfer(transfer_id)
        return [
            entry
            for entry in self.audit.query(AuditQuery(product_id=transfer.product.id))
            if entry.reference_number == transfer.reference_number
        ]

    def recent_activity(
        self,
        product_id: Optional[int] = None,
        limit: int = DEFAULT_ACTIVITY_LIMIT,
    ) -> list[ActivityEvent]:
        transfers = self._load_transfers()
        if product_id is not None:
            transfers = [t for t in transfers if t.product_id == product_id]
        transfers.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        return [
            ActivityEvent(
                id=t.id,
                type="completed" if t.status == "completed" else "pending",
                reference_number=t.reference_number,
                description="Transfer of {} items".format(t.quantity),
                timestamp=t.created_at,
            )
            for t in transfers[: max(0, int(limit))]
        ]


__all__ = ["TransferService"]
