"""
Spreadsheet exports of the ledger collections.

Each dataset becomes a single-sheet ``.xlsx`` workbook with a header row;
rows can be narrowed to a date range on the dataset's own timestamp column.
"""

import io
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from openpyxl import Workbook
from openpyxl.styles import Font

from inventory_ledger.core.constants import PRODUCTS, WAREHOUSES
from inventory_ledger.core.errors import NotFoundError
from inventory_ledger.services.alert_service import AlertService
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.services.stock_service import StockService
from inventory_ledger.services.transfer_service import TransferService
from inventory_ledger.storage import JsonStore

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ExportSheet:
    title: str
    columns: list[tuple[str, str]]
    rows: list[dict]


def _in_range(value: Optional[str], start_date: Optional[str], end_date: Optional[str]) -> bool:
    if not value:
        return not (start_date or end_date)
    if start_date and value < start_date:
        return False
    if end_date and value[: len(end_date)] > end_date:
        return False
    return True


class ExportService:
    def __init__(
        self,
        store: JsonStore,
        stock: StockService,
        transfers: TransferService,
        alerts: AlertService,
        audit: AuditService,
    ):
        self.store = store
        self.stock = stock
        self.transfers = transfers
        self.alerts = alerts
        self.audit = audit
        self._datasets: dict[str, Callable[..., ExportSheet]] = {
            "purchase-orders": self._purchase_orders,
            "transfers": self._transfers,
            "alerts": self._alerts,
            "audit-log": self._audit_log,
        }

    @property
    def datasets(self) -> list[str]:
        return sorted(self._datasets)

    def _names(self, collection: str) -> dict:
        return {row["id"]: row.get("name", "") for row in self.store.read_collection(collection)}

    def _purchase_orders(self, start_date, end_date) -> ExportSheet:
        products = self._names(PRODUCTS)
        warehouses = self._names(WAREHOUSES)
        rows = [
            {
                "reference": order.audit_reference,
                "product": products.get(order.product_id, "Unknown"),
                "warehouse": warehouses.get(order.warehouse_id, "Unknown"),
                "quantity": order.quantity,
                "status": order.status,
                "orderDate": order.order_date,
                "receivedDate": order.received_date or "",
            }
            for order in self.stock.list_purchase_orders()
            if _in_range(order.order_date, start_date, end_date)
        ]
        columns = [
            ("reference", "Reference"),
            ("product", "Product"),
            ("warehouse", "Warehouse"),
            ("quantity", "Quantity"),
            ("status", "Status"),
            ("orderDate", "Order Date"),
            ("receivedDate", "Received Date"),
        ]
        return ExportSheet("Purchase Orders", columns, rows)

    def _transfers(self, start_date, end_date) -> ExportSheet:
        page = self.transfers.query_transfers(
            start_date=start_date,
            limit=self.transfers.page_limit_max,
        )
        # Pull every page; the listing clamps its page size.
        items = list(page.data)
        while len(items) < page.total:
            page = self.transfers.query_transfers(
                start_date=start_date,
                limit=self.transfers.page_limit_max,
                offset=len(items),
            )
            if not page.data:
                break
            items.extend(page.data)
        rows = [
            {
                "reference": t.reference_number,
                "product": t.product.name,
                "from": t.from_warehouse.name,
                "to": t.to_warehouse.name,
                "quantity": t.quantity,
                "status": t.status,
                "createdAt": t.created_at,
                "notes": t.notes or "",
            }
            for t in items
            if _in_range(t.created_at, start_date, end_date)
        ]
        columns = [
            ("reference", "Reference"),
            ("product", "Product"),
            ("from", "From Warehouse"),
            ("to", "To Warehouse"),
            ("quantity", "Quantity"),
            ("status", "Status"),
            ("createdAt", "Created At"),
            ("notes", "Notes"),
        ]
        return ExportSheet("Transfers", columns, rows)

    def _alerts(self, start_date, end_date) -> ExportSheet:
        rows = [
            {
                "product": alert.product.name,
                "sku": alert.product.sku,
                "warehouse": alert.warehouse.name,
                "currentStock": alert.current_stock,
                "reorderPoint": alert.reorder_point,
                "shortage": alert.shortage,
                "severity": alert.severity,
                "status": alert.status,
                "recommendedQuantity": alert.recommended_quantity,
                "updatedAt": alert.updated_at,
            }
            for alert in self.alerts.query_alerts()
            if _in_range(alert.updated_at, start_date, end_date)
        ]
        columns = [
            ("product", "Product"),
            ("sku", "SKU"),
            ("warehouse", "Warehouse"),
            ("currentStock", "Current Stock"),
            ("reorderPoint", "Reorder Point"),
            ("shortage", "Shortage"),
            ("severity", "Severity"),
            ("status", "Status"),
            ("recommendedQuantity", "Recommended Quantity"),
            ("updatedAt", "Updated At"),
        ]
        return ExportSheet("Alerts", columns, rows)

    def _audit_log(self, start_date, end_date) -> ExportSheet:
        rows = [
            entry.to_record()
            for entry in self.audit.query(start_date=start_date)
            if _in_range(entry.timestamp, start_date, end_date)
        ]
        columns = [
            ("timestamp", "Timestamp"),
            ("eventType", "Event"),
            ("referenceNumber", "Reference"),
            ("productId", "Product ID"),
            ("warehouseId", "Warehouse ID"),
            ("quantityChange", "Change"),
            ("quantityBefore", "Before"),
            ("quantityAfter", "After"),
            ("notes", "Notes"),
        ]
        return ExportSheet("Audit Log", columns, rows)

    def build_sheet(
        self,
        dataset: str,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> ExportSheet:
        builder = self._datasets.get(dataset)
        if builder is None:
            raise NotFoundError(
                "Unknown export dataset: {}".format(dataset),
                code="UNKNOWN_DATASET",
                available=self.datasets,
            )
        return builder(start_date, end_date)

    def export_workbook(
        self,
        dataset: str,
        *,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> bytes:
        sheet = self.build_sheet(dataset, start_date=start_date, end_date=end_date)

        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = sheet.title
        worksheet.append([label for _key, label in sheet.columns])
        for cell in worksheet[1]:
            cell.font = Font(bold=True)
        for row in sheet.rows:
            worksheet.append([row.get(key, "") for key, _label in sheet.columns])
        worksheet.freeze_panes = "A2"

        buffer = io.BytesIO()
        workbook.save(buffer)
        logger.info("Exported %d %s row(s)", len(sheet.rows), dataset)
        return buffer.getvalue()


__all__ = ["ExportService", "ExportSheet", "XLSX_MEDIA_TYPE"]
