from inventory_ledger.services.alert_service import AlertService
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.services.catalog_service import CatalogService
from inventory_ledger.services.dashboard_service import dashboard_summary
from inventory_ledger.services.export_service import ExportService
from inventory_ledger.services.stock_service import StockService
from inventory_ledger.services.transfer_service import TransferService

__all__ = [
    "AlertService",
    "AuditService",
    "CatalogService",
    "ExportService",
    "StockService",
    "TransferService",
    "dashboard_summary",
]
