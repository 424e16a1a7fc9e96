"""
Service wiring for the HTTP layer.

Everything hangs off :class:`ServiceContainer`, built once from settings.
Tests swap it out with ``app.dependency_overrides[get_container]``.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from fastapi import Depends

from inventory_ledger.config import Settings, get_settings
from inventory_ledger.core.locks import build_lock_manager
from inventory_ledger.services import (
    AlertService,
    AuditService,
    CatalogService,
    ExportService,
    StockService,
    TransferService,
)
from inventory_ledger.storage import JsonStore


class ServiceContainer:
    def __init__(self, settings: Settings, data_dir: Optional[Union[str, Path]] = None):
        self.settings = settings
        self.store = JsonStore(data_dir or settings.DATA_DIR)
        self.locks = build_lock_manager(settings, lock_dir=data_dir)
        self.stock_mutex = self.locks.get(settings.STOCK_LOCK_NAME)

        self.audit = AuditService(self.store)
        self.alerts = AlertService(
            self.store,
            low_multiplier=settings.LOW_STOCK_THRESHOLD_MULTIPLIER,
            overstock_multiplier=settings.OVERSTOCKED_THRESHOLD_MULTIPLIER,
        )
        self.catalog = CatalogService(self.store, self.stock_mutex)
        self.stock = StockService(self.store, self.stock_mutex, self.audit, self.alerts)
        self.transfers = TransferService(
            self.store,
            self.stock_mutex,
            self.stock,
            self.audit,
            reference_prefix=settings.TRANSFER_REFERENCE_PREFIX,
            page_limit_max=settings.TRANSFER_PAGE_LIMIT_MAX,
        )
        self.exports = ExportService(self.store, self.stock, self.transfers, self.alerts, self.audit)


@lru_cache
def get_container() -> ServiceContainer:
    return ServiceContainer(get_settings())


def get_store(container: ServiceContainer = Depends(get_container)) -> JsonStore:
    return container.store


def get_audit_service(container: ServiceContainer = Depends(get_container)) -> AuditService:
    return container.audit


def get_alert_service(container: ServiceContainer = Depends(get_container)) -> AlertService:
    return container.alerts


def get_catalog_service(container: ServiceContainer = Depends(get_container)) -> CatalogService:
    return container.catalog


def get_stock_service(container: ServiceContainer = Depends(get_container)) -> StockService:
    return container.stock


def get_transfer_service(container: ServiceContainer = Depends(get_container)) -> TransferService:
    return container.transfers


def get_export_service(container: ServiceContainer = Depends(get_container)) -> ExportService:
    return container.exports


__all__ = [
    "ServiceContainer",
    "get_alert_service",
    "get_audit_service",
    "get_catalog_service",
    "get_container",
    "get_export_service",
    "get_stock_service",
    "get_store",
    "get_transfer_service",
]
