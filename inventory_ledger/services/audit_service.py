"""
Append-only audit trail of stock-affecting events.

Batches are written with a single read and a single write so a multi-entry
operation (a transfer logs both of its sides) never leaves a partial trail
behind. Cross-operation ordering comes from the stock mutex held by the
ledger operations that call in here.
"""

import logging
from typing import Iterable, Optional, Union

from inventory_ledger.core.constants import AUDIT_LOG
from inventory_ledger.core.dates import now_iso
from inventory_ledger.schemas.audit import AuditLogEntry, AuditQuery, StockChangeParams
from inventory_ledger.storage import JsonStore, next_id

logger = logging.getLogger(__name__)


class AuditService:
    def __init__(self, store: JsonStore):
        self.store = store

    def log_stock_changes(
        self, entries: Iterable[Union[StockChangeParams, dict]]
    ) -> list[AuditLogEntry]:
        params = [
            entry if isinstance(entry, StockChangeParams) else StockChangeParams.model_validate(entry)
            for entry in entries
        ]
        if not params:
            return []

        audit_log = self.store.read_collection(AUDIT_LOG)
        entry_id = next_id(audit_log)
        timestamp = now_iso()

        new_entries = []
        for item in params:
            new_entries.append(
                AuditLogEntry(id=entry_id, timestamp=timestamp, **item.model_dump())
            )
            entry_id += 1

        audit_log.extend(entry.to_record() for entry in new_entries)
        self.store.write_collection(AUDIT_LOG, audit_log)
        logger.info(
            "Audit logged %d change(s) for %s",
            len(new_entries),
            new_entries[0].reference_number,
            extra={"reference": new_entries[0].reference_number},
        )
        return new_entries

    def log_stock_change(self, entry: Union[StockChangeParams, dict]) -> AuditLogEntry:
        return self.log_stock_changes([entry])[0]

    def query(self, filters: Optional[AuditQuery] = None, **criteria) -> list[AuditLogEntry]:
        filters = filters or AuditQuery(**criteria)
        entries = [AuditLogEntry.model_validate(row) for row in self.store.read_collection(AUDIT_LOG)]

        if filters.product_id is not None:
            entries = [e for e in entries if e.product_id == filters.product_id]
        if filters.warehouse_id is not None:
            entries = [e for e in entries if e.warehouse_id == filters.warehouse_id]
        if filters.event_type is not None:
            entries = [e for e in entries if e.event_type == filters.event_type]
        if filters.start_date:
            entries = [e for e in entries if e.timestamp >= filters.start_date]
        if filters.end_date:
            entries = [e for e in entries if e.timestamp <= filters.end_date]

        # ISO-8601 UTC strings sort chronologically; ids break same-millisecond ties.
        entries.sort(key=lambda e: (e.timestamp, e.id), reverse=True)
        return entries

    def product_history(self, product_id: int) -> list[AuditLogEntry]:
        return self.query(AuditQuery(product_id=product_id))

    def warehouse_history(self, warehouse_id: int) -> list[AuditLogEntry]:
        return self.query(AuditQuery(warehouse_id=warehouse_id))


__all__ = ["AuditService"]
