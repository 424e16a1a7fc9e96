import tempfile
import unittest
from unittest.mock import patch

from inventory_ledger.schemas.audit import AuditQuery, StockChangeParams
from inventory_ledger.services.audit_service import AuditService
from inventory_ledger.storage import JsonStore


def _change(event_type, product_id=1, warehouse_id=1, change=5, before=0, reference="ADJ-20240101-0001"):
    return StockChangeParams(
        event_type=event_type,
        reference_number=reference,
        product_id=product_id,
        warehouse_id=warehouse_id,
        quantity_change=change,
        quantity_before=before,
        quantity_after=before + change,
    )


class AuditServiceTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = JsonStore(self._tmp.name)
        self.audit = AuditService(self.store)

    def tearDown(self):
        self._tmp.cleanup()

    def test_empty_batch_does_no_io(self):
        with patch.object(self.store, "read_collection") as read, patch.object(
            self.store, "write_collection"
        ) as write:
            self.assertEqual(self.audit.log_stock_changes([]), [])
        read.assert_not_called()
        write.assert_not_called()

    def test_batch_gets_sequential_ids_and_one_timestamp(self):
        self.audit.log_stock_change(_change("ADJUSTMENT"))
        with patch.object(self.store, "write_collection", wraps=self.store.write_collection) as write:
            entries = self.audit.log_stock_changes(
                [
                    _change("TRANSFER_OUT", warehouse_id=1, change=-3, before=10, reference="TRF-20240101-0001"),
                    _change("TRANSFER_IN", warehouse_id=2, change=3, before=0, reference="TRF-20240101-0001"),
                ]
            )
        self.assertEqual(write.call_count, 1)
        self.assertEqual([e.id for e in entries], [2, 3])
        self.assertEqual(entries[0].timestamp, entries[1].timestamp)
        self.assertEqual(entries[0].quantity_after, 7)
        self.assertEqual(len(self.store.read_collection("audit_log")), 3)

    def test_accepts_camel_case_dicts(self):
        entry = self.audit.log_stock_change(
            {
                "eventType": "RECEIPT",
                "referenceNumber": "PO-7",
                "productId": 4,
                "warehouseId": 2,
                "quantityChange": 20,
                "quantityBefore": 0,
                "quantityAfter": 20,
            }
        )
        self.assertEqual(entry.product_id, 4)
        self.assertEqual(self.store.read_collection("audit_log")[0]["eventType"], "RECEIPT")

    def test_query_filters_and_orders_newest_first(self):
        stamps = iter(
            [
                "2024-01-01T10:00:00.000Z",
                "2024-01-02T10:00:00.000Z",
                "2024-01-03T10:00:00.000Z",
                "2024-01-04T10:00:00.000Z",
            ]
        )
        with patch("inventory_ledger.services.audit_service.now_iso", side_effect=lambda: next(stamps)):
            self.audit.log_stock_change(_change("ADJUSTMENT", product_id=1))
            self.audit.log_stock_change(_change("RECEIPT", product_id=1))
            self.audit.log_stock_change(_change("ADJUSTMENT", product_id=2))
            self.audit.log_stock_change(_change("TRANSFER_IN", product_id=1, warehouse_id=3))

        history = self.audit.product_history(1)
        self.assertEqual(len(history), 3)
        self.assertEqual(
            [e.timestamp for e in history],
            ["2024-01-04T10:00:00.000Z", "2024-01-02T10:00:00.000Z", "2024-01-01T10:00:00.000Z"],
        )

        adjustments = self.audit.query(AuditQuery(event_type="ADJUSTMENT"))
        self.assertEqual({e.product_id for e in adjustments}, {1, 2})

        window = self.audit.query(start_date="2024-01-02", end_date="2024-01-03T23:59:59.999Z")
        self.assertEqual([e.id for e in window], [3, 2])

        self.assertEqual([e.id for e in self.audit.warehouse_history(3)], [4])


if __name__ == "__main__":
    unittest.main()
