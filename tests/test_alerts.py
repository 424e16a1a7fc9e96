import tempfile
import unittest
from datetime import datetime, timedelta, timezone

from inventory_ledger.core import stock_rules
from inventory_ledger.core.errors import InvalidStateError, NotFoundError
from inventory_ledger.schemas.alert import AlertRecord, AlertStatusPatch, AlertStatusUpdate
from inventory_ledger.schemas.stock import PurchaseOrder
from inventory_ledger.services.alert_service import AlertService, check_transition
from inventory_ledger.storage import JsonStore

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _record(status="snoozed", snoozed_until=None):
    return AlertRecord(
        id=1,
        product_id=1,
        warehouse_id=1,
        status=status,
        snoozed_until=snoozed_until,
        created_at="2024-05-01T00:00:00.000Z",
        updated_at="2024-05-01T00:00:00.000Z",
    )


class StockRulesTest(unittest.TestCase):
    def test_status_boundaries(self):
        cases = [
            (9, 10, stock_rules.CRITICAL_LOW),
            (10, 10, stock_rules.LOW_STOCK),
            (12, 10, stock_rules.LOW_STOCK),
            (13, 10, stock_rules.HEALTHY),
            (30, 10, stock_rules.HEALTHY),
            (31, 10, stock_rules.OVERSTOCKED),
            (0, 0, stock_rules.LOW_STOCK),
        ]
        for quantity, reorder_point, expected in cases:
            with self.subTest(quantity=quantity, reorder_point=reorder_point):
                self.assertEqual(stock_rules.stock_status(quantity, reorder_point), expected)

    def test_severity_and_quantities(self):
        self.assertEqual(stock_rules.severity_for(stock_rules.CRITICAL_LOW), "critical")
        self.assertEqual(stock_rules.severity_for(stock_rules.LOW_STOCK), "warning")
        self.assertEqual(stock_rules.severity_for(stock_rules.OVERSTOCKED), "info")
        self.assertIsNone(stock_rules.severity_for(stock_rules.HEALTHY))
        self.assertEqual(stock_rules.shortage(4, 10), 6)
        self.assertEqual(stock_rules.shortage(40, 10), -30)
        self.assertEqual(stock_rules.recommended_quantity(4, 10), 16)
        self.assertEqual(stock_rules.recommended_quantity(40, 10), 0)

    def test_expired_snooze_reads_active(self):
        expired = _record(snoozed_until=(NOW - timedelta(hours=1)).isoformat())
        pending = _record(snoozed_until=(NOW + timedelta(hours=1)).isoformat())
        self.assertEqual(stock_rules.effective_status(expired, NOW), "active")
        self.assertEqual(stock_rules.effective_status(pending, NOW), "snoozed")
        self.assertEqual(stock_rules.effective_status(None, NOW), "active")


class AlertServiceTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = JsonStore(self._tmp.name)
        self.store.write_collection(
            "products",
            [
                {"id": 1, "sku": "A-1", "name": "Widget", "category": "tools", "unitCost": 2.0, "reorderPoint": 10},
                {"id": 2, "sku": "B-2", "name": "Gadget", "category": "tools", "unitCost": 5.0, "reorderPoint": 10},
                {"id": 3, "sku": "C-3", "name": "Gizmo", "category": "tools", "unitCost": 1.0, "reorderPoint": 10},
            ],
        )
        self.store.write_collection(
            "warehouses",
            [
                {"id": 1, "code": "N", "name": "North", "location": "A"},
                {"id": 2, "code": "S", "name": "South", "location": "B"},
            ],
        )
        self.store.write_collection(
            "stock",
            [
                {"id": 1, "productId": 1, "warehouseId": 1, "quantity": 4},
                {"id": 2, "productId": 2, "warehouseId": 1, "quantity": 11},
                {"id": 3, "productId": 3, "warehouseId": 2, "quantity": 50},
                {"id": 4, "productId": 1, "warehouseId": 2, "quantity": 20},
            ],
        )
        self.alerts = AlertService(self.store)

    def tearDown(self):
        self._tmp.cleanup()

    def test_alerts_are_projected_from_stock(self):
        alerts = self.alerts.query_alerts(now=NOW)
        by_pair = {(a.product.id, a.warehouse.id): a for a in alerts}

        self.assertEqual(set(by_pair), {(1, 1), (2, 1), (3, 2)})
        self.assertEqual(by_pair[(1, 1)].severity, "critical")
        self.assertEqual(by_pair[(1, 1)].shortage, 6)
        self.assertEqual(by_pair[(1, 1)].recommended_quantity, 16)
        self.assertEqual(by_pair[(2, 1)].severity, "warning")
        self.assertEqual(by_pair[(3, 2)].severity, "info")
        self.assertTrue(all(a.status == "active" for a in alerts))
        self.assertEqual(self.store.read_collection("alerts"), [])

    def test_filters_and_stats(self):
        self.assertEqual(len(self.alerts.query_alerts(severity="critical")), 1)
        self.assertEqual(len(self.alerts.query_alerts(warehouse_id=2)), 1)

        stats = self.alerts.alert_stats()
        self.assertEqual((stats.critical, stats.warning, stats.overstocked), (1, 1, 1))
        self.assertEqual(stats.active, 3)

    def test_update_creates_then_transitions_record(self):
        record = self.alerts.update_alert_status(1, 1, AlertStatusUpdate(status="acknowledged", notes="on it"))
        self.assertEqual(record.id, 1)
        self.assertIsNotNone(record.acknowledged_at)

        snoozed = self.alerts.update_alert_status(
            1, 1, AlertStatusUpdate(status="snoozed", snooze_until="2999-01-01T00:00:00.000Z")
        )
        self.assertEqual(snoozed.id, 1)
        self.assertEqual(snoozed.notes, "on it")
        self.assertEqual(snoozed.acknowledged_at, record.acknowledged_at)
        self.assertEqual(len(self.store.read_collection("alerts")), 1)

        listed = self.alerts.query_alerts(status="snoozed")
        self.assertEqual([(a.product.id, a.warehouse.id) for a in listed], [(1, 1)])

    def test_resolved_alert_accepts_a_new_breach(self):
        for status in ("acknowledged", "snoozed", "active"):
            with self.subTest(status=status):
                self.alerts.update_alert_status(1, 1, AlertStatusUpdate(status="resolved"))
                record = self.alerts.update_alert_status(1, 1, AlertStatusUpdate(status=status))
                self.assertEqual(record.status, status)
                self.assertIsNotNone(record.resolved_at)
        with self.assertRaises(InvalidStateError):
            check_transition("resolved", "archived")

    def test_update_by_id_requires_existing_record(self):
        with self.assertRaises(NotFoundError) as ctx:
            self.alerts.update_alert_status_by_id(99, AlertStatusUpdate(status="acknowledged"))
        self.assertEqual(ctx.exception.message, "Alert tracking record not found")

    def test_patch_schema_requires_snooze_until(self):
        with self.assertRaises(ValueError):
            AlertStatusPatch(status="snoozed")
        self.assertEqual(AlertStatusPatch(status="snoozed", snoozeUntil="2030-01-01").snooze_until, "2030-01-01")

    def test_receipt_resolves_existing_record_and_appends_note(self):
        order = PurchaseOrder(id=7, product_id=1, warehouse_id=1, quantity=3, order_date="2024-01-01T00:00:00.000Z")
        self.assertIsNone(self.alerts.resolve_for_receipt(order))

        self.alerts.update_alert_status(1, 1, AlertStatusUpdate(status="acknowledged", notes="ordered"))
        record = self.alerts.resolve_for_receipt(order)
        self.assertEqual(record.status, "resolved")
        self.assertEqual(record.notes, "ordered\nSystem: Received PO #7 (+3 units)")
        self.assertIsNotNone(record.resolved_at)


if __name__ == "__main__":
    unittest.main()
