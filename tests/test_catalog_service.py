import tempfile
import unittest

from inventory_ledger.core.errors import InvalidStateError, NotFoundError
from inventory_ledger.core.locks import FileMutex
from inventory_ledger.schemas.catalog import (
    CategoryCreate,
    ProductCreate,
    ProductUpdate,
    WarehouseCreate,
)
from inventory_ledger.services.catalog_service import CatalogService, slugify, unique_slug
from inventory_ledger.services.dashboard_service import dashboard_summary
from inventory_ledger.storage import JsonStore


class SlugTest(unittest.TestCase):
    def test_slugify(self):
        self.assertEqual(slugify("  USB-C Dock (Pro) "), "usb-c-dock-pro")

    def test_unique_slug_appends_counter(self):
        self.assertEqual(unique_slug("Desk", ["desk", "desk-1"]), "desk-2")
        self.assertEqual(unique_slug("Desk", ["desk"], current="desk"), "desk")


class CatalogServiceTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = JsonStore(self._tmp.name)
        self.catalog = CatalogService(self.store, FileMutex("stock_transaction", self._tmp.name))

        self.catalog.create_category(CategoryCreate(id="tools", name="Tools"))
        self.north = self.catalog.create_warehouse(WarehouseCreate(code="N", name="North", location="A"))
        self.south = self.catalog.create_warehouse(WarehouseCreate(code="S", name="South", location="B"))
        self.widget = self.catalog.create_product(
            ProductCreate(sku="A-1", name="Widget", category="tools", unit_cost=2.0, reorder_point=10)
        )
        self.store.write_collection(
            "stock",
            [
                {"id": 1, "productId": self.widget.id, "warehouseId": self.north.id, "quantity": 4},
                {"id": 2, "productId": self.widget.id, "warehouseId": self.south.id, "quantity": 3},
            ],
        )

    def tearDown(self):
        self._tmp.cleanup()

    def test_products_get_unique_slugs(self):
        twin = self.catalog.create_product(
            ProductCreate(sku="A-2", name="Widget", category="tools", unit_cost=1.0, reorder_point=1)
        )
        self.assertEqual((self.widget.slug, twin.slug), ("widget", "widget-1"))
        self.assertEqual(self.catalog.get_product("widget-1").id, twin.id)
        self.assertEqual(self.catalog.get_product(str(twin.id)).sku, "A-2")

    def test_update_product_renames_slug(self):
        updated = self.catalog.update_product(self.widget.id, ProductUpdate(name="Big Widget", reorder_point=3))
        self.assertEqual((updated.slug, updated.reorder_point, updated.sku), ("big-widget", 3, "A-1"))
        with self.assertRaises(NotFoundError):
            self.catalog.update_product(99, ProductUpdate(name="x"))

    def test_duplicate_codes_rejected(self):
        with self.assertRaises(InvalidStateError):
            self.catalog.create_warehouse(WarehouseCreate(code="N", name="Other", location="C"))
        with self.assertRaises(InvalidStateError):
            self.catalog.create_category(CategoryCreate(name="Tools"))

    def test_delete_product_cascades(self):
        self.store.write_collection(
            "purchase_orders",
            [{"id": 1, "productId": self.widget.id, "warehouseId": 1, "quantity": 1, "status": "pending", "orderDate": "x"}],
        )
        removed = self.catalog.delete_product(self.widget.id)
        self.assertEqual(removed["stock"], 2)
        self.assertEqual(removed["purchase_orders"], 1)
        self.assertEqual(self.store.read_collection("products"), [])
        self.assertEqual(self.store.read_collection("stock"), [])

    def test_delete_warehouse_cascades_stock(self):
        self.catalog.delete_warehouse(self.north.id)
        self.assertEqual([row["warehouseId"] for row in self.store.read_collection("stock")], [self.south.id])
        with self.assertRaises(NotFoundError):
            self.catalog.get_warehouse(self.north.id)

    def test_delete_category_cascades_products(self):
        removed = self.catalog.delete_category("tools")
        self.assertEqual(removed["products"], 1)
        self.assertEqual(self.store.read_collection("stock"), [])
        self.assertEqual(self.catalog.list_categories(), [])

    def test_category_summaries(self):
        summary = self.catalog.list_categories()[0]
        self.assertEqual((summary.product_count, summary.total_items), (1, 7))
        self.assertAlmostEqual(summary.total_value, 14.0)

    def test_dashboard_summary(self):
        summary = dashboard_summary(self.store)
        self.assertEqual(summary.stats.total_products, 1)
        self.assertEqual(summary.stats.total_warehouses, 2)
        self.assertEqual(summary.stats.low_stock_alerts, 1)
        self.assertAlmostEqual(summary.stats.total_value, 14.0)
        self.assertEqual([(p.category, p.value) for p in summary.chart_data], [("Tools", 7)])
        self.assertTrue(summary.inventory_overview[0].is_low_stock)
        self.assertEqual(dashboard_summary(self.store, overview_limit=0).inventory_overview, [])


if __name__ == "__main__":
    unittest.main()
