import argparse
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running this script directly.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from inventory_ledger.config import get_settings
from inventory_ledger.core.constants import COLLECTIONS, PRODUCTS
from inventory_ledger.core.errors import InventoryError
from inventory_ledger.core.logging import setup_logging
from inventory_ledger.dependencies import ServiceContainer
from inventory_ledger.schemas.catalog import CategoryCreate, ProductCreate, WarehouseCreate

CATEGORIES = [
    CategoryCreate(id="electronics", name="Electronics", color="#1976d2", icon="devices"),
    CategoryCreate(id="furniture", name="Furniture", color="#8d6e63", icon="chair"),
    CategoryCreate(id="supplies", name="Office Supplies", color="#43a047", icon="inventory"),
]

WAREHOUSES = [
    WarehouseCreate(code="WH-NORTH", name="North Distribution Center", location="Chicago, IL"),
    WarehouseCreate(code="WH-SOUTH", name="South Fulfillment Hub", location="Dallas, TX"),
    WarehouseCreate(code="WH-WEST", name="West Coast Depot", location="Oakland, CA"),
]

PRODUCTS_SEED = [
    ProductCreate(sku="EL-1001", name="Wireless Keyboard", category="electronics", unit_cost=29.5, reorder_point=40),
    ProductCreate(sku="EL-1002", name="USB-C Dock", category="electronics", unit_cost=89.0, reorder_point=15),
    ProductCreate(sku="FU-2001", name="Standing Desk", category="furniture", unit_cost=310.0, reorder_point=5),
    ProductCreate(sku="OS-3001", name="Printer Paper (Case)", category="supplies", unit_cost=24.0, reorder_point=60),
]

# (product index, warehouse index, quantity)
STOCK = [
    (0, 0, 120),
    (0, 1, 35),
    (1, 0, 12),
    (1, 2, 60),
    (2, 1, 4),
    (3, 0, 200),
    (3, 2, 65),
]


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample inventory collections.")
    parser.add_argument("--data-dir", default=None, help="Target data directory. Default: DATA_DIR.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing collections before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    container = ServiceContainer(get_settings(), data_dir=args.data_dir)
    store = container.store

    if args.reset:
        for collection in COLLECTIONS:
            store.write_collection(collection, [])

    if store.read_collection(PRODUCTS):
        print("Seed skipped: products already exist.")
        return

    try:
        for category in CATEGORIES:
            container.catalog.create_category(category)
        warehouses = [container.catalog.create_warehouse(payload) for payload in WAREHOUSES]
        products = [container.catalog.create_product(payload) for payload in PRODUCTS_SEED]
        for product_index, warehouse_index, quantity in STOCK:
            container.stock.adjust_stock(
                products[product_index].id,
                warehouses[warehouse_index].id,
                quantity,
                "Initial stock",
            )
    except InventoryError as exc:
        raise SystemExit(f"Seed failed: {exc.message}") from exc

    print(
        f"Seeded {len(CATEGORIES)} categories, {len(warehouses)} warehouses, "
        f"{len(products)} products and {len(STOCK)} stock entries into {store.data_dir}."
    )


if __name__ == "__main__":
    main()
