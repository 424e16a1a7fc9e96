from collections import defaultdict

from inventory_ledger.core.constants import CATEGORIES, PRODUCTS, STOCK, WAREHOUSES
from inventory_ledger.schemas.catalog import Product
from inventory_ledger.schemas.dashboard import (
    CategoryChartPoint,
    DashboardStats,
    DashboardSummary,
    InventoryItem,
)
from inventory_ledger.storage import JsonStore


def _quantity_by_product(stock_rows):
    totals = defaultdict(int)
    for row in stock_rows:
        totals[row["productId"]] += int(row["quantity"])
    return totals


def _stock_by_category(products, stock_rows, categories):
    # Products may reference a category by name or by id; only known
    # categories are charted.
    by_id = {product.id: product for product in products}
    totals = defaultdict(int)
    for row in stock_rows:
        product = by_id.get(row["productId"])
        if product is not None:
            totals[product.category] += int(row["quantity"])
    points = []
    for category in categories:
        keys = {category.get("name"), category.get("id")} - {None}
        value = sum(totals.get(key, 0) for key in keys)
        points.append(CategoryChartPoint(category=category.get("name", ""), value=value))
    return points


def dashboard_summary(store: JsonStore, overview_limit=None) -> DashboardSummary:
    """Totals, category chart and per-product overview across all warehouses.

    A product counts as low stock when its quantity summed over every
    warehouse is at or below its reorder point.
    """
    products = [Product.model_validate(row) for row in store.read_collection(PRODUCTS)]
    warehouses = store.read_collection(WAREHOUSES)
    stock_rows = store.read_collection(STOCK)
    categories = store.read_collection(CATEGORIES)

    quantities = _quantity_by_product(stock_rows)
    overview = []
    total_value = 0.0
    for product in products:
        total_quantity = quantities.get(product.id, 0)
        total_value += product.unit_cost * total_quantity
        overview.append(
            InventoryItem(
                **product.model_dump(),
                total_quantity=total_quantity,
                is_low_stock=total_quantity <= product.reorder_point,
            )
        )

    stats = DashboardStats(
        total_products=len(products),
        total_warehouses=len(warehouses),
        total_value=round(total_value, 2),
        low_stock_alerts=sum(1 for item in overview if item.is_low_stock),
    )
    if overview_limit is not None:
        overview = overview[: max(0, int(overview_limit))]
    return DashboardSummary(
        stats=stats,
        chart_data=_stock_by_category(products, stock_rows, categories),
        inventory_overview=overview,
    )


__all__ = ["dashboard_summary"]
