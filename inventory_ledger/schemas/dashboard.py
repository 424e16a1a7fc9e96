from inventory_ledger.schemas.catalog import Product
from inventory_ledger.schemas.common import CamelModel


class DashboardStats(CamelModel):
    total_products: int
    total_warehouses: int
    total_value: float
    low_stock_alerts: int


class CategoryChartPoint(CamelModel):
    category: str
    value: int


class InventoryItem(Product):
    total_quantity: int
    is_low_stock: bool


class DashboardSummary(CamelModel):
    stats: DashboardStats
    chart_data: list[CategoryChartPoint]
    inventory_overview: list[InventoryItem]
