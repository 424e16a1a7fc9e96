# Collection names in the JSON store (one ``<name>.json`` file each).
PRODUCTS = "products"
WAREHOUSES = "warehouses"
CATEGORIES = "categories"
STOCK = "stock"
PURCHASE_ORDERS = "purchase_orders"
TRANSFERS = "transfers"
ALERTS = "alerts"
AUDIT_LOG = "audit_log"

COLLECTIONS = (
    PRODUCTS,
    WAREHOUSES,
    CATEGORIES,
    STOCK,
    PURCHASE_ORDERS,
    TRANSFERS,
    ALERTS,
    AUDIT_LOG,
)

PURCHASE_ORDER_PREFIX = "PO"
ADJUSTMENT_PREFIX = "ADJ"

REORDER_MESSAGE = "Purchase Order Created (Pending)"
