import logging
import re
from typing import Iterable, Optional

from inventory_ledger.core.constants import (
    ALERTS,
    CATEGORIES,
    PRODUCTS,
    PURCHASE_ORDERS,
    STOCK,
    WAREHOUSES,
)
from inventory_ledger.core.errors import InvalidStateError, NotFoundError
from inventory_ledger.core.locks import FileMutex
from inventory_ledger.schemas.catalog import (
    Category,
    CategoryCreate,
    CategorySummary,
    CategoryUpdate,
    Product,
    ProductCreate,
    ProductUpdate,
    Warehouse,
    WarehouseCreate,
    WarehouseUpdate,
)
from inventory_ledger.storage import JsonStore, find_index, next_id

logger = logging.getLogger(__name__)


def slugify(text: str) -> str:
    slug = str(text).strip().lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^\w-]+", "", slug)
    return re.sub(r"--+", "-", slug)


def unique_slug(name: str, existing: Iterable[str], current: Optional[str] = None) -> str:
    base = slugify(name)
    taken = {slug for slug in existing if slug and slug != current}
    candidate = base
    counter = 1
    while candidate in taken:
        candidate = "{}-{}".format(base, counter)
        counter += 1
    return candidate


def require_product(store: JsonStore, product_id: int) -> Product:
    for row in store.read_collection(PRODUCTS):
        if row.get("id") == product_id:
            return Product.model_validate(row)
    raise NotFoundError(
        "Product with ID {} not found".format(product_id),
        code="PRODUCT_NOT_FOUND",
    )


def require_warehouse(store: JsonStore, warehouse_id: int, *, role: str = "Warehouse") -> Warehouse:
    for row in store.read_collection(WAREHOUSES):
        if row.get("id") == warehouse_id:
            return Warehouse.model_validate(row)
    raise NotFoundError(
        "{} with ID {} not found".format(role, warehouse_id),
        code="WAREHOUSE_NOT_FOUND",
    )


def _drop_where(store: JsonStore, collection: str, predicate) -> int:
    rows = store.read_collection(collection)
    kept = [row for row in rows if not predicate(row)]
    removed = len(rows) - len(kept)
    if removed:
        store.write_collection(collection, kept)
    return removed


class CatalogService:
    """Products, warehouses and categories.

    Deletes cascade into the stock ledger, so they run under the stock mutex.
    """

    def __init__(self, store: JsonStore, mutex: FileMutex):
        self.store = store
        self.mutex = mutex

    # -- products ---------------------------------------------------------

    def list_products(self, *, search: Optional[str] = None, category: Optional[str] = None) -> list[Product]:
        products = [Product.model_validate(row) for row in self.store.read_collection(PRODUCTS)]
        if search:
            needle = search.strip().lower()
            products = [p for p in products if needle in p.name.lower() or needle in p.sku.lower()]
        if category:
            products = [p for p in products if p.category == category]
        return products

    def get_product(self, key) -> Product:
        """Look a product up by numeric id or by slug."""
        rows = self.store.read_collection(PRODUCTS)
        text = str(key)
        for row in rows:
            if text.isdigit() and row.get("id") == int(text):
                return Product.model_validate(row)
            if row.get("slug") == text:
                return Product.model_validate(row)
        raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND")

    def create_product(self, payload: ProductCreate) -> Product:
        def _create():
            rows = self.store.read_collection(PRODUCTS)
            product = Product(
                id=next_id(rows),
                slug=unique_slug(payload.name, (row.get("slug") for row in rows)),
                **payload.model_dump(),
            )
            rows.append(product.to_record())
            self.store.write_collection(PRODUCTS, rows)
            return product

        product = self.mutex.run_exclusive(_create)
        logger.info("Created product %s (%s)", product.id, product.sku)
        return product

    def update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        def _update():
            rows = self.store.read_collection(PRODUCTS)
            index = find_index(rows, id=product_id)
            if index == -1:
                raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND")
            current = Product.model_validate(rows[index])
            changes = payload.model_dump(exclude_unset=True, exclude_none=True)
            if changes.get("name") and changes["name"] != current.name:
                changes["slug"] = unique_slug(
                    changes["name"], (row.get("slug") for row in rows), current.slug
                )
            product = current.model_copy(update=changes)
            rows[index] = product.to_record()
            self.store.write_collection(PRODUCTS, rows)
            return product

        return self.mutex.run_exclusive(_update)

    def delete_product(self, product_id: int) -> dict:
        def _delete():
            rows = self.store.read_collection(PRODUCTS)
            index = find_index(rows, id=product_id)
            if index == -1:
                raise NotFoundError("Product not found", code="PRODUCT_NOT_FOUND")
            def matches(row):
                return row.get("productId") == product_id

            removed = {
                STOCK: _drop_where(self.store, STOCK, matches),
                ALERTS: _drop_where(self.store, ALERTS, matches),
                PURCHASE_ORDERS: _drop_where(self.store, PURCHASE_ORDERS, matches),
            }
            rows.pop(index)
            self.store.write_collection(PRODUCTS, rows)
            return removed

        removed = self.mutex.run_exclusive(_delete)
        logger.info("Deleted product %s with cascade %s", product_id, removed)
        return removed

    # -- warehouses -------------------------------------------------------

    def list_warehouses(self) -> list[Warehouse]:
        return [Warehouse.model_validate(row) for row in self.store.read_collection(WAREHOUSES)]

    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        return require_warehouse(self.store, warehouse_id)

    def create_warehouse(self, payload: WarehouseCreate) -> Warehouse:
        def _create():
            rows = self.store.read_collection(WAREHOUSES)
            if any(row.get("code") == payload.code for row in rows):
                raise InvalidStateError(
                    "Warehouse code {} already exists".format(payload.code),
                    code="DUPLICATE_WAREHOUSE_CODE",
                )
            warehouse = Warehouse(id=next_id(rows), **payload.model_dump())
            rows.append(warehouse.to_record())
            self.store.write_collection(WAREHOUSES, rows)
            return warehouse

        return self.mutex.run_exclusive(_create)

    def update_warehouse(self, warehouse_id: int, payload: WarehouseUpdate) -> Warehouse:
        def _update():
            rows = self.store.read_collection(WAREHOUSES)
            index = find_index(rows, id=warehouse_id)
            if index == -1:
                raise NotFoundError("Warehouse not found", code="WAREHOUSE_NOT_FOUND")
            current = Warehouse.model_validate(rows[index])
            warehouse = current.model_copy(update=payload.model_dump(exclude_unset=True, exclude_none=True))
            rows[index] = warehouse.to_record()
            self.store.write_collection(WAREHOUSES, rows)
            return warehouse

        return self.mutex.run_exclusive(_update)

    def delete_warehouse(self, warehouse_id: int) -> dict:
        def _delete():
            rows = self.store.read_collection(WAREHOUSES)
            index = find_index(rows, id=warehouse_id)
            if index == -1:
                raise NotFoundError("Warehouse not found", code="WAREHOUSE_NOT_FOUND")
            def matches(row):
                return row.get("warehouseId") == warehouse_id

            removed = {
                STOCK: _drop_where(self.store, STOCK, matches),
                ALERTS: _drop_where(self.store, ALERTS, matches),
            }
            rows.pop(index)
            self.store.write_collection(WAREHOUSES, rows)
            return removed

        removed = self.mutex.run_exclusive(_delete)
        logger.info("Deleted warehouse %s with cascade %s", warehouse_id, removed)
        return removed

    # -- categories -------------------------------------------------------

    def list_categories(self) -> list[CategorySummary]:
        products = [Product.model_validate(row) for row in self.store.read_collection(PRODUCTS)]
        stock = self.store.read_collection(STOCK)
        summaries = []
        for row in self.store.read_collection(CATEGORIES):
            category = Category.model_validate(row)
            members = {p.id: p for p in products if p.category in (category.id, category.name)}
            items = [entry for entry in stock if entry.get("productId") in members]
            summaries.append(
                CategorySummary(
                    **category.model_dump(),
                    product_count=len(members),
                    total_items=sum(int(entry["quantity"]) for entry in items),
                    total_value=sum(
                        int(entry["quantity"]) * members[entry["productId"]].unit_cost for entry in items
                    ),
                )
            )
        return summaries

    def create_category(self, payload: CategoryCreate) -> Category:
        def _create():
            rows = self.store.read_collection(CATEGORIES)
            category_id = payload.id or slugify(payload.name)
            if find_index(rows, id=category_id) != -1:
                raise InvalidStateError(
                    "Category {} already exists".format(category_id),
                    code="DUPLICATE_CATEGORY",
                )
            category = Category(**payload.model_dump(exclude={"id"}), id=category_id)
            rows.append(category.to_record())
            self.store.write_collection(CATEGORIES, rows)
            return category

        return self.mutex.run_exclusive(_create)

    def update_category(self, category_id: str, payload: CategoryUpdate) -> Category:
        def _update():
            rows = self.store.read_collection(CATEGORIES)
            index = find_index(rows, id=category_id)
            if index == -1:
                raise NotFoundError("Category not found", code="CATEGORY_NOT_FOUND")
            current = Category.model_validate(rows[index])
            category = current.model_copy(update=payload.model_dump(exclude_unset=True, exclude_none=True))
            rows[index] = category.to_record()
            self.store.write_collection(CATEGORIES, rows)
            return category

        return self.mutex.run_exclusive(_update)

    def delete_category(self, category_id: str) -> dict:
        def _delete():
            rows = self.store.read_collection(CATEGORIES)
            index = find_index(rows, id=category_id)
            if index == -1:
                raise NotFoundError("Category not found", code="CATEGORY_NOT_FOUND")
            category = Category.model_validate(rows[index])
            def in_category(row):
                return row.get("category") in (category.id, category.name)

            product_ids = {row["id"] for row in self.store.read_collection(PRODUCTS) if in_category(row)}
            removed = {PRODUCTS: 0, STOCK: 0, ALERTS: 0}
            if product_ids:
                def owned(row):
                    return row.get("productId") in product_ids

                removed[PRODUCTS] = _drop_where(self.store, PRODUCTS, in_category)
                removed[STOCK] = _drop_where(self.store, STOCK, owned)
                removed[ALERTS] = _drop_where(self.store, ALERTS, owned)
            rows.pop(index)
            self.store.write_collection(CATEGORIES, rows)
            return removed

        removed = self.mutex.run_exclusive(_delete)
        logger.info("Deleted category %s with cascade %s", category_id, removed)
        return removed


__all__ = [
    "CatalogService",
    "require_product",
    "require_warehouse",
    "slugify",
    "unique_slug",
]
