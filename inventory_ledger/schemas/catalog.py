from typing import Optional

from pydantic import Field

from inventory_ledger.schemas.common import CamelModel


class ProductBase(CamelModel):
    sku: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    unit_cost: float = Field(ge=0)
    reorder_point: int = Field(ge=0)


class ProductCreate(ProductBase):
    pass


class ProductUpdate(CamelModel):
    sku: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    unit_cost: Optional[float] = Field(default=None, ge=0)
    reorder_point: Optional[int] = Field(default=None, ge=0)


class Product(ProductBase):
    id: int
    slug: Optional[str] = None


class WarehouseBase(CamelModel):
    code: str = Field(min_length=1)
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)


class WarehouseCreate(WarehouseBase):
    pass


class WarehouseUpdate(CamelModel):
    code: Optional[str] = Field(default=None, min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)


class Warehouse(WarehouseBase):
    id: int


class CategoryCreate(CamelModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class Category(CategoryCreate):
    id: str


class CategorySummary(Category):
    product_count: int = 0
    total_items: int = 0
    total_value: float = 0.0


class ProductRef(CamelModel):
    id: int
    name: str
    sku: str


class WarehouseRef(CamelModel):
    id: int
    name: str
    code: str
