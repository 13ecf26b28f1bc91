"""Reference catalog entities (warehouses, locations, categories, products).

The core only reads these. They are maintained by the catalog service.
"""

from pydantic import BaseModel


class Warehouse(BaseModel):
    """A physical warehouse."""

    id: str
    name: str
    short_code: str
    is_active: bool = True


class Location(BaseModel):
    """A stock location within a warehouse."""

    id: str
    warehouse_id: str
    name: str
    short_code: str
    is_active: bool = True


class ProductCategory(BaseModel):
    id: str
    name: str


class Product(BaseModel):
    """A stocked product."""

    id: str
    name: str
    sku: str
    unit_of_measure: str = "Units"
    category_id: str | None = None
    reorder_level: int = 0
    is_active: bool = True
