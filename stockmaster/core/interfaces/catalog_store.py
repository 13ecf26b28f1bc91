"""Abstract interface for the read-only reference catalog."""

from abc import ABC, abstractmethod

from stockmaster.core.entities.catalog import Location, Product, ProductCategory, Warehouse


class ICatalogStore(ABC):
    """Read access to warehouses, locations, categories and products."""

    @abstractmethod
    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        """Get warehouse by ID."""
        pass

    @abstractmethod
    async def get_location(self, location_id: str) -> Location | None:
        """Get location by ID."""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""
        pass

    @abstractmethod
    async def find_missing_products(self, product_ids: list[str]) -> list[str]:
        """Return the subset of product IDs that do not exist."""
        pass

    @abstractmethod
    async def list_warehouses(self, active_only: bool = True) -> list[Warehouse]:
        """List warehouses."""
        pass

    @abstractmethod
    async def list_locations(
        self, warehouse_id: str | None = None, active_only: bool = False
    ) -> list[Location]:
        """List locations, optionally for one warehouse."""
        pass

    @abstractmethod
    async def list_categories(self) -> list[ProductCategory]:
        """All product categories, by name."""
        pass

    @abstractmethod
    async def list_products(
        self, category_id: str | None = None, active_only: bool = True
    ) -> list[Product]:
        """List products, optionally for one category."""
        pass

    @abstractmethod
    async def list_reorder_products(self) -> list[Product]:
        """Active products with a positive reorder level."""
        pass
