"""Dashboard aggregate figures derived from the ledger."""

from decimal import Decimal

from pydantic import BaseModel


class DashboardKpis(BaseModel):
    """Headline inventory figures."""

    total_products: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    pending_receipts: int = 0
    pending_deliveries: int = 0
    pending_transfers: int = 0

    def to_payload(self) -> dict[str, int]:
        return {
            "totalProducts": self.total_products,
            "lowStock": self.low_stock,
            "outOfStock": self.out_of_stock,
            "pendingReceipts": self.pending_receipts,
            "pendingDeliveries": self.pending_deliveries,
            "pendingTransfers": self.pending_transfers,
        }


class WarehouseSummary(BaseModel):
    """Per-warehouse activity summary."""

    warehouse_id: str
    name: str
    short_code: str
    total_products: int = 0
    total_locations: int = 0
    receipts: int = 0
    deliveries: int = 0
    transfers: int = 0


class CategorySummary(BaseModel):
    """Active products and system-wide stock per product category."""

    category_id: str
    name: str
    total_products: int = 0
    total_stock: Decimal = Decimal("0")
