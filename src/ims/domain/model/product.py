"""Product aggregate.

Products are created by catalog management.  The stock-related fields
(``available_units``, ``reserved_units``, ``stock_status``,
``last_restocked_at``) are only ever changed by the inventory service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ims.domain.model.stock import floored_quantity
from ims.domain.model.transaction import TransactionType
from ims.domain.model.value_objects import Money


class StockStatus(Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def derive_stock_status(available: int, min_order_quantity: int) -> StockStatus:
    """Classify a product by its available units.

    Out of stock at zero, low stock up to ``max(1, min_order_quantity)``,
    in stock above that.
    """
    if available <= 0:
        return StockStatus.OUT_OF_STOCK
    if available <= max(1, min_order_quantity):
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


@dataclass
class Product:
    """A product in the catalog.

    ``units`` is the flat stock for products without variations.  When a
    product has variations, ``available_units`` is the sum of its active
    variations' stock and ``units`` is left alone.
    """

    id: str
    name: str
    price: Money
    units: int = 0
    available_units: int = 0
    reserved_units: int = 0
    stock_status: StockStatus = StockStatus.OUT_OF_STOCK
    min_order_quantity: int = 1
    last_restocked_at: datetime | None = None
    is_active: bool = True

    def apply_units_delta(self, quantity_change: int) -> tuple[int, int]:
        """Change the flat stock, floored at zero.  Returns (previous, new)."""
        previous = self.units
        self.units = floored_quantity(previous, quantity_change)
        return previous, self.units

    def apply_aggregate_change(
        self,
        new_available: int,
        quantity_change: int,
        transaction_type: TransactionType,
        at: datetime,
    ) -> None:
        """Refresh the aggregates after one stock mutation.

        Sales add the deducted amount to ``reserved_units``; returns take
        it back out.  Adjustments and restocks leave reservations alone.
        """
        self.available_units = max(0, new_available)

        if transaction_type is TransactionType.SALE:
            self.reserved_units = max(0, self.reserved_units + abs(quantity_change))
        elif transaction_type is TransactionType.RETURN:
            self.reserved_units = max(0, self.reserved_units - quantity_change)

        self.refresh_status()

        if transaction_type is TransactionType.RESTOCK:
            self.last_restocked_at = at

    def refresh_status(self) -> None:
        self.stock_status = derive_stock_status(
            self.available_units, self.min_order_quantity
        )
