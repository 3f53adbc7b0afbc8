"""Application service: Adjust Stock use case (admin).

Validates the request at the boundary; the inventory service trusts
what it is given.
"""

from __future__ import annotations

from ims.domain.exceptions import ValidationError
from ims.domain.model.stock import StockMovement
from ims.domain.service.inventory_service import InventoryService


def require_int(value: object, field_name: str) -> int:
    if value is None:
        raise ValidationError(f"{field_name} is required")
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a whole number")
    return value


class AdjustStockHandler:

    def __init__(self, inventory: InventoryService) -> None:
        self._inventory = inventory

    def handle(
        self,
        product_id: str | None,
        variation_id: str | None,
        quantity_change: int | None,
        reason: str | None,
        created_by: str,
    ) -> StockMovement:
        """Apply a signed correction to a product or one of its variations."""
        if not product_id:
            raise ValidationError("Product ID is required")
        change = require_int(quantity_change, "Quantity change")
        if not reason or not reason.strip():
            raise ValidationError("Reason is required for stock adjustments")

        return self._inventory.adjust_stock(
            product_id,
            variation_id or None,
            change,
            reason.strip(),
            created_by,
        )
