"""Application service: Restock use case (admin)."""

from __future__ import annotations

from ims.application.adjust_stock import require_int
from ims.domain.exceptions import ValidationError
from ims.domain.model.stock import StockMovement
from ims.domain.service.inventory_service import InventoryService


class RestockHandler:

    def __init__(self, inventory: InventoryService) -> None:
        self._inventory = inventory

    def handle(
        self,
        product_id: str | None,
        variation_id: str | None,
        quantity: int | None,
        notes: str | None,
        created_by: str,
    ) -> StockMovement:
        if not product_id:
            raise ValidationError("Product ID is required")
        received = require_int(quantity, "Quantity")
        return self._inventory.restock_stock(
            product_id, variation_id or None, received, notes, created_by
        )
