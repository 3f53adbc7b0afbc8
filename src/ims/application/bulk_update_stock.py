"""Application service: Bulk Update Stock use case (admin).

The whole request is validated before any entry is applied; after that,
entries succeed or fail independently.
"""

from __future__ import annotations

from ims.application.adjust_stock import require_int
from ims.domain.exceptions import ValidationError
from ims.domain.model.stock import BulkUpdateResult, StockUpdate
from ims.domain.service.inventory_service import InventoryService


class BulkUpdateStockHandler:

    def __init__(self, inventory: InventoryService) -> None:
        self._inventory = inventory

    def handle(self, updates: list[StockUpdate], created_by: str) -> BulkUpdateResult:
        if not updates:
            raise ValidationError("Updates list is required and must not be empty")

        for update in updates:
            if not update.variation_id:
                raise ValidationError("Each update must have a variation ID")
            require_int(update.quantity, "Each update's quantity")

        return self._inventory.bulk_update_stock(updates, created_by)
