"""Application service: Recalculate Product aggregates (admin)."""

from __future__ import annotations

from ims.domain.exceptions import ValidationError
from ims.domain.model.product import Product
from ims.domain.service.inventory_service import InventoryService


class RecalculateProductHandler:

    def __init__(self, inventory: InventoryService) -> None:
        self._inventory = inventory

    def handle(self, product_id: str | None) -> Product:
        if not product_id:
            raise ValidationError("Product ID is required")
        return self._inventory.recalculate_product(product_id)
