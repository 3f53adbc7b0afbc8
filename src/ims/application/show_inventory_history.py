"""Application service: Inventory History use case (query)."""

from __future__ import annotations

from dataclasses import dataclass

from ims.domain.exceptions import ValidationError
from ims.domain.model.transaction import InventoryTransaction
from ims.domain.service.inventory_service import InventoryService
from ims.domain.service.stock_ledger import HistorySummary, StockLedger


@dataclass(frozen=True)
class InventoryHistory:
    entries: list[InventoryTransaction]
    summary: HistorySummary


class ShowInventoryHistoryHandler:

    def __init__(self, inventory: InventoryService) -> None:
        self._inventory = inventory

    def handle(
        self,
        product_id: str | None,
        variation_id: str | None = None,
        limit: int = 50,
    ) -> InventoryHistory:
        if not product_id:
            raise ValidationError("Product ID is required")
        if limit <= 0:
            raise ValidationError("Limit must be positive")

        entries = self._inventory.get_inventory_history(
            product_id, variation_id=variation_id or None, limit=limit
        )
        return InventoryHistory(entries=entries, summary=StockLedger.summarize(entries))
