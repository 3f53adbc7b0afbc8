"""Application service: Low Stock overview (query)."""

from __future__ import annotations

from dataclasses import dataclass

from ims.domain.exceptions import ValidationError
from ims.domain.model.stock import LowStockProduct, LowStockStatus
from ims.domain.service.inventory_service import InventoryService


@dataclass(frozen=True)
class LowStockSummary:
    total_low_stock: int
    out_of_stock: int
    critical: int
    low: int


@dataclass(frozen=True)
class LowStockOverview:
    threshold: int
    out_of_stock: list[LowStockProduct]
    critical: list[LowStockProduct]
    low: list[LowStockProduct]

    @property
    def summary(self) -> LowStockSummary:
        return LowStockSummary(
            total_low_stock=len(self.out_of_stock) + len(self.critical) + len(self.low),
            out_of_stock=len(self.out_of_stock),
            critical=len(self.critical),
            low=len(self.low),
        )


class ShowLowStockHandler:

    def __init__(self, inventory: InventoryService, default_threshold: int) -> None:
        self._inventory = inventory
        self._default_threshold = default_threshold

    def handle(self, threshold: int | None = None) -> LowStockOverview:
        limit = self._default_threshold if threshold is None else threshold
        if limit < 0:
            raise ValidationError("Threshold cannot be negative")

        products = self._inventory.get_low_stock_products(limit)

        def with_status(status: LowStockStatus) -> list[LowStockProduct]:
            return [p for p in products if p.status is status]

        return LowStockOverview(
            threshold=limit,
            out_of_stock=with_status(LowStockStatus.OUT),
            critical=with_status(LowStockStatus.CRITICAL),
            low=with_status(LowStockStatus.LOW),
        )
