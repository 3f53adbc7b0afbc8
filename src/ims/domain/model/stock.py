"""Stock value types passed between the inventory service and its callers.

These are plain immutable containers; the behaviour lives in the
domain services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ims.domain.exceptions import ValidationError
from ims.domain.model.transaction import TransactionType


def floored_quantity(previous: int, change: int) -> int:
    """Apply *change* to *previous*, never going below zero."""
    return max(0, previous + change)


@dataclass(frozen=True)
class StockTarget:
    """Identifies a stock-bearing entity: a variation, or a product without variations.

    When ``variation_id`` is set it wins; ``product_id`` may then be
    omitted and is resolved from the variation itself.
    """

    product_id: str | None = None
    variation_id: str | None = None

    def __post_init__(self) -> None:
        if not self.product_id and not self.variation_id:
            raise ValidationError("Stock target needs a product or variation ID")

    @property
    def is_variation(self) -> bool:
        return bool(self.variation_id)

    @staticmethod
    def for_product(product_id: str) -> StockTarget:
        return StockTarget(product_id=product_id)

    @staticmethod
    def for_variation(variation_id: str, product_id: str | None = None) -> StockTarget:
        return StockTarget(product_id=product_id, variation_id=variation_id)

    def __str__(self) -> str:
        if self.is_variation:
            return f"variation '{self.variation_id}'"
        return f"product '{self.product_id}'"


@dataclass(frozen=True)
class StockMovement:
    """Outcome of one applied stock delta."""

    product_id: str
    variation_id: str | None
    transaction_type: TransactionType
    quantity_change: int
    previous_quantity: int
    new_quantity: int


# ---------------------------------------------------------------------------
# Availability check
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CartItem:
    """A requested quantity of a product or one of its variations."""

    product_id: str
    quantity: int
    variation_id: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class UnavailableItem:
    product_id: str
    variation_id: str | None
    requested: int
    available: int
    name: str


@dataclass(frozen=True)
class StockCheckResult:
    available: bool
    unavailable_items: list[UnavailableItem] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Low stock
# ---------------------------------------------------------------------------


class LowStockStatus(Enum):
    LOW = "low"
    CRITICAL = "critical"
    OUT = "out"


def classify_low_stock(current_stock: int, threshold: int) -> LowStockStatus:
    if current_stock == 0:
        return LowStockStatus.OUT
    if current_stock <= threshold / 2:
        return LowStockStatus.CRITICAL
    return LowStockStatus.LOW


@dataclass(frozen=True)
class LowStockProduct:
    """A product or variation whose stock is at or below its threshold.

    ``id`` is the variation's id for variation entries, the product's
    id otherwise.
    """

    id: str
    name: str
    current_stock: int
    threshold: int
    status: LowStockStatus
    product_id: str
    variation_id: str | None = None


# ---------------------------------------------------------------------------
# Bulk update
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockUpdate:
    """One entry of a bulk update: a signed quantity change for a variation."""

    variation_id: str
    quantity: int
    reason: str | None = None


@dataclass(frozen=True)
class BulkUpdateResult:
    success: int
    failed: int
    errors: list[str] = field(default_factory=list)
