"""ProductVariation: a colour/size combination with its own stock."""

from __future__ import annotations

from dataclasses import dataclass

from ims.domain.model.stock import floored_quantity


@dataclass
class ProductVariation:
    """Invariant: ``stock_quantity`` is never negative."""

    id: str
    product_id: str
    variation_value: str
    stock_quantity: int = 0
    is_active: bool = True

    def apply_delta(self, quantity_change: int) -> tuple[int, int]:
        """Change the stock, floored at zero.  Returns (previous, new)."""
        previous = self.stock_quantity
        self.stock_quantity = floored_quantity(previous, quantity_change)
        return previous, self.stock_quantity

    def display_name(self, product_name: str) -> str:
        return f"{product_name} ({self.variation_value})"
