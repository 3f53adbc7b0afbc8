"""Application service: Add Variation use case (catalog seeding).

A product's ``available_units`` switches from its flat stock to the sum
of its variations as soon as it has one, so the aggregate is
recalculated after every addition.
"""

from __future__ import annotations

from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.variation import ProductVariation
from ims.domain.repository.product_repository import ProductRepository
from ims.domain.repository.variation_repository import VariationRepository
from ims.domain.service.inventory_service import InventoryService


class AddVariationHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        variation_repo: VariationRepository,
        inventory: InventoryService,
    ) -> None:
        self._product_repo = product_repo
        self._variation_repo = variation_repo
        self._inventory = inventory

    def handle(self, product_id: str, variation_value: str, stock: int = 0) -> ProductVariation:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        if not variation_value or not variation_value.strip():
            raise ValidationError("Variation value is required")
        if stock < 0:
            raise ValidationError("Opening stock cannot be negative")

        siblings = self._variation_repo.list_for_product(product_id)
        variation = ProductVariation(
            id=f"{product_id}-{len(siblings) + 1}",
            product_id=product_id,
            variation_value=variation_value.strip(),
            stock_quantity=stock,
        )
        if self._variation_repo.get_by_id(variation.id) is not None:
            raise ValidationError(f"Variation '{variation.id}' already exists")

        self._variation_repo.save(variation)
        self._inventory.recalculate_product(product_id)
        return variation
