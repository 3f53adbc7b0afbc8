"""Abstract repository for ProductVariation."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.variation import ProductVariation


class VariationRepository(ABC):

    @abstractmethod
    def get_by_id(self, variation_id: str) -> ProductVariation | None:
        """Return a variation by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[ProductVariation]:
        """Return every variation of every product."""

    @abstractmethod
    def save(self, variation: ProductVariation) -> None:
        """Persist a new or updated variation."""

    def list_for_product(self, product_id: str) -> list[ProductVariation]:
        return [v for v in self.list_all() if v.product_id == product_id]

    def list_active(self) -> list[ProductVariation]:
        return [v for v in self.list_all() if v.is_active]
