"""JSON-file-backed implementation of VariationRepository."""

from __future__ import annotations

from pathlib import Path

from ims.domain.model.variation import ProductVariation
from ims.domain.repository.variation_repository import VariationRepository
from ims.infrastructure.persistence.json_file import JsonFile
from ims.infrastructure.persistence.json_product_repository import parse_count


class JsonVariationRepository(VariationRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- VariationRepository interface ----------------------------------------

    def get_by_id(self, variation_id: str) -> ProductVariation | None:
        for raw in self._file.load():
            if raw["id"] == variation_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[ProductVariation]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, variation: ProductVariation) -> None:
        self._file.upsert(self._to_raw(variation))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(variation: ProductVariation) -> dict:
        return {
            "id": variation.id,
            "product_id": variation.product_id,
            "variation_value": variation.variation_value,
            "stock_quantity": variation.stock_quantity,
            "is_active": variation.is_active,
        }

    @staticmethod
    def _to_domain(raw: dict) -> ProductVariation:
        return ProductVariation(
            id=raw["id"],
            product_id=raw["product_id"],
            variation_value=raw.get("variation_value", ""),
            stock_quantity=parse_count(raw.get("stock_quantity")),
            is_active=raw.get("is_active", True),
        )
