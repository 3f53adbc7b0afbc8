"""JSON-file-backed implementation of ProductRepository.

``available_units`` and ``reserved_units`` are stored as strings, the way
the storefront's document store has always held them.  They are parsed
here, once, and are plain ints everywhere else.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from ims.domain.model.product import Product, StockStatus, derive_stock_status
from ims.domain.model.value_objects import Money
from ims.domain.repository.product_repository import ProductRepository
from ims.infrastructure.persistence.json_file import JsonFile


def parse_count(value: object) -> int:
    """Read a stock count that may be an int, a float, a string or missing.

    Anything unparseable counts as zero; negatives are floored at zero.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(0, int(value))
    if isinstance(value, str):
        try:
            return max(0, int(float(value.strip())))
        except ValueError:
            return 0
    return 0


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._file.load():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def get_by_name(self, name: str) -> Product | None:
        for raw in self._file.load():
            if raw["name"].lower() == name.lower():
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._file.load()]

    def save(self, product: Product) -> None:
        self._file.upsert(self._to_raw(product))

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "units": product.units,
            "available_units": str(product.available_units),
            "reserved_units": str(product.reserved_units),
            "stock_status": product.stock_status.value,
            "min_order_quantity": product.min_order_quantity,
            "last_restocked_at": (
                product.last_restocked_at.isoformat() if product.last_restocked_at else None
            ),
            "is_active": product.is_active,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        units = parse_count(raw.get("units"))
        available = parse_count(raw.get("available_units", units))
        min_order_quantity = parse_count(raw.get("min_order_quantity", 1)) or 1
        status = raw.get("stock_status")
        restocked = raw.get("last_restocked_at")
        return Product(
            id=raw["id"],
            name=raw["name"],
            price=Money(Decimal(str(raw.get("price", "0"))), raw.get("currency", "USD")),
            units=units,
            available_units=available,
            reserved_units=parse_count(raw.get("reserved_units")),
            stock_status=(
                StockStatus(status) if status
                else derive_stock_status(available, min_order_quantity)
            ),
            min_order_quantity=min_order_quantity,
            last_restocked_at=datetime.fromisoformat(restocked) if restocked else None,
            is_active=raw.get("is_active", True),
        )
