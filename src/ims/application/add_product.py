"""Application service: Add Product use case (catalog seeding)."""

from __future__ import annotations

from ims.domain.exceptions import ValidationError
from ims.domain.model.product import Product, derive_stock_status
from ims.domain.model.value_objects import Money
from ims.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        name: str,
        price: str,
        units: int = 0,
        min_order_quantity: int = 1,
    ) -> Product:
        """Add a new product to the catalog with its opening flat stock."""
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if units < 0:
            raise ValidationError("Opening stock cannot be negative")
        if min_order_quantity < 1:
            raise ValidationError("Minimum order quantity must be at least 1")

        existing = self._product_repo.get_by_name(name.strip())
        if existing is not None:
            raise ValidationError(f"Product '{name}' already exists")

        # Auto-assign ID based on existing products
        all_products = self._product_repo.list_all()
        numeric_ids = [int(p.id) for p in all_products if p.id.isdigit()]
        next_id = str(max(numeric_ids) + 1) if numeric_ids else "1"

        product = Product(
            id=next_id,
            name=name.strip(),
            price=Money.of(price),
            units=units,
            available_units=units,
            stock_status=derive_stock_status(units, min_order_quantity),
            min_order_quantity=min_order_quantity,
        )
        self._product_repo.save(product)
        return product
