"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from ims.domain.service.inventory_service import InventoryService
from ims.infrastructure.config import get_settings
from ims.infrastructure.notifications.log_notifier import LogNotifier
from ims.infrastructure.persistence.json_order_repository import JsonOrderRepository
from ims.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from ims.infrastructure.persistence.json_transaction_repository import (
    JsonTransactionRepository,
)
from ims.infrastructure.persistence.json_variation_repository import (
    JsonVariationRepository,
)


def product_repository() -> JsonProductRepository:
    return JsonProductRepository(get_settings().data_dir / "products.json")


def variation_repository() -> JsonVariationRepository:
    return JsonVariationRepository(get_settings().data_dir / "product_variations.json")


def transaction_repository() -> JsonTransactionRepository:
    return JsonTransactionRepository(get_settings().data_dir / "inventory_transactions.json")


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(get_settings().data_dir / "orders.json")


def inventory_service() -> InventoryService:
    return InventoryService(
        product_repo=product_repository(),
        variation_repo=variation_repository(),
        transaction_repo=transaction_repository(),
    )


def order_notifier() -> LogNotifier:
    return LogNotifier()
