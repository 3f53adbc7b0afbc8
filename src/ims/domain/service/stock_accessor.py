"""Domain service: Stock Accessor.

Applies one signed quantity delta to one stock-bearing entity (a
variation, or a product without variations) and keeps the parent
product's aggregates in line with it.

Each call performs up to three independent writes (the target, the
parent product and a ledger entry) with no transaction around them.
Within one process, every read-modify-write for a product and its
variations runs under a lock keyed by the product id, so concurrent
deltas against the same product cannot lose each other's updates.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.product import Product
from ims.domain.model.stock import StockMovement, StockTarget
from ims.domain.model.transaction import TransactionType
from ims.domain.model.variation import ProductVariation
from ims.domain.repository.product_repository import ProductRepository
from ims.domain.repository.variation_repository import VariationRepository
from ims.domain.service.locks import KeyedLock
from ims.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)

# Shared by every accessor in the process unless one is injected.
_PRODUCT_LOCKS = KeyedLock()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StockAccessor:

    def __init__(
        self,
        product_repo: ProductRepository,
        variation_repo: VariationRepository,
        ledger: StockLedger,
        locks: KeyedLock | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._product_repo = product_repo
        self._variation_repo = variation_repo
        self._ledger = ledger
        self._locks = locks or _PRODUCT_LOCKS
        self._clock = clock

    # --- Reads ----------------------------------------------------------------

    def get_product(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{product_id}' not found")
        return product

    def get_variation(self, variation_id: str) -> ProductVariation:
        variation = self._variation_repo.get_by_id(variation_id)
        if variation is None:
            raise EntityNotFoundError(f"Variation '{variation_id}' not found")
        return variation

    # --- Writes ---------------------------------------------------------------

    def apply_delta(
        self,
        target: StockTarget,
        quantity_change: int,
        transaction_type: TransactionType,
        order_id: str | None = None,
        notes: str | None = None,
        actor: str | None = None,
    ) -> StockMovement:
        """Apply ``quantity_change`` to ``target``, flooring stock at zero.

        Raises EntityNotFoundError if the target does not resolve, and
        ValidationError if a variation target names a product the variation
        does not belong to.
        """
        if target.is_variation:
            # A variation never moves to another product, so the lock key
            # can be read before taking the lock.
            product_id = self.get_variation(target.variation_id).product_id
            if target.product_id and target.product_id != product_id:
                raise ValidationError(
                    f"Variation '{target.variation_id}' does not belong to "
                    f"product '{target.product_id}'"
                )
            with self._locks.hold(product_id):
                return self._apply_to_variation(
                    target.variation_id, quantity_change, transaction_type,
                    order_id, notes, actor,
                )

        with self._locks.hold(target.product_id):
            return self._apply_to_product(
                target.product_id, quantity_change, transaction_type,
                order_id, notes, actor,
            )

    def recalculate_product(self, product_id: str) -> Product:
        """Re-derive a product's available units and status from stock on hand.

        ``reserved_units`` is left untouched.
        """
        with self._locks.hold(product_id):
            product = self.get_product(product_id)
            product.available_units = self._available_units(product)
            product.refresh_status()
            self._product_repo.save(product)

        logger.info(
            "Product aggregates recalculated",
            product_id=product_id,
            available_units=product.available_units,
            stock_status=product.stock_status.value,
        )
        return product

    # --- Internal helpers -----------------------------------------------------

    def _apply_to_variation(
        self,
        variation_id: str,
        quantity_change: int,
        transaction_type: TransactionType,
        order_id: str | None,
        notes: str | None,
        actor: str | None,
    ) -> StockMovement:
        variation = self.get_variation(variation_id)
        previous, new = variation.apply_delta(quantity_change)
        self._variation_repo.save(variation)

        self._ledger.record(
            product_id=variation.product_id,
            transaction_type=transaction_type,
            quantity_change=quantity_change,
            previous_quantity=previous,
            new_quantity=new,
            variation_id=variation_id,
            order_id=order_id,
            notes=notes,
            created_by=actor,
        )

        product = self._product_repo.get_by_id(variation.product_id)
        if product is None:
            logger.warning(
                "Variation has no parent product; aggregates not updated",
                variation_id=variation_id,
                product_id=variation.product_id,
            )
        else:
            product.apply_aggregate_change(
                new_available=self._available_units(product),
                quantity_change=quantity_change,
                transaction_type=transaction_type,
                at=self._clock(),
            )
            self._product_repo.save(product)

        logger.info(
            "Variation stock updated",
            variation_id=variation_id,
            product_id=variation.product_id,
            transaction_type=transaction_type.value,
            previous=previous,
            new=new,
        )
        return StockMovement(
            product_id=variation.product_id,
            variation_id=variation_id,
            transaction_type=transaction_type,
            quantity_change=quantity_change,
            previous_quantity=previous,
            new_quantity=new,
        )

    def _apply_to_product(
        self,
        product_id: str,
        quantity_change: int,
        transaction_type: TransactionType,
        order_id: str | None,
        notes: str | None,
        actor: str | None,
    ) -> StockMovement:
        product = self.get_product(product_id)
        previous, new = product.apply_units_delta(quantity_change)
        # A product with variations keeps its variation-derived aggregate.
        product.apply_aggregate_change(
            new_available=self._available_units(product),
            quantity_change=quantity_change,
            transaction_type=transaction_type,
            at=self._clock(),
        )
        self._product_repo.save(product)

        self._ledger.record(
            product_id=product_id,
            transaction_type=transaction_type,
            quantity_change=quantity_change,
            previous_quantity=previous,
            new_quantity=new,
            order_id=order_id,
            notes=notes,
            created_by=actor,
        )

        logger.info(
            "Product stock updated",
            product_id=product_id,
            transaction_type=transaction_type.value,
            previous=previous,
            new=new,
        )
        return StockMovement(
            product_id=product_id,
            variation_id=None,
            transaction_type=transaction_type,
            quantity_change=quantity_change,
            previous_quantity=previous,
            new_quantity=new,
        )

    def _available_units(self, product: Product) -> int:
        """Sum of active variation stock, or the flat stock if there are no variations."""
        variations = self._variation_repo.list_for_product(product.id)
        if not variations:
            return product.units
        return sum(v.stock_quantity for v in variations if v.is_active)
