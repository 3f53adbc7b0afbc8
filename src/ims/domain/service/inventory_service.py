"""Domain service: Inventory.

Availability checks, order reservation and release, manual adjustments,
restocks, bulk updates, low-stock scans and ledger history.  Every
mutation goes through the StockAccessor, which writes the ledger.

Order line items are processed one at a time.  There is no all-or-nothing
guarantee across items: when item N fails, items 1..N-1 stay applied and
the caller decides how to compensate.
"""

from __future__ import annotations

from collections import Counter

import structlog

from ims.domain.exceptions import (
    StockAdjustmentError,
    StockReservationError,
    ValidationError,
)
from ims.domain.model.order import OrderLineItem
from ims.domain.model.product import Product
from ims.domain.model.stock import (
    BulkUpdateResult,
    CartItem,
    LowStockProduct,
    StockCheckResult,
    StockMovement,
    StockTarget,
    StockUpdate,
    UnavailableItem,
    classify_low_stock,
)
from ims.domain.model.transaction import InventoryTransaction, TransactionType
from ims.domain.repository.product_repository import ProductRepository
from ims.domain.repository.transaction_repository import TransactionRepository
from ims.domain.repository.variation_repository import VariationRepository
from ims.domain.service.locks import KeyedLock
from ims.domain.service.stock_accessor import StockAccessor
from ims.domain.service.stock_ledger import StockLedger

logger = structlog.get_logger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10
UNKNOWN_PRODUCT_NAME = "Unknown Product"


class InventoryService:

    def __init__(
        self,
        product_repo: ProductRepository,
        variation_repo: VariationRepository,
        transaction_repo: TransactionRepository,
        locks: KeyedLock | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._variation_repo = variation_repo
        self._ledger = StockLedger(transaction_repo)
        self._accessor = StockAccessor(
            product_repo, variation_repo, self._ledger, locks=locks
        )

    # --- Availability ---------------------------------------------------------

    def check_stock_availability(self, items: list[CartItem]) -> StockCheckResult:
        """Check every cart item against current stock.  Read-only.

        Items whose product or variation cannot be found count as having
        zero stock.  The answer is only good until the next reservation;
        nothing is held.
        """
        unavailable: list[UnavailableItem] = []

        for item in items:
            current_stock, name = self._current_stock(item)
            if current_stock < item.quantity:
                unavailable.append(
                    UnavailableItem(
                        product_id=item.product_id,
                        variation_id=item.variation_id,
                        requested=item.quantity,
                        available=current_stock,
                        name=name,
                    )
                )

        return StockCheckResult(available=not unavailable, unavailable_items=unavailable)

    # --- Order reservation / release ------------------------------------------

    def reserve_stock(
        self,
        order_id: str,
        items: list[OrderLineItem],
        actor: str | None = None,
    ) -> list[StockMovement]:
        """Deduct stock for each line item of an order (``sale`` entries).

        Raises StockReservationError on the first failing item; earlier
        items are not rolled back.
        """
        logger.info("Reserving stock", order_id=order_id, items=len(items))
        movements = self._apply_order_items(
            order_id,
            items,
            sign=-1,
            transaction_type=TransactionType.SALE,
            notes=f"Stock reserved for order {order_id}",
            actor=actor,
        )
        logger.info("Stock reserved", order_id=order_id)
        return movements

    def release_stock(
        self,
        order_id: str,
        items: list[OrderLineItem],
        actor: str | None = None,
    ) -> list[StockMovement]:
        """Return stock for each line item of an order (``return`` entries).

        Line items that already have a ``return`` entry for this order are
        skipped, so retrying a release that failed part-way never returns
        the same stock twice.  An item whose ledger write was lost is not
        recognised and would be returned again.
        """
        pending = self._unreleased_items(order_id, items)
        logger.info(
            "Releasing stock",
            order_id=order_id,
            items=len(pending),
            already_released=len(items) - len(pending),
        )
        movements = self._apply_order_items(
            order_id,
            pending,
            sign=1,
            transaction_type=TransactionType.RETURN,
            notes=f"Stock released from cancelled order {order_id}",
            actor=actor,
        )
        logger.info("Stock released", order_id=order_id)
        return movements

    # --- Manual changes -------------------------------------------------------

    def adjust_stock(
        self,
        product_id: str,
        variation_id: str | None,
        quantity_change: int,
        reason: str,
        actor: str | None = None,
    ) -> StockMovement:
        """Apply a manual correction.  ``reason`` is kept as the ledger note."""
        logger.info(
            "Adjusting stock",
            product_id=product_id,
            variation_id=variation_id,
            quantity_change=quantity_change,
            reason=reason,
        )
        try:
            return self._accessor.apply_delta(
                self._target(product_id, variation_id),
                quantity_change,
                TransactionType.ADJUSTMENT,
                notes=reason,
                actor=actor,
            )
        except Exception as exc:
            logger.error(
                "Stock adjustment failed",
                product_id=product_id,
                variation_id=variation_id,
                error=str(exc),
            )
            raise StockAdjustmentError(f"Failed to adjust stock: {exc}") from exc

    def restock_stock(
        self,
        product_id: str,
        variation_id: str | None,
        quantity: int,
        notes: str | None = None,
        actor: str | None = None,
    ) -> StockMovement:
        """Receive new stock.  Stamps the product's ``last_restocked_at``."""
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        return self._accessor.apply_delta(
            self._target(product_id, variation_id),
            quantity,
            TransactionType.RESTOCK,
            notes=notes or "Restock",
            actor=actor,
        )

    def bulk_update_stock(
        self,
        updates: list[StockUpdate],
        actor: str | None = None,
    ) -> BulkUpdateResult:
        """Adjust many variations; one failing entry never stops the rest."""
        success = 0
        errors: list[str] = []

        logger.info("Bulk updating stock", entries=len(updates))

        for update in updates:
            try:
                variation = self._accessor.get_variation(update.variation_id)
                self.adjust_stock(
                    variation.product_id,
                    update.variation_id,
                    update.quantity,
                    update.reason or "Bulk update",
                    actor,
                )
                success += 1
            except Exception as exc:
                message = f"Failed to update {update.variation_id}: {exc}"
                errors.append(message)
                logger.error("Bulk update entry failed", variation_id=update.variation_id, error=str(exc))

        result = BulkUpdateResult(success=success, failed=len(errors), errors=errors)
        logger.info("Bulk update complete", success=result.success, failed=result.failed)
        return result

    def recalculate_product(self, product_id: str) -> Product:
        return self._accessor.recalculate_product(product_id)

    # --- Queries --------------------------------------------------------------

    def get_low_stock_products(
        self, threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    ) -> list[LowStockProduct]:
        """Every active product and variation at or below its threshold, lowest first.

        Products are judged by their flat ``units`` against
        ``max(threshold, min_order_quantity)``; variations by their own
        stock against ``threshold``.  This is a full scan.
        """
        flagged: list[LowStockProduct] = []

        for product in self._product_repo.list_active():
            limit = max(threshold, product.min_order_quantity)
            if product.units <= limit:
                flagged.append(
                    LowStockProduct(
                        id=product.id,
                        name=product.name,
                        current_stock=product.units,
                        threshold=limit,
                        status=classify_low_stock(product.units, limit),
                        product_id=product.id,
                    )
                )

        names: dict[str, str] = {}
        for variation in self._variation_repo.list_active():
            if variation.stock_quantity > threshold:
                continue
            if variation.product_id not in names:
                parent = self._product_repo.get_by_id(variation.product_id)
                names[variation.product_id] = parent.name if parent else UNKNOWN_PRODUCT_NAME
            flagged.append(
                LowStockProduct(
                    id=variation.id,
                    name=variation.display_name(names[variation.product_id]),
                    current_stock=variation.stock_quantity,
                    threshold=threshold,
                    status=classify_low_stock(variation.stock_quantity, threshold),
                    product_id=variation.product_id,
                    variation_id=variation.id,
                )
            )

        return sorted(flagged, key=lambda p: p.current_stock)

    def get_inventory_history(
        self,
        product_id: str,
        variation_id: str | None = None,
        limit: int = 50,
    ) -> list[InventoryTransaction]:
        return self._ledger.history(product_id, variation_id=variation_id, limit=limit)

    # --- Internal helpers -----------------------------------------------------

    def _apply_order_items(
        self,
        order_id: str,
        items: list[OrderLineItem],
        sign: int,
        transaction_type: TransactionType,
        notes: str,
        actor: str | None,
    ) -> list[StockMovement]:
        movements: list[StockMovement] = []
        for item in items:
            try:
                movements.append(
                    self._accessor.apply_delta(
                        self._target(item.product_id, item.variation_id),
                        sign * item.quantity.value,
                        transaction_type,
                        order_id=order_id,
                        notes=notes,
                        actor=actor,
                    )
                )
            except Exception as exc:
                logger.error(
                    "Stock update failed for order item",
                    order_id=order_id,
                    product_id=item.product_id,
                    variation_id=item.variation_id,
                    applied=len(movements),
                    error=str(exc),
                )
                action = "reserve" if transaction_type is TransactionType.SALE else "release"
                raise StockReservationError(
                    f"Failed to {action} stock for order {order_id}: {exc}"
                ) from exc
        return movements

    def _unreleased_items(
        self, order_id: str, items: list[OrderLineItem]
    ) -> list[OrderLineItem]:
        released = Counter(
            (e.product_id, e.variation_id, e.quantity_change)
            for e in self._ledger.for_order(order_id)
            if e.transaction_type is TransactionType.RETURN
        )
        pending: list[OrderLineItem] = []
        for item in items:
            key = (item.product_id, item.variation_id, item.quantity.value)
            if released[key]:
                released[key] -= 1
            else:
                pending.append(item)
        return pending

    def _current_stock(self, item: CartItem) -> tuple[int, str]:
        fallback_name = item.name or UNKNOWN_PRODUCT_NAME

        if item.variation_id:
            variation = self._variation_repo.get_by_id(item.variation_id)
            if variation is None:
                logger.warning("Variation not found during stock check", variation_id=item.variation_id)
                return 0, fallback_name
            product = self._product_repo.get_by_id(variation.product_id)
            product_name = product.name if product else fallback_name
            return variation.stock_quantity, variation.display_name(product_name)

        product = self._product_repo.get_by_id(item.product_id)
        if product is None:
            logger.warning("Product not found during stock check", product_id=item.product_id)
            return 0, fallback_name
        return product.units, product.name

    @staticmethod
    def _target(product_id: str, variation_id: str | None) -> StockTarget:
        if variation_id:
            return StockTarget.for_variation(variation_id, product_id=product_id)
        return StockTarget.for_product(product_id)
