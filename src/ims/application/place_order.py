"""Application service: Place Order use case.

Orchestrates the inventory service and the Order aggregate:

1. Validate line items and addresses (raises ValidationError).
2. Check availability.  A shortfall rejects the order before anything
   is written.
3. Persist the order (pending, unpaid).
4. Reserve stock for it.
5. If reservation fails, delete the order again.  Stock already deducted
   for earlier line items is *not* returned.
6. Send a confirmation.  A failed notification does not undo the order.
"""

from __future__ import annotations

import structlog

from ims.application.dto import OrderDTO, OrderItemSpec, PlaceOrderResult
from ims.application.notifier import OrderNotifier
from ims.domain.exceptions import (
    EntityNotFoundError,
    StockReservationError,
    ValidationError,
)
from ims.domain.model.order import Order, OrderLineItem
from ims.domain.model.stock import CartItem
from ims.domain.model.value_objects import Address, Money, Quantity
from ims.domain.repository.order_repository import OrderRepository
from ims.domain.repository.product_repository import ProductRepository
from ims.domain.repository.variation_repository import VariationRepository
from ims.domain.service.inventory_service import InventoryService

logger = structlog.get_logger(__name__)

SHORTFALL_MESSAGE = "Some items are no longer available in the requested quantity"
GENERIC_FAILURE_MESSAGE = "Order could not be completed, please try again."


class PlaceOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        variation_repo: VariationRepository,
        inventory: InventoryService,
        notifier: OrderNotifier,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._variation_repo = variation_repo
        self._inventory = inventory
        self._notifier = notifier

    def handle(
        self,
        customer_id: str | None,
        item_specs: list[OrderItemSpec],
        shipping_address: Address | None,
        billing_address: Address | None,
        payment_method: str = "",
        customer_note: str = "",
        shipping_cost: str = "0",
        tax_amount: str = "0",
        discount_amount: str = "0",
        actor: str | None = None,
    ) -> PlaceOrderResult:
        # Step 1: boundary validation
        if not item_specs:
            raise ValidationError("Order items are required")
        if shipping_address is None:
            raise ValidationError("Shipping address is required")
        if billing_address is None:
            raise ValidationError("Billing address is required")
        for spec in item_specs:
            Quantity(spec.quantity)

        # Step 2: availability (read-only)
        check = self._inventory.check_stock_availability(
            [
                CartItem(
                    product_id=spec.product_id,
                    variation_id=spec.variation_id,
                    quantity=spec.quantity,
                )
                for spec in item_specs
            ]
        )
        if not check.available:
            logger.info(
                "Order rejected: insufficient stock",
                customer_id=customer_id,
                unavailable=len(check.unavailable_items),
            )
            return PlaceOrderResult(
                completed=False,
                status_code=400,
                error=SHORTFALL_MESSAGE,
                unavailable_items=check.unavailable_items,
            )

        # Step 3: persist the order
        order = Order.create(
            customer_id=customer_id,
            items=[self._line_item(spec) for spec in item_specs],
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
            customer_note=customer_note,
            shipping_cost=Money.of(shipping_cost),
            tax_amount=Money.of(tax_amount),
            discount_amount=Money.of(discount_amount),
        )
        self._order_repo.save(order)
        logger.info("Order created", order_id=order.id, customer_id=order.customer_id)

        # Step 4: reserve stock, or compensate by deleting the order
        try:
            self._inventory.reserve_stock(order.id, order.items, actor=actor)  # type: ignore[arg-type]
        except StockReservationError as exc:
            logger.error("Stock reservation failed; rolling back order", order_id=order.id, error=str(exc))
            return self._roll_back(order)

        # Step 5: best-effort confirmation
        try:
            self._notifier.order_placed(order)
        except Exception as exc:
            logger.warning("Order confirmation not sent", order_id=order.id, error=str(exc))

        return PlaceOrderResult(
            completed=True,
            status_code=201,
            order=OrderDTO.from_order(order),
        )

    # --- Internal helpers -----------------------------------------------------

    def _roll_back(self, order: Order) -> PlaceOrderResult:
        rollback_failed = False
        try:
            self._order_repo.delete(order.id)  # type: ignore[arg-type]
        except Exception as exc:
            # The order now exists without a full stock deduction.
            rollback_failed = True
            logger.error(
                "Failed to delete order after reservation failure",
                order_id=order.id,
                error=str(exc),
            )
        return PlaceOrderResult(
            completed=False,
            status_code=500,
            error=GENERIC_FAILURE_MESSAGE,
            rollback_failed=rollback_failed,
        )

    def _line_item(self, spec: OrderItemSpec) -> OrderLineItem:
        """Resolve names and snapshot the current price."""
        product = self._product_repo.get_by_id(spec.product_id)
        if product is None:
            raise EntityNotFoundError(f"Product '{spec.product_id}' not found")

        name = product.name
        if spec.variation_id:
            variation = self._variation_repo.get_by_id(spec.variation_id)
            if variation is None:
                raise EntityNotFoundError(f"Variation '{spec.variation_id}' not found")
            if variation.product_id != product.id:
                raise ValidationError(
                    f"Variation '{spec.variation_id}' does not belong to product '{product.id}'"
                )
            name = variation.display_name(product.name)

        return OrderLineItem(
            product_id=product.id,
            variation_id=spec.variation_id,
            product_name=name,
            quantity=Quantity(spec.quantity),
            unit_price=product.price,  # <-- price snapshot
        )
