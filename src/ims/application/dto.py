"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ims.domain.model.order import Order
from ims.domain.model.stock import UnavailableItem


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for."""

    product_id: str
    quantity: int
    variation_id: str | None = None


@dataclass(frozen=True)
class OrderLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    variation_id: str | None
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "$15.00"
    line_total: str


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order as displayed to the user."""

    id: str
    customer_id: str
    status: str
    payment_status: str
    items: list[OrderLineItemDTO]
    subtotal: str
    total: str
    shipping_address: str
    billing_address: str
    created_at: str

    @staticmethod
    def from_order(order: Order) -> OrderDTO:
        return OrderDTO(
            id=order.id,  # type: ignore[arg-type]
            customer_id=order.customer_id,
            status=order.status.value,
            payment_status=order.payment_status.value,
            items=[
                OrderLineItemDTO(
                    product_id=item.product_id,
                    variation_id=item.variation_id,
                    product_name=item.product_name,
                    quantity=item.quantity.value,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                )
                for item in order.items
            ],
            subtotal=str(order.subtotal),
            total=str(order.total),
            shipping_address=str(order.shipping_address),
            billing_address=str(order.billing_address),
            created_at=order.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        )


@dataclass(frozen=True)
class PlaceOrderResult:
    """Output of an order placement.

    ``status_code`` follows the HTTP contract of the storefront:
    201 for a placed order, 400 for a stock shortfall, 500 when stock
    could not be reserved and the order was rolled back.
    """

    completed: bool
    status_code: int
    order: OrderDTO | None = None
    error: str | None = None
    unavailable_items: list[UnavailableItem] = field(default_factory=list)
    rollback_failed: bool = False
