"""Order aggregate, as far as the inventory side needs it.

The Order owns its line items.  Orders are the unit of reservation:
placing one deducts stock for every line item, cancelling one returns it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from ims.domain.exceptions import ValidationError
from ims.domain.model.value_objects import Address, Money, Quantity


class OrderStatus(Enum):
    PENDING = "pending"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


@dataclass(frozen=True)
class OrderLineItem:
    """Captures the price snapshot of a product at order-creation time."""

    product_id: str
    product_name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    variation_id: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value


# ---------------------------------------------------------------------------
# Constants for business rules
# ---------------------------------------------------------------------------
GUEST_CUSTOMER = "guest"


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: str | None
    customer_id: str
    items: list[OrderLineItem]
    shipping_address: Address
    billing_address: Address
    payment_method: str = ""
    customer_note: str = ""
    shipping_cost: Money = field(default_factory=Money.zero)
    tax_amount: Money = field(default_factory=Money.zero)
    discount_amount: Money = field(default_factory=Money.zero)
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer_id: str | None,
        items: list[OrderLineItem],
        shipping_address: Address | None,
        billing_address: Address | None,
        payment_method: str = "",
        customer_note: str = "",
        shipping_cost: Money | None = None,
        tax_amount: Money | None = None,
        discount_amount: Money | None = None,
    ) -> Order:
        """Create a new pending, unpaid order, enforcing all invariants."""
        if not items:
            raise ValidationError("Order items are required")

        if shipping_address is None:
            raise ValidationError("Shipping address is required")

        if billing_address is None:
            raise ValidationError("Billing address is required")

        order = Order(
            id=None,
            customer_id=(customer_id or "").strip() or GUEST_CUSTOMER,
            items=list(items),
            shipping_address=shipping_address,
            billing_address=billing_address,
            payment_method=payment_method,
            customer_note=customer_note,
            shipping_cost=shipping_cost or Money.zero(),
            tax_amount=tax_amount or Money.zero(),
            discount_amount=discount_amount or Money.zero(),
        )

        charged = order.subtotal + order.shipping_cost + order.tax_amount
        if charged < order.discount_amount:
            raise ValidationError(
                f"Discount {order.discount_amount} exceeds order amount {charged}"
            )

        return order

    # --- State transitions ----------------------------------------------------

    def cancel(self) -> None:
        """Transition PENDING -> CANCELLED.

        Stock release must happen *before* calling this (coordinated by
        the application handler via the inventory service).
        """
        if self.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")
        self.status = OrderStatus.CANCELLED

    # --- Computed properties --------------------------------------------------

    @property
    def subtotal(self) -> Money:
        result = Money.zero()
        for item in self.items:
            result = result + item.line_total
        return result

    @property
    def total(self) -> Money:
        return self.subtotal + self.shipping_cost + self.tax_amount - self.discount_amount
