"""Unit tests for the Order aggregate and its business rules."""

import pytest

from ims.domain.exceptions import ValidationError
from ims.domain.model.order import Order, OrderLineItem, OrderStatus, PaymentStatus
from ims.domain.model.value_objects import Address, Money, Quantity

ADDRESS = Address(line1="1 Main St", city="Springfield", postal_code="12345", country="US")


def _make_item(name: str = "T-Shirt", qty: int = 1, price: str = "15.00") -> OrderLineItem:
    """Helper to build a valid line item."""
    return OrderLineItem(
        product_id="1",
        product_name=name,
        quantity=Quantity(qty),
        unit_price=Money.of(price),
    )


def _create(items=None, **kwargs) -> Order:
    return Order.create(
        customer_id=kwargs.pop("customer_id", "cust-1"),
        items=[_make_item()] if items is None else items,
        shipping_address=kwargs.pop("shipping_address", ADDRESS),
        billing_address=kwargs.pop("billing_address", ADDRESS),
        **kwargs,
    )


class TestOrderCreation:

    def test_happy_path(self):
        order = _create([_make_item(qty=2, price="10.00")])
        assert order.customer_id == "cust-1"
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.UNPAID
        assert order.subtotal == Money.of("20.00")

    def test_id_is_none_for_new_orders(self):
        assert _create().id is None  # assigned by repository

    def test_missing_customer_becomes_guest(self):
        assert _create(customer_id=None).customer_id == "guest"
        assert _create(customer_id="  ").customer_id == "guest"

    def test_total_includes_shipping_tax_and_discount(self):
        order = _create(
            [_make_item(qty=3, price="15.00"), _make_item("Hoodie", qty=1, price="40.00")],
            shipping_cost=Money.of("5.00"),
            tax_amount=Money.of("8.50"),
            discount_amount=Money.of("10.00"),
        )
        assert order.subtotal == Money.of("85.00")
        assert order.total == Money.of("88.50")


class TestOrderValidation:

    def test_no_items_rejected(self):
        with pytest.raises(ValidationError, match="Order items are required"):
            _create([])

    def test_missing_shipping_address_rejected(self):
        with pytest.raises(ValidationError, match="Shipping address is required"):
            _create(shipping_address=None)

    def test_missing_billing_address_rejected(self):
        with pytest.raises(ValidationError, match="Billing address is required"):
            _create(billing_address=None)

    def test_discount_larger_than_order_rejected(self):
        with pytest.raises(ValidationError, match="exceeds order amount"):
            _create(discount_amount=Money.of("100.00"))


class TestOrderCancel:

    def test_cancel_pending_order(self):
        order = _create()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED

    def test_cancel_twice_rejected(self):
        order = _create()
        order.cancel()
        with pytest.raises(ValidationError, match="already cancelled"):
            order.cancel()
