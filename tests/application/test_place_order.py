"""Integration tests for the PlaceOrder use case.

Uses in-memory fake repositories, no file I/O.
"""

import pytest

from ims.application.dto import OrderItemSpec
from ims.application.place_order import GENERIC_FAILURE_MESSAGE, PlaceOrderHandler
from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.order import OrderStatus
from ims.domain.model.product import Product
from ims.domain.model.value_objects import Address, Money
from ims.domain.model.variation import ProductVariation
from ims.domain.service.inventory_service import InventoryService
from ims.domain.service.locks import KeyedLock
from tests.fakes import (
    FailingNotifier,
    FailingVariationRepository,
    FakeOrderRepository,
    FakeProductRepository,
    FakeTransactionRepository,
    RecordingNotifier,
    UndeletableOrderRepository,
)

ADDRESS = Address(line1="1 Main St", city="Springfield", postal_code="12345", country="US")


def _setup(order_repo=None, notifier=None, fail_on=None):
    """Build handler with fake repos pre-loaded with a small catalog."""
    product_repo = FakeProductRepository([
        Product(id="1", name="T-Shirt", price=Money.of("15.00")),
        Product(id="2", name="Mug", price=Money.of("8.00"), units=5, available_units=5),
    ])
    variation_repo = FailingVariationRepository(
        [
            ProductVariation(id="1-1", product_id="1", variation_value="Red / M", stock_quantity=10),
            ProductVariation(id="1-2", product_id="1", variation_value="Blue / M", stock_quantity=1),
            ProductVariation(id="1-3", product_id="1", variation_value="Black / L", stock_quantity=6),
        ],
        fail_on=fail_on,
    )
    transaction_repo = FakeTransactionRepository()
    order_repo = order_repo or FakeOrderRepository()
    notifier = notifier or RecordingNotifier()
    inventory = InventoryService(product_repo, variation_repo, transaction_repo, locks=KeyedLock())
    handler = PlaceOrderHandler(order_repo, product_repo, variation_repo, inventory, notifier)
    return handler, order_repo, variation_repo, transaction_repo, notifier


def _place(handler, specs, **kwargs):
    return handler.handle(
        customer_id=kwargs.pop("customer_id", "cust-1"),
        item_specs=specs,
        shipping_address=kwargs.pop("shipping_address", ADDRESS),
        billing_address=kwargs.pop("billing_address", ADDRESS),
        **kwargs,
    )


class TestPlaceOrderHappyPath:

    def test_places_order_and_deducts_stock(self):
        handler, order_repo, variation_repo, transaction_repo, notifier = _setup()

        result = _place(handler, [OrderItemSpec("1", 3, variation_id="1-1"), OrderItemSpec("2", 2)])

        assert result.completed
        assert result.status_code == 201
        assert result.order.id == "ORD-000001"
        assert result.order.status == "pending"
        assert result.order.payment_status == "unpaid"
        assert variation_repo.get_by_id("1-1").stock_quantity == 7
        assert [e.order_id for e in transaction_repo.entries] == ["ORD-000001"] * 2
        assert notifier.sent == ["ORD-000001"]
        assert order_repo.get_by_id("ORD-000001").status == OrderStatus.PENDING

    def test_snapshots_names_and_prices(self):
        handler, _, _, _, _ = _setup()

        result = _place(
            handler,
            [OrderItemSpec("1", 2, variation_id="1-1")],
            shipping_cost="4.00",
            tax_amount="3.00",
        )

        [item] = result.order.items
        assert item.product_name == "T-Shirt (Red / M)"
        assert item.unit_price == "$15.00"
        assert result.order.subtotal == "$30.00"
        assert result.order.total == "$37.00"

    def test_notification_failure_does_not_fail_order(self):
        handler, order_repo, _, _, _ = _setup(notifier=FailingNotifier())

        result = _place(handler, [OrderItemSpec("2", 1)])

        assert result.completed
        assert order_repo.count() == 1


class TestPlaceOrderShortfall:

    def test_insufficient_stock_creates_nothing(self):
        handler, order_repo, variation_repo, transaction_repo, notifier = _setup()

        result = _place(handler, [OrderItemSpec("1", 2, variation_id="1-2")])

        assert not result.completed
        assert result.status_code == 400
        [item] = result.unavailable_items
        assert (item.requested, item.available) == (2, 1)
        assert order_repo.count() == 0
        assert variation_repo.get_by_id("1-2").stock_quantity == 1
        assert transaction_repo.entries == []
        assert notifier.sent == []


class TestPlaceOrderCompensation:

    def test_failed_reservation_deletes_order_but_keeps_first_deduction(self):
        handler, order_repo, variation_repo, _, notifier = _setup(fail_on={"1-3"})

        result = _place(
            handler,
            [OrderItemSpec("1", 3, variation_id="1-1"), OrderItemSpec("1", 2, variation_id="1-3")],
        )

        assert not result.completed
        assert result.status_code == 500
        assert result.error == GENERIC_FAILURE_MESSAGE
        assert not result.rollback_failed
        assert order_repo.count() == 0
        assert variation_repo.get_by_id("1-1").stock_quantity == 7
        assert variation_repo.get_by_id("1-3").stock_quantity == 6
        assert notifier.sent == []

    def test_failed_delete_is_flagged(self):
        handler, order_repo, _, _, _ = _setup(
            order_repo=UndeletableOrderRepository(), fail_on={"1-1"}
        )

        result = _place(handler, [OrderItemSpec("1", 1, variation_id="1-1")])

        assert result.status_code == 500
        assert result.rollback_failed
        assert order_repo.count() == 1


class TestPlaceOrderValidation:

    def test_no_items_rejected(self):
        handler, _, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="Order items are required"):
            _place(handler, [])

    def test_missing_address_rejected(self):
        handler, order_repo, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="Shipping address is required"):
            _place(handler, [OrderItemSpec("2", 1)], shipping_address=None)
        assert order_repo.count() == 0

    def test_non_positive_quantity_rejected(self):
        handler, _, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            _place(handler, [OrderItemSpec("2", 0)])

    def test_unknown_product_reported_as_unavailable(self):
        handler, _, _, transaction_repo, _ = _setup()
        result = _place(handler, [OrderItemSpec("9", 1)])
        assert result.status_code == 400
        assert result.unavailable_items[0].available == 0
        assert transaction_repo.entries == []

    def test_variation_of_another_product_rejected(self):
        handler, order_repo, variation_repo, _, _ = _setup()
        with pytest.raises(ValidationError, match="does not belong to product '2'"):
            _place(handler, [OrderItemSpec("2", 1, variation_id="1-1")])
        assert order_repo.count() == 0
        assert variation_repo.get_by_id("1-1").stock_quantity == 10

    def test_guest_checkout(self):
        handler, _, _, _, _ = _setup()
        result = _place(handler, [OrderItemSpec("2", 1)], customer_id=None)
        assert result.order.customer_id == "guest"


class TestPlaceOrderLookups:

    def test_variation_without_parent_product_raises(self):
        product_repo = FakeProductRepository()
        variation_repo = FailingVariationRepository(
            [ProductVariation(id="1-1", product_id="1", variation_value="Red / M", stock_quantity=10)]
        )
        order_repo = FakeOrderRepository()
        inventory = InventoryService(product_repo, variation_repo, FakeTransactionRepository())
        handler = PlaceOrderHandler(order_repo, product_repo, variation_repo, inventory, RecordingNotifier())

        with pytest.raises(EntityNotFoundError, match="Product '1' not found"):
            _place(handler, [OrderItemSpec("1", 1, variation_id="1-1")])
        assert order_repo.count() == 0
        assert variation_repo.get_by_id("1-1").stock_quantity == 10
