"""Unit tests for the InventoryService domain service."""

import pytest

from ims.domain.exceptions import (
    StockAdjustmentError,
    StockReservationError,
    ValidationError,
)
from ims.domain.model.order import OrderLineItem
from ims.domain.model.product import Product
from ims.domain.model.stock import CartItem, LowStockStatus, StockUpdate
from ims.domain.model.transaction import TransactionType
from ims.domain.model.value_objects import Money, Quantity
from ims.domain.model.variation import ProductVariation
from ims.domain.service.inventory_service import InventoryService
from ims.domain.service.locks import KeyedLock
from tests.fakes import (
    FailingVariationRepository,
    FakeProductRepository,
    FakeTransactionRepository,
    FakeVariationRepository,
)


def _setup(fail_on: set[str] | None = None):
    products = [
        Product(id="1", name="T-Shirt", price=Money.of("15.00")),
        Product(id="2", name="Mug", price=Money.of("8.00"), units=10, available_units=10),
        Product(id="3", name="Poster", price=Money.of("5.00"), units=3, min_order_quantity=4),
    ]
    variations = [
        ProductVariation(id="1-1", product_id="1", variation_value="Red / M", stock_quantity=10),
        ProductVariation(id="1-2", product_id="1", variation_value="Blue / M", stock_quantity=1),
        ProductVariation(id="1-3", product_id="1", variation_value="Black / L", stock_quantity=30),
    ]
    product_repo = FakeProductRepository(products)
    if fail_on:
        variation_repo = FailingVariationRepository(variations, fail_on=fail_on)
    else:
        variation_repo = FakeVariationRepository(variations)
    transaction_repo = FakeTransactionRepository()
    service = InventoryService(product_repo, variation_repo, transaction_repo, locks=KeyedLock())
    return service, product_repo, variation_repo, transaction_repo


def _line(product_id: str, qty: int, variation_id: str | None = None) -> OrderLineItem:
    return OrderLineItem(
        product_id=product_id,
        variation_id=variation_id,
        product_name="Item",
        quantity=Quantity(qty),
        unit_price=Money.of("1.00"),
    )


class TestCheckStockAvailability:

    def test_all_available(self):
        service, _, _, _ = _setup()
        result = service.check_stock_availability(
            [CartItem("1", 3, variation_id="1-1"), CartItem("2", 10)]
        )
        assert result.available
        assert result.unavailable_items == []

    def test_shortfall_reported_and_nothing_mutated(self):
        service, _, variation_repo, transaction_repo = _setup()

        result = service.check_stock_availability([CartItem("1", 2, variation_id="1-2")])

        assert not result.available
        [item] = result.unavailable_items
        assert (item.requested, item.available) == (2, 1)
        assert item.name == "T-Shirt (Blue / M)"
        assert variation_repo.get_by_id("1-2").stock_quantity == 1
        assert transaction_repo.entries == []

    def test_unknown_items_have_zero_stock(self):
        service, _, _, _ = _setup()

        result = service.check_stock_availability(
            [CartItem("9", 1, name="Ghost"), CartItem("1", 1, variation_id="9-9")]
        )

        assert [(i.available, i.name) for i in result.unavailable_items] == [
            (0, "Ghost"),
            (0, "Unknown Product"),
        ]

    def test_repeated_checks_agree(self):
        service, _, _, _ = _setup()
        cart = [CartItem("1", 5, variation_id="1-1"), CartItem("3", 4)]
        assert service.check_stock_availability(cart) == service.check_stock_availability(cart)


class TestReserveAndRelease:

    def test_reserve_writes_sale_entries(self):
        service, _, variation_repo, transaction_repo = _setup()

        service.reserve_stock("ORD-000001", [_line("1", 3, "1-1"), _line("2", 2)], actor="cust-1")

        assert variation_repo.get_by_id("1-1").stock_quantity == 7
        assert [e.transaction_type for e in transaction_repo.entries] == [TransactionType.SALE] * 2
        assert transaction_repo.entries[0].notes == "Stock reserved for order ORD-000001"
        assert transaction_repo.entries[0].created_by == "cust-1"
        assert transaction_repo.entries[1].quantity_change == -2

    def test_release_is_inverse_of_reserve(self):
        service, product_repo, variation_repo, transaction_repo = _setup()
        items = [_line("1", 4, "1-1"), _line("2", 3)]

        service.reserve_stock("ORD-000001", items)
        service.release_stock("ORD-000001", items)

        assert variation_repo.get_by_id("1-1").stock_quantity == 10
        mug = product_repo.get_by_id("2")
        assert mug.units == 10
        assert mug.reserved_units == 0
        returns = [e for e in transaction_repo.entries if e.transaction_type is TransactionType.RETURN]
        assert [e.quantity_change for e in returns] == [4, 3]
        assert returns[0].notes == "Stock released from cancelled order ORD-000001"

    def test_failure_keeps_earlier_items(self):
        service, _, variation_repo, _ = _setup(fail_on={"1-3"})

        with pytest.raises(StockReservationError, match="Failed to reserve stock for order ORD-000001"):
            service.reserve_stock("ORD-000001", [_line("1", 3, "1-1"), _line("1", 2, "1-3")])

        assert variation_repo.get_by_id("1-1").stock_quantity == 7
        assert variation_repo.get_by_id("1-3").stock_quantity == 30

    def test_unknown_item_fails_release(self):
        service, _, _, _ = _setup()
        with pytest.raises(StockReservationError, match="Failed to release stock"):
            service.release_stock("ORD-000001", [_line("1", 1, "9-9")])

    def test_repeated_release_skips_items_already_returned(self):
        service, product_repo, variation_repo, transaction_repo = _setup()
        items = [_line("1", 4, "1-1"), _line("2", 1), _line("2", 1)]
        service.reserve_stock("ORD-000001", items)
        service.release_stock("ORD-000001", items[:2])

        movements = service.release_stock("ORD-000001", items)

        assert [m.quantity_change for m in movements] == [1]
        assert variation_repo.get_by_id("1-1").stock_quantity == 10
        assert product_repo.get_by_id("2").units == 10
        returns = [e for e in transaction_repo.entries if e.transaction_type is TransactionType.RETURN]
        assert len(returns) == 3

    def test_returns_for_other_orders_do_not_count(self):
        service, _, variation_repo, _ = _setup()
        service.reserve_stock("ORD-000001", [_line("1", 2, "1-1")])
        service.reserve_stock("ORD-000002", [_line("1", 2, "1-1")])
        service.release_stock("ORD-000001", [_line("1", 2, "1-1")])

        service.release_stock("ORD-000002", [_line("1", 2, "1-1")])

        assert variation_repo.get_by_id("1-1").stock_quantity == 10


class TestAdjustAndRestock:

    def test_adjust_uses_reason_as_note(self):
        service, _, _, transaction_repo = _setup()

        movement = service.adjust_stock("2", None, -3, "Damaged in storage", "admin")

        assert movement.new_quantity == 7
        [entry] = transaction_repo.entries
        assert entry.transaction_type is TransactionType.ADJUSTMENT
        assert entry.notes == "Damaged in storage"
        assert entry.created_by == "admin"

    def test_adjust_unknown_variation_wrapped(self):
        service, _, _, _ = _setup()
        with pytest.raises(StockAdjustmentError, match="Failed to adjust stock"):
            service.adjust_stock("1", "9-9", 1, "Found one", "admin")

    def test_adjust_product_with_variations_keeps_derived_aggregate(self):
        service, product_repo, _, _ = _setup()

        movement = service.adjust_stock("1", None, 3, "Recount", "admin")

        assert (movement.previous_quantity, movement.new_quantity) == (0, 3)
        shirt = product_repo.get_by_id("1")
        assert shirt.units == 3
        assert shirt.available_units == 41

    def test_adjust_variation_of_another_product_rejected(self):
        service, _, variation_repo, transaction_repo = _setup()

        with pytest.raises(StockAdjustmentError, match="does not belong to product '2'"):
            service.adjust_stock("2", "1-1", -5, "Damaged", "admin")

        assert variation_repo.get_by_id("1-1").stock_quantity == 10
        assert transaction_repo.entries == []

    def test_restock(self):
        service, product_repo, variation_repo, transaction_repo = _setup()

        service.restock_stock("1", "1-2", 24, actor="warehouse")

        assert variation_repo.get_by_id("1-2").stock_quantity == 25
        assert product_repo.get_by_id("1").last_restocked_at is not None
        [entry] = transaction_repo.entries
        assert entry.transaction_type is TransactionType.RESTOCK
        assert entry.notes == "Restock"

    def test_restock_must_be_positive(self):
        service, _, _, _ = _setup()
        with pytest.raises(ValidationError, match="must be positive"):
            service.restock_stock("2", None, 0)


class TestBulkUpdate:

    def test_partial_failure(self):
        service, _, variation_repo, transaction_repo = _setup()

        result = service.bulk_update_stock(
            [
                StockUpdate("1-1", 5),
                StockUpdate("missing-variation", 3),
                StockUpdate("1-2", -1, reason="Miscount"),
            ],
            actor="admin",
        )

        assert (result.success, result.failed) == (2, 1)
        [error] = result.errors
        assert error.startswith("Failed to update missing-variation:")
        assert variation_repo.get_by_id("1-1").stock_quantity == 15
        assert variation_repo.get_by_id("1-2").stock_quantity == 0
        assert [e.notes for e in transaction_repo.entries] == ["Bulk update", "Miscount"]

    def test_save_failure_counts_as_failed(self):
        service, _, variation_repo, _ = _setup(fail_on={"1-1"})

        result = service.bulk_update_stock([StockUpdate("1-1", 5), StockUpdate("1-3", 5)])

        assert (result.success, result.failed) == (1, 1)
        assert variation_repo.get_by_id("1-3").stock_quantity == 35


class TestLowStock:

    def test_flags_sorted_ascending(self):
        service, _, _, _ = _setup()

        flagged = service.get_low_stock_products(threshold=10)

        assert [(p.id, p.current_stock, p.status) for p in flagged] == [
            ("1", 0, LowStockStatus.OUT),
            ("1-2", 1, LowStockStatus.CRITICAL),
            ("3", 3, LowStockStatus.CRITICAL),
            ("2", 10, LowStockStatus.LOW),
            ("1-1", 10, LowStockStatus.LOW),
        ]

    def test_variation_entries_carry_display_name(self):
        service, _, _, _ = _setup()
        flagged = {p.id: p for p in service.get_low_stock_products(threshold=2)}
        assert flagged["1-2"].name == "T-Shirt (Blue / M)"
        assert flagged["1-2"].product_id == "1"

    def test_min_order_quantity_raises_product_threshold(self):
        service, _, _, _ = _setup()
        flagged = {p.id: p for p in service.get_low_stock_products(threshold=2)}
        assert flagged["3"].threshold == 4
        assert "2" not in flagged


class TestHistory:

    def test_history_after_mutations(self):
        service, _, _, _ = _setup()
        service.restock_stock("2", None, 5)
        service.adjust_stock("2", None, -1, "Broken", "admin")

        history = service.get_inventory_history("2")

        assert [e.transaction_type for e in history] == [
            TransactionType.ADJUSTMENT,
            TransactionType.RESTOCK,
        ]
        assert history[0].new_quantity == 14
