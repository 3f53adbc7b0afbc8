"""Application service: Cancel Order use case.

Returns the order's stock (``return`` ledger entries) before marking the
order cancelled.  A failure part-way through the release leaves the
order pending so the cancellation can be retried; the retry only returns
the items the first attempt did not.
"""

from __future__ import annotations

from ims.application.dto import OrderDTO
from ims.domain.exceptions import EntityNotFoundError, ValidationError
from ims.domain.model.order import OrderStatus
from ims.domain.repository.order_repository import OrderRepository
from ims.domain.service.inventory_service import InventoryService


class CancelOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        inventory: InventoryService,
    ) -> None:
        self._order_repo = order_repo
        self._inventory = inventory

    def handle(self, order_id: str, actor: str | None = None) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        # Checked up front so a repeated cancel never returns stock twice.
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("Order is already cancelled")

        self._inventory.release_stock(order_id, order.items, actor=actor)

        order.cancel()
        self._order_repo.save(order)
        return OrderDTO.from_order(order)
