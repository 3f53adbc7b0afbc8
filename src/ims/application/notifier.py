"""Port for order notifications (confirmation emails and the like)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.order import Order


class OrderNotifier(ABC):

    @abstractmethod
    def order_placed(self, order: Order) -> None:
        """Tell the customer their order went through."""
