"""Abstract repository for the append-only inventory ledger."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ims.domain.model.transaction import InventoryTransaction


class TransactionRepository(ABC):

    @abstractmethod
    def add(self, transaction: InventoryTransaction) -> None:
        """Append a ledger entry.  Entries are never updated or removed."""

    @abstractmethod
    def list_for_product(
        self,
        product_id: str,
        variation_id: str | None = None,
        limit: int = 50,
    ) -> list[InventoryTransaction]:
        """Return entries for a product, newest first.

        When ``variation_id`` is given only that variation's entries are
        returned.
        """

    @abstractmethod
    def list_for_order(self, order_id: str) -> list[InventoryTransaction]:
        """Return every entry written on behalf of an order, oldest first."""
