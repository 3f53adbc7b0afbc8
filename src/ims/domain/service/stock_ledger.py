"""Domain service: Stock Ledger.

Writes and reads the append-only inventory transaction log.  Writing is
best-effort: the ledger is an audit trail, not the source of truth, so a
failed write is logged and the stock mutation it describes still stands.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ims.domain.model.transaction import InventoryTransaction, TransactionType
from ims.domain.repository.transaction_repository import TransactionRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HistorySummary:
    total_transactions: int
    sales: int
    returns: int
    adjustments: int
    restocks: int
    total_sold: int
    total_returned: int
    current_stock: int


class StockLedger:

    def __init__(self, transaction_repo: TransactionRepository) -> None:
        self._transaction_repo = transaction_repo

    def record(
        self,
        product_id: str,
        transaction_type: TransactionType,
        quantity_change: int,
        previous_quantity: int,
        new_quantity: int,
        variation_id: str | None = None,
        order_id: str | None = None,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> InventoryTransaction | None:
        """Append one entry.  Returns None if the write failed."""
        entry = InventoryTransaction.record(
            product_id=product_id,
            transaction_type=transaction_type,
            quantity_change=quantity_change,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            variation_id=variation_id,
            order_id=order_id,
            notes=notes,
            created_by=created_by,
        )
        try:
            self._transaction_repo.add(entry)
        except Exception:
            logger.error(
                "Failed to log inventory transaction",
                product_id=product_id,
                variation_id=variation_id,
                order_id=order_id,
                transaction_type=transaction_type.value,
                quantity_change=quantity_change,
                previous=previous_quantity,
                new=new_quantity,
                exc_info=True,
            )
            return None
        return entry

    def history(
        self,
        product_id: str,
        variation_id: str | None = None,
        limit: int = 50,
    ) -> list[InventoryTransaction]:
        return self._transaction_repo.list_for_product(
            product_id, variation_id=variation_id, limit=limit
        )

    def for_order(self, order_id: str) -> list[InventoryTransaction]:
        return self._transaction_repo.list_for_order(order_id)

    @staticmethod
    def summarize(entries: list[InventoryTransaction]) -> HistorySummary:
        """Derive totals from a newest-first list of entries."""

        def of_type(kind: TransactionType) -> list[InventoryTransaction]:
            return [e for e in entries if e.transaction_type is kind]

        sales = of_type(TransactionType.SALE)
        returns = of_type(TransactionType.RETURN)
        return HistorySummary(
            total_transactions=len(entries),
            sales=len(sales),
            returns=len(returns),
            adjustments=len(of_type(TransactionType.ADJUSTMENT)),
            restocks=len(of_type(TransactionType.RESTOCK)),
            total_sold=sum(abs(e.quantity_change) for e in sales),
            total_returned=sum(e.quantity_change for e in returns),
            current_stock=entries[0].new_quantity if entries else 0,
        )
