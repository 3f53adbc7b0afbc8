"""JSON-file-backed implementation of TransactionRepository (append-only)."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from ims.domain.model.transaction import InventoryTransaction, TransactionType
from ims.domain.repository.transaction_repository import TransactionRepository
from ims.infrastructure.persistence.json_file import JsonFile


class JsonTransactionRepository(TransactionRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- TransactionRepository interface --------------------------------------

    def add(self, transaction: InventoryTransaction) -> None:
        self._file.append(self._to_raw(transaction))

    def list_for_product(
        self,
        product_id: str,
        variation_id: str | None = None,
        limit: int = 50,
    ) -> list[InventoryTransaction]:
        matching = [
            (position, self._to_domain(raw))
            for position, raw in enumerate(self._file.load())
            if raw["product_id"] == product_id
            and (variation_id is None or raw.get("variation_id") == variation_id)
        ]
        # Newest first; file order breaks timestamp ties.
        matching.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [entry for _, entry in matching[:limit]]

    def list_for_order(self, order_id: str) -> list[InventoryTransaction]:
        return [
            self._to_domain(raw) for raw in self._file.load()
            if raw.get("order_id") == order_id
        ]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(entry: InventoryTransaction) -> dict:
        return {
            "id": entry.id,
            "product_id": entry.product_id,
            "variation_id": entry.variation_id,
            "order_id": entry.order_id,
            "transaction_type": entry.transaction_type.value,
            "quantity_change": entry.quantity_change,
            "previous_quantity": entry.previous_quantity,
            "new_quantity": entry.new_quantity,
            "notes": entry.notes,
            "created_by": entry.created_by,
            "created_at": entry.created_at.isoformat(),
        }

    @staticmethod
    def _to_domain(raw: dict) -> InventoryTransaction:
        return InventoryTransaction(
            id=raw["id"],
            product_id=raw["product_id"],
            variation_id=raw.get("variation_id"),
            order_id=raw.get("order_id"),
            transaction_type=TransactionType(raw["transaction_type"]),
            quantity_change=raw["quantity_change"],
            previous_quantity=raw["previous_quantity"],
            new_quantity=raw["new_quantity"],
            notes=raw.get("notes", ""),
            created_by=raw.get("created_by", "system"),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
