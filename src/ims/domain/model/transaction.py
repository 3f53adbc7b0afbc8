"""InventoryTransaction: one immutable entry in the stock ledger.

Every stock mutation produces exactly one transaction capturing the
quantity before and after the change.  Entries are never updated.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class TransactionType(Enum):
    SALE = "sale"
    RETURN = "return"
    ADJUSTMENT = "adjustment"
    RESTOCK = "restock"


@dataclass(frozen=True)
class InventoryTransaction:
    """Audit record of a single stock mutation.

    ``quantity_change`` is the change that was *requested*; when the
    floor at zero engages, ``new_quantity - previous_quantity`` is
    smaller in magnitude than ``quantity_change``.
    """

    id: str
    product_id: str
    transaction_type: TransactionType
    quantity_change: int
    previous_quantity: int
    new_quantity: int
    variation_id: str | None = None
    order_id: str | None = None
    notes: str = ""
    created_by: str = "system"
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @staticmethod
    def record(
        product_id: str,
        transaction_type: TransactionType,
        quantity_change: int,
        previous_quantity: int,
        new_quantity: int,
        variation_id: str | None = None,
        order_id: str | None = None,
        notes: str | None = None,
        created_by: str | None = None,
    ) -> InventoryTransaction:
        """Create a new ledger entry with a fresh id and timestamp."""
        return InventoryTransaction(
            id=uuid.uuid4().hex,
            product_id=product_id,
            transaction_type=transaction_type,
            quantity_change=quantity_change,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            variation_id=variation_id,
            order_id=order_id,
            notes=notes or "",
            created_by=created_by or "system",
        )
