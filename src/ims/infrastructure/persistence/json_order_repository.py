"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from ims.domain.model.order import Order, OrderLineItem, OrderStatus, PaymentStatus
from ims.domain.model.value_objects import Address, Money, Quantity
from ims.domain.repository.order_repository import OrderRepository
from ims.infrastructure.persistence.json_file import JsonFile

ORDER_ID_PREFIX = "ORD-"


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file = JsonFile(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> str:
        numbers = [
            int(o["id"][len(ORDER_ID_PREFIX):])
            for o in self._file.load()
            if o["id"].startswith(ORDER_ID_PREFIX) and o["id"][len(ORDER_ID_PREFIX):].isdigit()
        ]
        return f"{ORDER_ID_PREFIX}{max(numbers, default=0) + 1:06d}"

    def get_by_id(self, order_id: str) -> Order | None:
        for raw in self._file.load():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def save(self, order: Order) -> None:
        # Id assignment and the write share the lock so two new orders never
        # draw the same number.
        with self._file.locked():
            if order.id is None:
                order.id = self.next_id()
            self._file.upsert(self._to_raw(order))

    def delete(self, order_id: str) -> None:
        self._file.remove(order_id)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _money(value: Money) -> str:
        return str(value.amount)

    @classmethod
    def _to_raw(cls, order: Order) -> dict:
        return {
            "id": order.id,
            "customer_id": order.customer_id,
            "status": order.status.value,
            "payment_status": order.payment_status.value,
            "payment_method": order.payment_method,
            "customer_note": order.customer_note,
            "shipping_address": order.shipping_address.to_dict(),
            "billing_address": order.billing_address.to_dict(),
            "shipping_cost": cls._money(order.shipping_cost),
            "tax_amount": cls._money(order.tax_amount),
            "discount_amount": cls._money(order.discount_amount),
            "created_at": order.created_at.isoformat(),
            "items": [
                {
                    "product_id": item.product_id,
                    "variation_id": item.variation_id,
                    "product_name": item.product_name,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "currency": item.unit_price.currency,
                }
                for item in order.items
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderLineItem(
                product_id=i["product_id"],
                variation_id=i.get("variation_id"),
                product_name=i["product_name"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", "USD")),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            customer_id=raw["customer_id"],
            items=items,
            shipping_address=Address.from_dict(raw["shipping_address"]),
            billing_address=Address.from_dict(raw["billing_address"]),
            payment_method=raw.get("payment_method", ""),
            customer_note=raw.get("customer_note", ""),
            shipping_cost=Money(Decimal(raw.get("shipping_cost", "0"))),
            tax_amount=Money(Decimal(raw.get("tax_amount", "0"))),
            discount_amount=Money(Decimal(raw.get("discount_amount", "0"))),
            status=OrderStatus(raw["status"]),
            payment_status=PaymentStatus(raw.get("payment_status", "unpaid")),
            created_at=datetime.fromisoformat(raw["created_at"]),
        )
