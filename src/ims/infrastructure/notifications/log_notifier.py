"""OrderNotifier that records confirmations in the log.

Stands in for the e-mail sender, which lives outside this service.
"""

from __future__ import annotations

import structlog

from ims.application.notifier import OrderNotifier
from ims.domain.model.order import Order

logger = structlog.get_logger(__name__)


class LogNotifier(OrderNotifier):

    def order_placed(self, order: Order) -> None:
        logger.info(
            "Order confirmation",
            order_id=order.id,
            customer_id=order.customer_id,
            total=str(order.total),
            items=len(order.items),
        )
