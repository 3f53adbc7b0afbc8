"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from ims.application.cancel_order import CancelOrderHandler
from ims.application.dto import OrderDTO, OrderItemSpec
from ims.application.place_order import PlaceOrderHandler
from ims.application.show_order import ShowOrderHandler
from ims.domain.exceptions import DomainException
from ims.domain.model.value_objects import Address
from ims.infrastructure.bootstrap import (
    inventory_service,
    order_notifier,
    order_repository,
    product_repository,
    variation_repository,
)
from ims.infrastructure.config import get_settings


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'P1:2,P2/P2-1:1' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId[/VariationId]:Quantity'."
            )
        ref, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for '{ref}'."
            )
        product_id, _, variation_id = ref.strip().partition("/")
        specs.append(
            OrderItemSpec(
                product_id=product_id,
                quantity=qty,
                variation_id=variation_id or None,
            )
        )
    return specs


def _parse_address(raw: str | None) -> Address | None:
    """Parse 'line1|city|postal code|country[|state]'."""
    if raw is None:
        return None
    parts = [p.strip() for p in raw.split("|")]
    if len(parts) not in (4, 5):
        raise click.BadParameter(
            f"Invalid address '{raw}'. Expected 'line1|city|postal code|country[|state]'."
        )
    line1, city, postal_code, country = parts[:4]
    state = parts[4] if len(parts) == 5 else ""
    try:
        return Address(
            line1=line1, city=city, postal_code=postal_code, country=country, state=state
        )
    except DomainException as exc:
        raise click.BadParameter(str(exc))


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order {dto.id}  (status={dto.status}, payment={dto.payment_status})")
    click.echo(f"Customer: {dto.customer_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Ship to:  {dto.shipping_address}")
    click.echo()
    click.echo(f"  {'Product':<30} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*57}")
    for item in dto.items:
        click.echo(
            f"  {item.product_name:<30} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*57}")
    click.echo(f"  {'Subtotal':<37} {dto.subtotal:>20}")
    click.echo(f"  {'Order Total':<37} {dto.total:>20}")


@click.command("place")
@click.option("--customer", default=None, help="Customer ID (guest if omitted).")
@click.option("--items", required=True, help="Items as 'ProductId[/VariationId]:Qty,...'.")
@click.option("--ship-to", "ship_to", required=True, help="Shipping address 'line1|city|postal|country[|state]'.")
@click.option("--bill-to", "bill_to", default=None, help="Billing address; defaults to the shipping address.")
@click.option("--payment-method", default="", help="Payment method label.")
@click.option("--note", default="", help="Customer note.")
@click.option("--shipping-cost", default="0", help="Shipping cost (e.g. 4.99).")
@click.option("--tax", default="0", help="Tax amount.")
@click.option("--discount", default="0", help="Discount amount.")
def order_place(
    customer: str | None,
    items: str,
    ship_to: str,
    bill_to: str | None,
    payment_method: str,
    note: str,
    shipping_cost: str,
    tax: str,
    discount: str,
) -> None:
    """Place an order: check stock, record the order, deduct stock."""
    specs = _parse_items(items)
    shipping = _parse_address(ship_to)
    billing = _parse_address(bill_to) if bill_to else shipping

    handler = PlaceOrderHandler(
        order_repo=order_repository(),
        product_repo=product_repository(),
        variation_repo=variation_repository(),
        inventory=inventory_service(),
        notifier=order_notifier(),
    )

    try:
        result = handler.handle(
            customer_id=customer,
            item_specs=specs,
            shipping_address=shipping,
            billing_address=billing,
            payment_method=payment_method,
            customer_note=note,
            shipping_cost=shipping_cost,
            tax_amount=tax,
            discount_amount=discount,
            actor=customer or get_settings().default_actor,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.completed:
        if result.unavailable_items:
            click.echo(f"{result.error}:", err=True)
            for item in result.unavailable_items:
                click.echo(
                    f"  - {item.name}: requested {item.requested}, available {item.available}",
                    err=True,
                )
        raise click.ClickException(result.error or "Order could not be completed")

    _display_order(result.order)  # type: ignore[arg-type]


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def order_show(order_id: str) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=order_repository())

    try:
        dto = handler.handle(order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("cancel")
@click.option("--id", "order_id", required=True, help="Order ID to cancel.")
@click.option("--by", "created_by", default=None, help="Who is cancelling.")
def order_cancel(order_id: str, created_by: str | None) -> None:
    """Cancel a pending order and return its stock."""
    handler = CancelOrderHandler(
        order_repo=order_repository(),
        inventory=inventory_service(),
    )

    try:
        handler.handle(order_id, actor=created_by or get_settings().default_actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order_id} cancelled, stock returned.")
