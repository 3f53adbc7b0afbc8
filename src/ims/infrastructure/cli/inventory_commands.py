"""CLI commands for inventory management."""

from __future__ import annotations

import click

from ims.application.adjust_stock import AdjustStockHandler
from ims.application.bulk_update_stock import BulkUpdateStockHandler
from ims.application.recalculate_product import RecalculateProductHandler
from ims.application.restock_stock import RestockHandler
from ims.application.show_inventory_history import ShowInventoryHistoryHandler
from ims.application.show_low_stock import ShowLowStockHandler
from ims.domain.exceptions import DomainException
from ims.domain.model.stock import LowStockProduct, StockMovement, StockUpdate
from ims.infrastructure.bootstrap import inventory_service
from ims.infrastructure.config import get_settings


def _parse_update(raw: str) -> StockUpdate:
    """Parse 'VariationId:Qty[:Reason]' into a StockUpdate."""
    parts = raw.split(":", 2)
    if len(parts) < 2:
        raise click.BadParameter(
            f"Invalid update '{raw}'. Expected 'VariationId:Quantity[:Reason]'."
        )
    try:
        quantity = int(parts[1])
    except ValueError:
        raise click.BadParameter(f"Invalid quantity '{parts[1]}' for '{parts[0]}'.")
    reason = parts[2].strip() if len(parts) == 3 else None
    return StockUpdate(variation_id=parts[0].strip(), quantity=quantity, reason=reason or None)


def _echo_movement(movement: StockMovement) -> None:
    target = movement.variation_id or movement.product_id
    click.echo(
        f"{movement.transaction_type.value.capitalize()} applied to {target}: "
        f"{movement.previous_quantity} → {movement.new_quantity} "
        f"({movement.quantity_change:+d})"
    )


@click.command("adjust")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variation", "variation_id", default=None, help="Variation ID, if any.")
@click.option("--change", "quantity_change", required=True, type=int, help="Signed quantity change.")
@click.option("--reason", required=True, help="Why the stock is being corrected.")
@click.option("--by", "created_by", default=None, help="Who is adjusting.")
def inventory_adjust(
    product_id: str,
    variation_id: str | None,
    quantity_change: int,
    reason: str,
    created_by: str | None,
) -> None:
    """Manually adjust stock for a product or variation."""
    handler = AdjustStockHandler(inventory=inventory_service())

    try:
        movement = handler.handle(
            product_id,
            variation_id,
            quantity_change,
            reason,
            created_by or get_settings().default_actor,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_movement(movement)


@click.command("restock")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variation", "variation_id", default=None, help="Variation ID, if any.")
@click.option("--quantity", required=True, type=int, help="Units received.")
@click.option("--notes", default=None, help="Delivery notes.")
@click.option("--by", "created_by", default=None, help="Who received the stock.")
def inventory_restock(
    product_id: str,
    variation_id: str | None,
    quantity: int,
    notes: str | None,
    created_by: str | None,
) -> None:
    """Receive new stock for a product or variation."""
    handler = RestockHandler(inventory=inventory_service())

    try:
        movement = handler.handle(
            product_id, variation_id, quantity, notes, created_by or get_settings().default_actor
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _echo_movement(movement)


@click.command("bulk-update")
@click.option(
    "--update", "raw_updates", multiple=True, required=True,
    help="'VariationId:Qty[:Reason]'; repeat for each variation.",
)
@click.option("--by", "created_by", default=None, help="Who is updating.")
def inventory_bulk_update(raw_updates: tuple[str, ...], created_by: str | None) -> None:
    """Adjust stock for several variations at once."""
    updates = [_parse_update(raw) for raw in raw_updates]
    handler = BulkUpdateStockHandler(inventory=inventory_service())

    try:
        result = handler.handle(updates, created_by or get_settings().default_actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Bulk update complete: {result.success} succeeded, {result.failed} failed "
        f"(of {len(updates)})"
    )
    for error in result.errors:
        click.echo(f"  - {error}", err=True)
    if result.failed:
        raise SystemExit(1)


def _echo_low_stock(title: str, products: list[LowStockProduct]) -> None:
    click.echo(f"{title} ({len(products)})")
    for p in products:
        click.echo(f"  {p.id:<10} {p.name:<30} {p.current_stock:>6} / {p.threshold}")


@click.command("low-stock")
@click.option("--threshold", default=None, type=int, help="Stock level to flag at (defaults to settings).")
def inventory_low_stock(threshold: int | None) -> None:
    """Show products and variations running out of stock."""
    handler = ShowLowStockHandler(
        inventory=inventory_service(),
        default_threshold=get_settings().low_stock_threshold,
    )

    try:
        overview = handler.handle(threshold)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    summary = overview.summary
    click.echo(
        f"Low stock at threshold {overview.threshold}: {summary.total_low_stock} "
        f"(out {summary.out_of_stock}, critical {summary.critical}, low {summary.low})"
    )
    _echo_low_stock("Out of stock", overview.out_of_stock)
    _echo_low_stock("Critical", overview.critical)
    _echo_low_stock("Low", overview.low)


@click.command("history")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--variation", "variation_id", default=None, help="Only this variation's entries.")
@click.option("--limit", default=50, type=int, help="Maximum entries to show.")
def inventory_history(product_id: str, variation_id: str | None, limit: int) -> None:
    """Show the stock ledger for a product or variation."""
    handler = ShowInventoryHistoryHandler(inventory=inventory_service())

    try:
        history = handler.handle(product_id, variation_id, limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not history.entries:
        click.echo("No inventory transactions found.")
        return

    click.echo(
        f"{'When':<17} {'Type':<11} {'Change':>7} {'Before':>7} {'After':>7} "
        f"{'Order':<11} {'By':<10} Notes"
    )
    click.echo("-" * 90)
    for e in history.entries:
        click.echo(
            f"{e.created_at.strftime('%Y-%m-%d %H:%M'):<17} {e.transaction_type.value:<11} "
            f"{e.quantity_change:>+7d} {e.previous_quantity:>7} {e.new_quantity:>7} "
            f"{e.order_id or '':<11} {e.created_by:<10} {e.notes}"
        )

    s = history.summary
    click.echo()
    click.echo(
        f"{s.total_transactions} transactions: {s.sales} sales, {s.returns} returns, "
        f"{s.adjustments} adjustments, {s.restocks} restocks"
    )
    click.echo(f"Sold {s.total_sold}, returned {s.total_returned}, current stock {s.current_stock}")


@click.command("recalculate")
@click.option("--product", "product_id", required=True, help="Product ID.")
def inventory_recalculate(product_id: str) -> None:
    """Re-derive a product's available units and status from its stock."""
    handler = RecalculateProductHandler(inventory=inventory_service())

    try:
        product = handler.handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Product #{product.id}: available {product.available_units}, "
        f"reserved {product.reserved_units}, status {product.stock_status.value}"
    )
